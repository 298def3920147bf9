from types import SimpleNamespace

import pytest

from app.domain.access_gate import AccessFacts, can_view

OWNER = SimpleNamespace(id="01OWNER0000000000000000000")
VIEWER = SimpleNamespace(id="01VIEWER000000000000000000")


def _post(status="approved", is_free=False):
    return SimpleNamespace(owner_id=OWNER.id, status=status, is_free=is_free)


class TestUnapprovedContent:
    @pytest.mark.parametrize("status", ["draft", "pending_review", "rejected"])
    def test_only_owner_sees_unapproved(self, status):
        post = _post(status=status, is_free=True)
        assert can_view(OWNER, post, AccessFacts(is_owner=True)) is True
        assert can_view(VIEWER, post, AccessFacts(has_active_subscription_to_owner=True)) is False
        assert can_view(None, post, None) is False

    def test_owner_match_uses_ids_not_facts(self):
        # Facts claiming ownership do not open someone else's draft
        assert can_view(VIEWER, _post(status="draft"), AccessFacts(is_owner=True)) is False


class TestApprovedContent:
    def test_free_content_is_public(self):
        assert can_view(None, _post(is_free=True), None) is True

    def test_paid_content_denied_without_facts(self):
        assert can_view(VIEWER, _post(), AccessFacts()) is False
        assert can_view(None, _post(), None) is False

    @pytest.mark.parametrize(
        "facts",
        [
            AccessFacts(is_owner=True),
            AccessFacts(has_active_subscription_to_owner=True),
            AccessFacts(has_purchased_this_item=True),
        ],
    )
    def test_any_relationship_fact_grants_access(self, facts):
        assert can_view(VIEWER, _post(), facts) is True


def test_missing_content_is_denied():
    assert can_view(VIEWER, None, AccessFacts(is_owner=True)) is False


def test_truthy_non_bool_flags_do_not_grant():
    post = SimpleNamespace(owner_id=OWNER.id, status="approved", is_free="yes")
    assert can_view(VIEWER, post, AccessFacts()) is False
