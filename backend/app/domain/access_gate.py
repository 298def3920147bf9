"""Content access gate.

Decides whether a viewer may see a content post from the post's own flags and
the viewer's relationship facts. Pure and total: missing inputs count as a
denial, nothing here raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

APPROVED_STATUS = "approved"


@dataclass(frozen=True)
class AccessFacts:
    """Relationship facts between one viewer and one content post."""

    is_owner: bool = False
    has_active_subscription_to_owner: bool = False
    has_purchased_this_item: bool = False


NO_FACTS = AccessFacts()


def can_view(actor: Optional[Any], content: Optional[Any], facts: Optional[AccessFacts]) -> bool:
    """Return True when ``actor`` may view ``content``.

    Rules are evaluated in order, first match wins:
    non-approved content is visible to its owner only; free content is
    visible to everyone; otherwise ownership, an active subscription to the
    owner or a purchase of this item grants access.
    """
    if content is None:
        return False
    facts = facts or NO_FACTS
    actor_id = getattr(actor, "id", None)
    owner_id = getattr(content, "owner_id", None)

    if getattr(content, "status", None) != APPROVED_STATUS:
        return actor_id is not None and owner_id is not None and str(actor_id) == str(owner_id)

    if getattr(content, "is_free", False) is True:
        return True
    if facts.is_owner is True:
        return True
    if facts.has_active_subscription_to_owner is True:
        return True
    if facts.has_purchased_this_item is True:
        return True
    return False
