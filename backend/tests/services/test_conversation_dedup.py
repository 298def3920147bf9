"""One conversation per participant pair, idempotent sends and read state."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.conversation import Conversation, make_pair_key
from app.models.message import Message
from app.principal import ActorContext
from app.repositories.conversation_repository import ConversationRepository
from app.services.conversation_service import ConversationService


@pytest.fixture
def service(db):
    return ConversationService(db)


def test_pair_key_is_order_independent():
    assert make_pair_key("B", "A") == make_pair_key("A", "B") == "A:B"


class TestGetOrCreate:
    def test_both_orders_resolve_to_one_row(self, db, service, influencer, subscriber):
        first, created = service.get_or_create_conversation(subscriber.id, influencer.id)
        second, created_again = service.get_or_create_conversation(influencer.id, subscriber.id)

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert db.query(Conversation).count() == 1

    def test_creator_order_is_kept(self, service, influencer, subscriber):
        conversation, _ = service.get_or_create_conversation(subscriber.id, influencer.id)
        assert conversation.participant1_id == subscriber.id
        assert conversation.participant2_id == influencer.id

    @pytest.mark.parametrize("pair", [("same", "same"), ("", "x")])
    def test_rejects_degenerate_pairs(self, service, pair):
        with pytest.raises(ValidationException) as exc_info:
            service.get_or_create_conversation(*pair)
        assert exc_info.value.code == "INVALID_PARTICIPANTS"

    def test_insert_race_resolves_to_winner(self, db, influencer, subscriber, monkeypatch):
        repository = ConversationRepository(db)
        winner, _ = repository.get_or_create(influencer.id, subscriber.id)
        db.commit()

        real_find = repository.find_by_pair
        calls = []

        def stale_then_real(a, b):
            calls.append((a, b))
            return None if len(calls) == 1 else real_find(a, b)

        monkeypatch.setattr(repository, "find_by_pair", stale_then_real)

        conversation, created = repository.get_or_create(subscriber.id, influencer.id)
        assert created is False
        assert conversation.id == winner.id
        assert db.query(Conversation).count() == 1

    def test_duplicate_pair_is_rejected_by_store(self, db, influencer, subscriber):
        db.add(Conversation(participant1_id=influencer.id, participant2_id=subscriber.id))
        db.commit()
        db.add(Conversation(participant1_id=subscriber.id, participant2_id=influencer.id))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestMessages:
    def test_send_to_user_starts_conversation(self, db, service, subscriber_actor, influencer):
        message = service.send_message(subscriber_actor, "  hello there ", receiver_id=influencer.id)

        assert message.content == "hello there"
        assert message.receiver_id == influencer.id
        conversation = db.get(Conversation, message.conversation_id)
        assert conversation.last_message_at is not None

    def test_client_ref_makes_send_idempotent(self, db, service, subscriber_actor, influencer):
        first = service.send_message(
            subscriber_actor, "hi", receiver_id=influencer.id, client_ref="tmp-1"
        )
        retry = service.send_message(
            subscriber_actor, "hi", receiver_id=influencer.id, client_ref="tmp-1"
        )

        assert retry.id == first.id
        assert db.query(Message).count() == 1

    def test_client_ref_race_returns_stored_message(
        self, db, service, subscriber_actor, influencer, monkeypatch
    ):
        stored = service.send_message(
            subscriber_actor, "hi", receiver_id=influencer.id, client_ref="tmp-2"
        )
        real_find = service.message_repository.find_by_client_ref
        calls = []

        def stale_then_real(sender_id, client_ref):
            calls.append(client_ref)
            return None if len(calls) == 1 else real_find(sender_id, client_ref)

        monkeypatch.setattr(service.message_repository, "find_by_client_ref", stale_then_real)

        again = service.send_message(
            subscriber_actor, "hi", conversation_id=stored.conversation_id, client_ref="tmp-2"
        )
        assert again.id == stored.id
        assert db.query(Message).count() == 1

    def test_same_ref_from_different_senders_is_allowed(
        self, db, service, subscriber_actor, influencer_actor
    ):
        sent = service.send_message(
            subscriber_actor, "ping", receiver_id=influencer_actor.id, client_ref="ref"
        )
        reply = service.send_message(
            influencer_actor, "pong", conversation_id=sent.conversation_id, client_ref="ref"
        )
        assert reply.id != sent.id

    def test_content_rules(self, service, subscriber_actor, influencer):
        with pytest.raises(ValidationException) as empty:
            service.send_message(subscriber_actor, "   ", receiver_id=influencer.id)
        assert empty.value.code == "EMPTY_MESSAGE"

        with pytest.raises(ValidationException) as too_long:
            service.send_message(subscriber_actor, "x" * 4001, receiver_id=influencer.id)
        assert too_long.value.code == "MESSAGE_TOO_LONG"

        with pytest.raises(ValidationException):
            service.send_message(subscriber_actor, "hi")

    def test_unknown_receiver(self, service, subscriber_actor):
        with pytest.raises(NotFoundException):
            service.send_message(subscriber_actor, "hi", receiver_id="01HZZZZZZZZZZZZZZZZZZZZZZZ")

    def test_outsider_cannot_read_or_write(self, service, subscriber_actor, influencer, other_actor):
        message = service.send_message(subscriber_actor, "hi", receiver_id=influencer.id)

        with pytest.raises(ForbiddenException):
            service.list_messages(other_actor, message.conversation_id)
        with pytest.raises(ForbiddenException):
            service.send_message(other_actor, "me too", conversation_id=message.conversation_id)

    def test_unread_counts_and_mark_read(self, service, subscriber_actor, influencer):
        influencer_actor = ActorContext.from_profile(influencer)
        first = service.send_message(subscriber_actor, "one", receiver_id=influencer.id)
        service.send_message(subscriber_actor, "two", conversation_id=first.conversation_id)
        service.send_message(influencer_actor, "reply", conversation_id=first.conversation_id)

        [summary] = service.list_conversations(influencer_actor)
        assert summary.other_user_id == subscriber_actor.id
        assert summary.unread_count == 2

        assert service.mark_read(influencer_actor, first.conversation_id) == 2
        assert service.mark_read(influencer_actor, first.conversation_id) == 0
        assert service.list_conversations(subscriber_actor)[0].unread_count == 1

    def test_messages_oldest_first(self, service, subscriber_actor, influencer):
        first = service.send_message(subscriber_actor, "one", receiver_id=influencer.id)
        service.send_message(subscriber_actor, "two", conversation_id=first.conversation_id)

        contents = [m.content for m in service.list_messages(subscriber_actor, first.conversation_id)]
        assert contents == ["one", "two"]
