from decimal import Decimal

import pytest

from app.core.enums import RoleName
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.streaming_settings import StreamingSettings
from app.principal import ActorContext
from app.schemas.streaming_settings import StreamingSettingsUpdate
from app.services.streaming_settings_service import StreamingSettingsService
from tests.factories.streaming_builders import create_profile


@pytest.fixture
def fresh_influencer(db):
    return create_profile(db, RoleName.INFLUENCER)


def test_first_access_creates_disabled_defaults(db, fresh_influencer):
    actor = ActorContext.from_profile(fresh_influencer)
    settings_row = StreamingSettingsService(db).get(actor)

    assert settings_row.is_enabled is False
    assert Decimal(settings_row.price_15min) == Decimal("120.00")
    assert settings_row.max_bookings_per_day == 5
    assert db.query(StreamingSettings).count() == 1


def test_subscribers_have_no_settings(db, subscriber_actor):
    with pytest.raises(ForbiddenException):
        StreamingSettingsService(db).get(subscriber_actor)


def test_partial_update_keeps_other_fields(db, fresh_influencer):
    actor = ActorContext.from_profile(fresh_influencer)
    service = StreamingSettingsService(db)

    updated = service.update(
        actor, StreamingSettingsUpdate(is_enabled=True, price_15min="150.005", max_bookings_per_day=3)
    )

    assert updated.is_enabled is True
    assert updated.price_15min == Decimal("150.01")
    assert updated.max_bookings_per_day == 3
    assert Decimal(updated.price_30min) == Decimal("200.00")


def test_negative_price_rejected(db, fresh_influencer):
    actor = ActorContext.from_profile(fresh_influencer)
    with pytest.raises(ValidationException) as exc_info:
        StreamingSettingsService(db).update(actor, StreamingSettingsUpdate(price_5min=-1))
    assert exc_info.value.code == "NEGATIVE_PRICE"
    assert exc_info.value.details == {"field": "price_5min"}


def test_public_view_of_unconfigured_influencer(db, fresh_influencer):
    view = StreamingSettingsService(db).get_for_influencer(fresh_influencer.id)

    assert view.is_enabled is False
    assert view.price_for(60) == Decimal("350.00")
    assert view.max_bookings_per_day == 5
    # Reading never persists a row
    assert db.query(StreamingSettings).count() == 0


def test_public_view_requires_influencer(db, subscriber):
    with pytest.raises(NotFoundException):
        StreamingSettingsService(db).get_for_influencer(subscriber.id)
