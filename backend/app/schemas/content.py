"""Content, purchase and subscription schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from .base import Money, StandardizedModel, StrictRequestModel


class ContentCreate(StrictRequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: Literal["image", "video", "text"] = "image"
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_free: bool = False
    is_purchasable: bool = False
    price: Money = Field(default=Money("0"))

    @model_validator(mode="after")
    def _check_pricing(self) -> "ContentCreate":
        if self.price < 0:
            raise ValueError("price must not be negative")
        if self.is_purchasable and not self.is_free and self.price <= 0:
            raise ValueError("purchasable content needs a positive price")
        return self


class ContentReviewRequest(StrictRequestModel):
    decision: Literal["approve", "reject"]


class ContentPostResponse(StandardizedModel):
    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    type: str
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_free: bool
    is_purchasable: bool
    price: Money
    status: str
    created_at: datetime


class ContentAccessResponse(StandardizedModel):
    content_id: str
    can_view: bool


class ContentItemView(StandardizedModel):
    """A post annotated with whether the current viewer may open it."""

    post: ContentPostResponse
    can_view: bool


class PaymentRequest(StrictRequestModel):
    payment_method: str = Field("card", min_length=1, max_length=50)


class PurchaseResponse(StandardizedModel):
    id: str
    user_id: str
    content_id: str
    price_paid: Money
    created_at: datetime


class SubscribeRequest(PaymentRequest):
    influencer_id: str


class SubscriptionResponse(StandardizedModel):
    id: str
    subscriber_id: str
    influencer_id: str
    status: str
    price_paid: Optional[Money] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
