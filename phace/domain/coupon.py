"""
Coupon Domain Models

A coupon is keyed by its upper-cased code in the coupons table.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from phace.core.aws import from_dynamo, to_dynamo


class CouponType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


def _as_utc(value: datetime) -> datetime:
    # Dates entered without an offset are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Coupon(BaseModel):
    """
    Coupon domain model

    Fields:
        code: Upper-cased redemption code (table key)
        name: Display name
        type: PERCENTAGE (value is a percent) or FIXED_AMOUNT (value in dollars)
        value: Discount value
        is_active: Disabled coupons never validate
        expires_at: Optional expiry instant
        usage_limit: Optional maximum redemptions
        current_usage: Redemptions so far
    """
    code: str
    name: str
    type: CouponType
    value: float = Field(..., gt=0)
    is_active: bool = True
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    current_usage: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return _as_utc(self.expires_at) < _as_utc(now)

    @property
    def is_exhausted(self) -> bool:
        # usage_limit of None or 0 means unlimited
        return bool(self.usage_limit) and self.current_usage >= self.usage_limit

    def is_redeemable(self, now: Optional[datetime] = None) -> bool:
        return self.is_active and not self.is_expired(now) and not self.is_exhausted

    @classmethod
    def from_item(cls, item: dict) -> "Coupon":
        return cls.model_validate(from_dynamo(item))

    def to_item(self) -> dict:
        return to_dynamo(self.model_dump(by_alias=True, mode="json"))

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DiscountResult(BaseModel):
    """Outcome of applying a coupon to an order subtotal"""
    code: str
    name: str
    type: CouponType
    value: float
    discount_amount: float
    final_amount: float

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
