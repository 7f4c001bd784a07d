"""
Coupon Service
Validates store coupons and computes discounts against an order subtotal

Discounts only ever apply to the subtotal; shipping is added afterwards by
the caller.

Author: Phace Web Team
Date: 2025-04-09
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from phace.domain.coupon import Coupon, CouponType, DiscountResult
from phace.repositories.coupon_repository import CouponRepository

logger = logging.getLogger(__name__)

# Seeded on first listing when missing
EXAMPLE_COUPONS = [
    {
        "code": "WELCOME10",
        "name": "10% Welcome Discount",
        "type": CouponType.PERCENTAGE,
        "value": 10,
        "usage_limit": 100,
    },
    {
        "code": "SAVE25",
        "name": "$25 Off Your Order",
        "type": CouponType.FIXED_AMOUNT,
        "value": 25,
    },
]


def calculate_discount(coupon: Coupon, subtotal: float) -> float:
    """
    Discount amount for a subtotal

    PERCENTAGE -> subtotal * value / 100
    FIXED_AMOUNT -> value, capped at the subtotal
    """
    if coupon.type == CouponType.PERCENTAGE:
        return subtotal * (coupon.value / 100)
    return min(coupon.value, subtotal)


def apply_discount(coupon: Coupon, subtotal: float) -> DiscountResult:
    """Discount and final amount; the final amount never drops below zero"""
    discount = calculate_discount(coupon, subtotal)
    return DiscountResult(
        code=coupon.code,
        name=coupon.name,
        type=coupon.type,
        value=coupon.value,
        discount_amount=discount,
        final_amount=max(0.0, subtotal - discount)
    )


class CouponService:
    """
    Service for coupon codes

    Handles:
    - Validation (active, not expired, usage limit not reached)
    - Discount arithmetic
    - Coupon CRUD and usage counting
    """

    def __init__(self, repository: CouponRepository = None):
        self.repository = repository or CouponRepository()

    def validate_coupon(self, code: str, now: Optional[datetime] = None) -> Optional[Coupon]:
        """
        Look up a redeemable coupon

        Returns:
            Coupon, or None when the code is unknown, inactive, expired or used up
        """
        coupon = self.repository.get(code)
        if coupon is None:
            return None

        if not coupon.is_redeemable(now):
            logger.info(f"Coupon {coupon.code} is not redeemable")
            return None

        return coupon

    calculate_discount = staticmethod(calculate_discount)
    apply_discount = staticmethod(apply_discount)

    def apply_coupon(self, code: str) -> bool:
        """Count one redemption; False when the coupon does not exist"""
        return self.repository.increment_usage(code)

    def create_coupon(self, code: str, name: str, type: CouponType, value: float,
                      expires_at: Optional[datetime] = None, usage_limit: Optional[int] = None,
                      is_active: bool = True) -> Optional[Coupon]:
        """
        Store a new coupon

        Returns:
            The stored coupon, or None when the code is already taken
        """
        coupon = Coupon(
            code=code.upper(),
            name=name,
            type=type,
            value=value,
            is_active=is_active,
            expires_at=expires_at,
            usage_limit=usage_limit,
            current_usage=0,
            created_at=datetime.now(timezone.utc)
        )
        if not self.repository.create(coupon):
            return None
        return coupon

    def _seed_example_coupons(self) -> None:
        for example in EXAMPLE_COUPONS:
            if self.repository.get(example["code"]) is None:
                self.create_coupon(**example)
                logger.info(f"Seeded example coupon {example['code']}")

    def list_coupons(self) -> List[Coupon]:
        self._seed_example_coupons()
        return self.repository.list_all()

    def update_coupon(self, code: str, updates: dict) -> bool:
        return self.repository.update(code, updates)

    def delete_coupon(self, code: str) -> bool:
        return self.repository.delete(code)
