"""
Unit tests for CouponService and the discount arithmetic

The repository is a MagicMock; no table is touched.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from phace.domain.coupon import Coupon, CouponType
from phace.services.coupon_service import CouponService, apply_discount, calculate_discount


class TestDiscountArithmetic:
    """Test calculate_discount / apply_discount"""

    def test_percentage_discount(self, percentage_coupon):
        assert calculate_discount(percentage_coupon, 200.0) == pytest.approx(20.0)

    def test_fixed_discount(self, fixed_coupon):
        assert calculate_discount(fixed_coupon, 100.0) == 25

    def test_fixed_discount_capped_at_subtotal(self, fixed_coupon):
        result = apply_discount(fixed_coupon, 10.0)

        assert result.discount_amount == 10.0
        assert result.final_amount == 0.0

    def test_final_amount_never_negative(self):
        coupon = Coupon(code="ALL", name="Everything", type=CouponType.PERCENTAGE, value=100)

        result = apply_discount(coupon, 49.99)

        assert result.final_amount == 0.0

    @pytest.mark.parametrize("subtotal", [0.01, 9.99, 25.0, 133.33, 1000.0])
    def test_final_amount_within_bounds(self, subtotal, percentage_coupon, fixed_coupon):
        for coupon in (percentage_coupon, fixed_coupon):
            result = apply_discount(coupon, subtotal)
            assert 0 <= result.final_amount <= subtotal

    def test_result_serialises_camel_case(self, percentage_coupon):
        data = apply_discount(percentage_coupon, 50.0).to_dict()

        assert data == {
            "code": "WELCOME10",
            "name": "10% Welcome Discount",
            "type": "PERCENTAGE",
            "value": 10.0,
            "discountAmount": pytest.approx(5.0),
            "finalAmount": pytest.approx(45.0),
        }


class TestValidateCoupon:
    """Test which coupons are redeemable"""

    def setup_method(self):
        self.repo = MagicMock()
        self.service = CouponService(repository=self.repo)

    def test_unknown_code_returns_none(self):
        self.repo.get.return_value = None

        assert self.service.validate_coupon("nope") is None

    def test_active_coupon_is_returned(self, percentage_coupon):
        self.repo.get.return_value = percentage_coupon

        assert self.service.validate_coupon("welcome10") is percentage_coupon
        self.repo.get.assert_called_once_with("welcome10")

    def test_inactive_coupon_rejected(self, percentage_coupon):
        self.repo.get.return_value = percentage_coupon.model_copy(update={"is_active": False})

        assert self.service.validate_coupon("WELCOME10") is None

    def test_expired_coupon_rejected(self, fixed_coupon):
        expired = fixed_coupon.model_copy(update={
            "expires_at": datetime.now(timezone.utc) - timedelta(days=1)
        })
        self.repo.get.return_value = expired

        assert self.service.validate_coupon("SAVE25") is None

    def test_naive_expiry_treated_as_utc(self, fixed_coupon):
        now = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        coupon = fixed_coupon.model_copy(update={"expires_at": datetime(2030, 1, 1, 13, 0)})
        self.repo.get.return_value = coupon

        assert self.service.validate_coupon("SAVE25", now=now) is coupon

    def test_exhausted_coupon_rejected(self, percentage_coupon):
        self.repo.get.return_value = percentage_coupon.model_copy(update={"current_usage": 100})

        assert self.service.validate_coupon("WELCOME10") is None

    def test_zero_usage_limit_means_unlimited(self, fixed_coupon):
        coupon = fixed_coupon.model_copy(update={"usage_limit": 0, "current_usage": 5000})
        self.repo.get.return_value = coupon

        assert self.service.validate_coupon("SAVE25") is coupon


class TestCouponManagement:

    def setup_method(self):
        self.repo = MagicMock()
        self.service = CouponService(repository=self.repo)

    def test_create_coupon_upper_cases_code(self):
        self.repo.create.return_value = True

        coupon = self.service.create_coupon("spring20", "Spring", CouponType.PERCENTAGE, 20)

        assert coupon.code == "SPRING20"
        assert coupon.current_usage == 0
        assert coupon.created_at is not None
        stored = self.repo.create.call_args[0][0]
        assert stored.code == "SPRING20"

    def test_create_duplicate_returns_none(self):
        self.repo.create.return_value = False

        assert self.service.create_coupon("SAVE25", "Dup", CouponType.FIXED_AMOUNT, 25) is None

    def test_list_seeds_missing_examples(self, percentage_coupon):
        self.repo.get.side_effect = lambda code: percentage_coupon if code == "WELCOME10" else None
        self.repo.create.return_value = True
        self.repo.list_all.return_value = [percentage_coupon]

        coupons = self.service.list_coupons()

        assert coupons == [percentage_coupon]
        created_codes = [c[0][0].code for c in self.repo.create.call_args_list]
        assert created_codes == ["SAVE25"]

    def test_apply_coupon_counts_usage(self):
        self.repo.increment_usage.return_value = True

        assert self.service.apply_coupon("WELCOME10") is True
        self.repo.increment_usage.assert_called_once_with("WELCOME10")

    def test_update_and_delete_pass_through(self):
        self.repo.update.return_value = True
        self.repo.delete.return_value = False

        assert self.service.update_coupon("SAVE25", {"isActive": False}) is True
        assert self.service.delete_coupon("NOPE") is False
        self.repo.update.assert_called_once_with("SAVE25", {"isActive": False})
