"""
Coupons API Endpoints
Store coupon management, checkout discount validation and Square discount
codes

Author: Phace Web Team
Date: 2025-04-09
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from phace.api.schemas import (
    CouponCreateRequest,
    DiscountCreateRequest,
    DiscountValidateRequest,
    is_number,
)
from phace.core.auth import require_admin_token
from phace.domain.coupon import CouponType
from phace.services.coupon_service import CouponService
from phace.services.square_payment_service import SquarePaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


def _coupon_type(value: str) -> CouponType:
    try:
        return CouponType(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Type must be PERCENTAGE or FIXED_AMOUNT")


def _parse_expiry(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid expiresAt date")


@router.post("/coupon/create")
async def create_coupon(body: CouponCreateRequest):
    if not body.code or not body.name or not body.type or not is_number(body.value):
        raise HTTPException(status_code=400, detail="Code, name, type, and value are required")

    if body.value <= 0:
        raise HTTPException(status_code=400, detail="Value must be greater than 0")

    coupon_type = _coupon_type(body.type)
    if coupon_type == CouponType.PERCENTAGE and body.value > 100:
        raise HTTPException(status_code=400, detail="Percentage cannot exceed 100%")

    expires_at = _parse_expiry(body.expires_at)

    try:
        coupon = CouponService().create_coupon(
            code=body.code,
            name=body.name,
            type=coupon_type,
            value=body.value,
            expires_at=expires_at,
            usage_limit=body.usage_limit
        )
    except Exception as e:
        logger.error(f"Error creating coupon: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if coupon is None:
        raise HTTPException(status_code=400, detail="Failed to create coupon. Code may already exist.")

    return {"success": True, "coupon": coupon.to_dict()}


@router.get("/coupon/list")
async def list_coupons():
    try:
        coupons = CouponService().list_coupons()
    except Exception as e:
        logger.error(f"Error listing coupons: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "coupons": [coupon.to_dict() for coupon in coupons]}


@router.post("/discount/validate")
async def validate_discount(body: DiscountValidateRequest):
    """
    Price a coupon against the cart subtotal

    Unknown, inactive, expired and used-up codes are not errors: they answer
    200 with valid=false.
    """
    if not body.code or not is_number(body.order_amount):
        return JSONResponse(
            status_code=400,
            content={"valid": False, "error": "Code and subtotal amount are required"}
        )

    if body.order_amount <= 0:
        return JSONResponse(
            status_code=400,
            content={"valid": False, "error": "Order amount must be greater than 0"}
        )

    try:
        service = CouponService()
        coupon = service.validate_coupon(body.code)
        if coupon is None:
            return {"valid": False, "error": "Invalid or expired discount code"}

        result = service.apply_discount(coupon, float(body.order_amount))
    except Exception as e:
        logger.error(f"Error validating discount: {e}")
        return JSONResponse(
            status_code=500,
            content={"valid": False, "error": "Internal server error"}
        )

    return {"valid": True, "discount": result.to_dict()}


@router.post("/discount/create")
async def create_discount(body: DiscountCreateRequest, claims: dict = Depends(require_admin_token)):
    """Create a Square catalog discount for a code (admin only)"""
    if not body.code or not body.name or not body.type or body.value is None:
        raise HTTPException(status_code=400, detail="Code, name, type, and value are required")

    if not is_number(body.value) or body.value <= 0:
        raise HTTPException(status_code=400, detail="Value must be greater than 0")

    coupon_type = _coupon_type(body.type)
    if coupon_type == CouponType.PERCENTAGE and body.value > 100:
        raise HTTPException(status_code=400, detail="Percentage cannot be greater than 100")

    expires_at = _parse_expiry(body.expires_at)

    try:
        discount_code = await SquarePaymentService().create_discount_code(
            body.code,
            body.name,
            coupon_type,
            float(body.value),
            product_ids=body.product_ids,
            expires_at=expires_at,
            usage_limit=body.usage_limit
        )
    except Exception as e:
        logger.error(f"Error creating discount code: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "discountCode": discount_code}
