"""
Orders API Endpoints
Records store orders after checkout and lists a customer's orders

Author: Phace Web Team
Date: 2025-02-11
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from phace.api.schemas import OrderCreateRequest
from phace.repositories.order_repository import OrderRepository
from phace.services.cart import checkout_totals
from phace.services.coupon_service import CouponService
from phace.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


def _notify(order) -> None:
    """Order emails; a failure here never fails the order"""
    try:
        email_service = EmailService()
    except ValueError as e:
        logger.warning(f"Order emails skipped for {order.id}: {e}")
        return

    if order.customer_email:
        try:
            email_service.send_order_confirmation(order, order.customer_email)
        except Exception as e:
            logger.warning(f"Confirmation email for order {order.id} failed: {e}")

    try:
        email_service.send_admin_notification(order)
    except Exception as e:
        logger.warning(f"Admin notification for order {order.id} failed: {e}")


def _redeem(coupon_service: CouponService, code: str, order_id: str) -> None:
    """Count the coupon use; the order is already stored, so a failure is only logged"""
    try:
        coupon_service.apply_coupon(code)
    except Exception as e:
        logger.warning(f"Usage count for coupon {code} (order {order_id}) not updated: {e}")


@router.post("")
async def create_order(body: OrderCreateRequest):
    """
    Record a paid or pending order

    When no total is sent it is priced from the items (and couponCode, which
    only discounts the item subtotal).
    """
    if not body.user_id or not body.items:
        raise HTTPException(status_code=400, detail="User ID and items are required")

    try:
        coupon_service = CouponService()
        coupon = coupon_service.validate_coupon(body.coupon_code) if body.coupon_code else None

        total = body.total
        if total is None:
            total = checkout_totals(body.items, coupon=coupon)["total"]

        order_data = {
            "userId": body.user_id,
            "items": body.items,
            "total": total,
            "shippingAddress": body.shipping_address,
            "customerEmail": body.customer_email,
            "paymentId": body.payment_id,
            "paymentProcessor": body.payment_processor,
            "notes": body.notes,
        }
        if body.currency:
            order_data["currency"] = body.currency
        if body.payment_id:
            order_data["status"] = "paid"

        order = OrderRepository().create(order_data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid order: {e.errors()[0].get('msg')}")
    except Exception as e:
        logger.error(f"Order error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create order")

    logger.info(f"Order {order.id} created for user {order.user_id}")
    if coupon is not None:
        _redeem(coupon_service, coupon.code, order.id)
    _notify(order)

    return {"success": True, "order": order.to_dict()}


@router.get("")
async def list_user_orders(user_id: Optional[str] = Query(None, alias="userId")):
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    try:
        orders = OrderRepository().find_by_user(user_id)
        return [order.to_dict() for order in orders]
    except Exception as e:
        logger.error(f"Error fetching orders for {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch orders")
