"""
Payments API Endpoints
Stripe payment intents, Square store checkout and appointment payments

Amounts: /create-payment-intent takes dollars, /square-payment and
/payments take cents.

Author: Phace Web Team
Date: 2025-03-25
"""
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from phace.api.schemas import (
    AppointmentPaymentRequest,
    CalculateOrderRequest,
    PaymentIntentRequest,
    SquarePaymentRequest,
    is_number,
)
from phace.services.square_payment_service import SquarePaymentService
from phace.services.stripe_service import StripeService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-payment-intent")
async def create_payment_intent(body: PaymentIntentRequest):
    if not is_number(body.amount) or body.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")

    try:
        intent = await StripeService().create_payment_intent(
            float(body.amount),
            items=body.items,
            shipping_address=body.shipping_address,
            currency=body.currency or "usd"
        )
    except Exception as e:
        logger.error(f"Payment intent error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create payment intent")

    return {"clientSecret": intent["clientSecret"], "paymentIntentId": intent["id"]}


@router.post("/square-payment")
async def square_payment(body: SquarePaymentRequest):
    """Create a Square order for the cart and charge the card token against it"""
    if not body.source_id or not body.amount or not body.currency or not body.items:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        payment = await SquarePaymentService().create_order_payment(
            body.source_id,
            body.amount,
            body.currency,
            body.items,
            shipping_address=body.shipping_address,
            location_id=body.location_id
        )
    except Exception as e:
        logger.error(f"Square payment error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "An unexpected error occurred")

    return {"payment": payment}


@router.post("/calculate-order")
async def calculate_order(body: CalculateOrderRequest):
    """Square's taxes and automatic discounts for a cart shipped to an address"""
    if not body.currency or not body.items or not body.shipping_address:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        order = await SquarePaymentService().calculate_order(
            body.currency,
            body.items,
            body.shipping_address,
            location_id=body.location_id
        )
    except Exception as e:
        logger.error(f"Square calculate order error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "An unexpected error occurred")

    return {"order": order}


@router.post("/payments")
async def appointment_payment(body: AppointmentPaymentRequest):
    if not body.nonce or not body.amount or not body.appointment_id:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        payment = await SquarePaymentService().create_payment(body.nonce, body.amount, body.appointment_id)
    except Exception as e:
        logger.error(f"Payment processing error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process payment", "details": str(e)}
        )

    return {"paymentId": payment.get("id"), "status": payment.get("status")}
