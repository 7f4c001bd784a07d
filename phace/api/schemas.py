"""
Request bodies for the JSON API

Every field is optional at the model level; handlers check presence
themselves so a missing field answers 400 with a readable message instead of
a field-by-field validation report. Bodies use camelCase keys.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def is_number(value: Any) -> bool:
    """True for JSON numbers (booleans excluded)"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Auth

class SignUpRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class SignInRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SetNewPasswordRequest(RequestModel):
    email: Optional[str] = None
    new_password: Optional[str] = None
    session: Optional[str] = None


class ConfirmRequest(RequestModel):
    email: Optional[str] = None
    code: Optional[str] = None


class ForgotPasswordRequest(RequestModel):
    email: Optional[str] = None


class ResetPasswordRequest(RequestModel):
    email: Optional[str] = None
    code: Optional[str] = None
    new_password: Optional[str] = None


class UpdatePhoneRequest(RequestModel):
    phone: Optional[str] = None


# Admin

class AdminLoginRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class OrderUpdateRequest(RequestModel):
    order_id: Optional[str] = None
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None


class WaitlistUpdateRequest(RequestModel):
    id: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


# Coupons and discounts

class CouponCreateRequest(RequestModel):
    code: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    value: Any = None
    expires_at: Optional[str] = None
    usage_limit: Optional[int] = None


class DiscountValidateRequest(RequestModel):
    code: Optional[str] = None
    order_amount: Any = None
    cart_items: Optional[List[Dict[str, Any]]] = None


class DiscountCreateRequest(RequestModel):
    code: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    value: Any = None
    product_ids: Optional[List[str]] = None
    expires_at: Optional[str] = None
    usage_limit: Optional[int] = None


# Orders and payments

class OrderCreateRequest(RequestModel):
    user_id: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    total: Optional[float] = None
    currency: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    customer_email: Optional[str] = None
    payment_id: Optional[str] = None
    payment_processor: Optional[str] = None
    coupon_code: Optional[str] = None
    notes: Optional[str] = None


class PaymentIntentRequest(RequestModel):
    amount: Any = None
    currency: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    shipping_address: Optional[Dict[str, Any]] = None


class SquarePaymentRequest(RequestModel):
    source_id: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    location_id: Optional[str] = None


class CalculateOrderRequest(RequestModel):
    currency: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    location_id: Optional[str] = None


class AppointmentPaymentRequest(RequestModel):
    nonce: Optional[str] = None
    amount: Optional[int] = None
    appointment_id: Optional[str] = None


class UploadUrlRequest(RequestModel):
    file_name: Optional[str] = None
    content_type: Optional[str] = None


# Booking

class AppointmentCreateRequest(RequestModel):
    service_id: Optional[str] = None
    staff_id: Optional[str] = None
    start_time: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    addons: List[str] = []
    notes: Optional[str] = None


class AppointmentUpdateRequest(RequestModel):
    appointment_id: Optional[str] = None
    status: Optional[str] = None


class WaitlistCreateRequest(RequestModel):
    service_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    preferred_dates: Optional[List[str]] = None
    preferred_staff_ids: Optional[List[str]] = None


class BlockedTimeCreateRequest(RequestModel):
    staff_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    recurring: Optional[Dict[str, Any]] = None
