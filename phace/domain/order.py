"""
Order Domain Models

Orders live in the orders table under pk USER#<userId>, sk ORDER#<orderId>.

Author: Phace Web Team
Date: 2025-02-11
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from phace.core.aws import from_dynamo, to_dynamo


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """Line item captured at order time"""
    product_id: str
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price at order time")
    variation_name: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class ShippingAddress(BaseModel):
    name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "CA"

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Order(BaseModel):
    """
    Order domain model

    Fields:
        id: ORDER_<timestamp>_<random>
        user_id: Cognito sub of the buyer
        items: Line items
        total: Amount charged
        status: pending, paid, shipped, delivered, cancelled
        payment_id / payment_processor: reference into Square or Stripe
        tracking_number / carrier: set once the order ships
    """
    id: str
    user_id: str
    items: List[OrderItem] = Field(default_factory=list)
    total: float = Field(0, ge=0)
    currency: str = "CAD"
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: Optional[ShippingAddress] = None
    customer_email: Optional[str] = None
    payment_id: Optional[str] = None
    payment_processor: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @staticmethod
    def key(user_id: str, order_id: str) -> dict:
        return {"pk": f"USER#{user_id}", "sk": f"ORDER#{order_id}"}

    @classmethod
    def from_item(cls, item: dict) -> "Order":
        return cls.model_validate(from_dynamo(item))

    def to_item(self) -> dict:
        item = to_dynamo(self.model_dump(by_alias=True, mode="json"))
        item.update(self.key(self.user_id, self.id))
        return item

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
