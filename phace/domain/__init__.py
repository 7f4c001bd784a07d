"""
Domain Layer - Business Entities

Pydantic models mirroring the records kept by external systems
(DynamoDB tables, Square catalog and bookings, Cognito).
"""
from phace.domain.product import Product, ProductVariant, ProductCategory
from phace.domain.order import Order, OrderItem, OrderStatus, ShippingAddress
from phace.domain.coupon import Coupon, CouponType, DiscountResult
from phace.domain.booking import (
    Appointment,
    Service,
    ServiceAddon,
    ServiceCategory,
    StaffMember,
    TimeSlot,
    WaitlistEntry,
    WaitlistStatus,
)
from phace.domain.user import AdminRole, AdminUser, AuthUser

__all__ = [
    'Product', 'ProductVariant', 'ProductCategory',
    'Order', 'OrderItem', 'OrderStatus', 'ShippingAddress',
    'Coupon', 'CouponType', 'DiscountResult',
    'Appointment', 'Service', 'ServiceAddon', 'ServiceCategory',
    'StaffMember', 'TimeSlot', 'WaitlistEntry', 'WaitlistStatus',
    'AdminRole', 'AdminUser', 'AuthUser',
]
