"""
Repository Layer - Data Access

This layer handles all DynamoDB table operations and returns domain models.
Repositories abstract away key layouts and expressions from route handlers.
"""
from phace.repositories.product_repository import ProductRepository
from phace.repositories.order_repository import OrderRepository
from phace.repositories.coupon_repository import CouponRepository
from phace.repositories.admin_repository import AdminRepository
from phace.repositories.waitlist_repository import WaitlistRepository
from phace.repositories.blocked_time_repository import BlockedTimeRepository

__all__ = [
    'ProductRepository',
    'OrderRepository',
    'CouponRepository',
    'AdminRepository',
    'WaitlistRepository',
    'BlockedTimeRepository'
]
