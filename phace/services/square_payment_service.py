"""
Square Payment Service
Store checkout orders and payments, appointment payments, catalog discounts
and product categories on Square

Author: Phace Web Team
Date: 2025-03-25
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from phace.connectors.square_connector import SquareConnector
from phace.domain.coupon import CouponType
from phace.domain.product import ProductCategory

logger = logging.getLogger(__name__)


def line_items(items: List[Dict[str, Any]], currency: str) -> List[Dict[str, Any]]:
    """Cart lines as Square order line items (unit price in cents)"""
    result = []
    for item in items:
        name = item['name']
        if item.get('variationName'):
            name = f"{name} ({item['variationName']})"
        result.append({
            'name': name,
            'quantity': str(item['quantity']),
            'base_price_money': {
                'amount': int(round(float(item['price']) * 100)),
                'currency': currency,
            }
        })
    return result


def square_address(shipping_address: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'address_line_1': shipping_address.get('street'),
        'locality': shipping_address.get('city'),
        'administrative_district_level_1': shipping_address.get('state'),
        'postal_code': shipping_address.get('zipCode'),
        'country': 'CA',
    }


class SquarePaymentService:
    """
    Service for Square payments

    Handles:
    - Order calculation (taxes and automatic discounts)
    - Store checkout: order + payment
    - Appointment payment by card nonce
    - Discount codes as catalog DISCOUNT objects
    - Category lookup
    """

    def __init__(self, connector: SquareConnector = None):
        self.connector = connector or SquareConnector()

    async def calculate_order(self, currency: str, items: List[Dict], shipping_address: Dict,
                              location_id: Optional[str] = None) -> Dict:
        order = {
            'location_id': location_id or await self.connector.get_location_id(),
            'pricing_options': {
                'auto_apply_discounts': True,
                'auto_apply_taxes': True,
            },
            'line_items': line_items(items, currency),
            'fulfillments': [{
                'type': 'SHIPMENT',
                'shipment_details': {
                    'recipient': {
                        'display_name': shipping_address.get('name'),
                        'address': square_address(shipping_address),
                    }
                }
            }]
        }
        response = await self.connector.calculate_order(order)
        return response.get('order') or {}

    async def create_order_payment(self, source_id: str, amount: int, currency: str, items: List[Dict],
                                   shipping_address: Optional[Dict] = None,
                                   location_id: Optional[str] = None) -> Dict:
        """
        Create a Square order for the cart, then pay for it

        Args:
            source_id: Card token from the web payments form
            amount: Total in cents
        """
        location_id = location_id or await self.connector.get_location_id()

        order_response = await self.connector.create_order({
            'location_id': location_id,
            'line_items': line_items(items, currency),
        })
        order_id = (order_response.get('order') or {}).get('id')
        if not order_id:
            raise ValueError("Failed to create order with Square")

        payment: Dict[str, Any] = {
            'source_id': source_id,
            'amount_money': {'amount': int(amount), 'currency': currency},
            'location_id': location_id,
            'order_id': order_id,
            'note': f"Purchase of {len(items)} item(s)",
            'autocomplete': False,
        }
        if shipping_address:
            payment['shipping_address'] = square_address(shipping_address)

        response = await self.connector.create_payment(payment)
        logger.info(f"Square payment created for order {order_id}")
        return response.get('payment') or {}

    async def create_payment(self, nonce: str, amount: int, appointment_id: str,
                             currency: str = "USD") -> Dict:
        """Charge a card nonce for an appointment (amount in cents)"""
        response = await self.connector.create_payment({
            'source_id': nonce,
            'amount_money': {'amount': int(amount), 'currency': currency},
            'location_id': await self.connector.get_location_id(),
            'reference_id': appointment_id,
        })
        payment = response.get('payment')
        if not payment:
            raise ValueError("Payment creation failed")
        return payment

    async def create_discount_code(self, code: str, name: str, type: CouponType, value: float,
                                   product_ids: Optional[List[str]] = None,
                                   expires_at: Optional[datetime] = None,
                                   usage_limit: Optional[int] = None) -> Dict:
        """
        Upsert a catalog DISCOUNT object for a code

        product_ids, expires_at and usage_limit are recorded on the returned
        code but not enforced by Square.
        """
        discount_data: Dict[str, Any] = {
            'name': f"{name} ({code.upper()})",
            'label_color': '9da2a6',
        }
        if CouponType(type) == CouponType.PERCENTAGE:
            discount_data['discount_type'] = 'FIXED_PERCENTAGE'
            discount_data['percentage'] = f"{value:g}"
        else:
            discount_data['discount_type'] = 'FIXED_AMOUNT'
            discount_data['amount_money'] = {'amount': int(round(value * 100)), 'currency': 'CAD'}

        response = await self.connector.upsert_catalog_object({
            'type': 'DISCOUNT',
            'id': f"#{code.upper()}",
            'discount_data': discount_data,
        })
        catalog_object = response.get('catalog_object') or {}
        logger.info(f"Created Square discount {catalog_object.get('id')} for code {code.upper()}")

        return {
            'id': catalog_object.get('id'),
            'code': code.upper(),
            'name': name,
            'type': CouponType(type).value,
            'value': value,
            'productIds': product_ids or [],
            'expiresAt': expires_at.isoformat() if expires_at else None,
            'usageLimit': usage_limit,
        }

    async def get_categories(self, category_ids: List[str]) -> List[ProductCategory]:
        response = await self.connector.batch_retrieve_catalog_objects(category_ids)
        return [
            ProductCategory.from_square(obj)
            for obj in response.get('objects') or []
            if obj.get('type') == 'CATEGORY'
        ]
