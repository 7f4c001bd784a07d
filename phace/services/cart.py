"""
Cart pricing

The cart itself lives in the browser; these helpers price a submitted cart
at checkout the same way the storefront does.
"""
from typing import Dict, List, Optional

from phace.domain.coupon import Coupon
from phace.services.coupon_service import apply_discount


def item_price(item: Dict) -> float:
    """Unit price of a cart line (price, falling back to basePrice)"""
    price = item.get('price')
    if price is None:
        price = item.get('basePrice')
    return float(price or 0)


def cart_subtotal(items: List[Dict]) -> float:
    """Sum of price * quantity; lines without a positive price are ignored"""
    subtotal = 0.0
    for item in items:
        price = item_price(item)
        if price <= 0:
            continue
        subtotal += price * int(item.get('quantity') or 1)
    return subtotal


def checkout_totals(items: List[Dict], shipping: float = 0.0,
                    coupon: Optional[Coupon] = None) -> Dict[str, float]:
    """
    Subtotal, discount, shipping and total for a checkout

    The coupon discounts the subtotal only; shipping is added after.
    """
    subtotal = cart_subtotal(items)
    discount = 0.0
    discounted = subtotal
    if coupon is not None:
        result = apply_discount(coupon, subtotal)
        discount = result.discount_amount
        discounted = result.final_amount

    return {
        'subtotal': subtotal,
        'discount': discount,
        'shipping': shipping,
        'total': discounted + shipping,
    }
