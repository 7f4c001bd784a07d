"""
Stripe Service
Payment intents for the store checkout
"""
import logging
from typing import Any, Dict, List, Optional

from phace.connectors.stripe_connector import StripeConnector

logger = logging.getLogger(__name__)


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


def stripe_shipping(shipping_address: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Map a checkout shipping address onto Stripe's shipping object"""
    if not shipping_address:
        return None
    return {
        'name': shipping_address.get('name') or '',
        'address': {
            'line1': shipping_address.get('street'),
            'city': shipping_address.get('city'),
            'state': shipping_address.get('state'),
            'postal_code': shipping_address.get('zipCode'),
            'country': shipping_address.get('country') or 'CA',
        }
    }


class StripeService:
    """Service wrapping the Stripe connector"""

    def __init__(self, connector: StripeConnector = None):
        self.connector = connector or StripeConnector()

    async def create_payment_intent(self, amount: float, items: Optional[List[Dict]] = None,
                                    shipping_address: Optional[Dict] = None,
                                    currency: str = "usd") -> Dict[str, str]:
        """
        Create a payment intent

        Args:
            amount: Total in major units (dollars); sent to Stripe in cents
            items: Cart lines, summarised into the intent metadata
            shipping_address: Checkout address
            currency: ISO currency code

        Returns:
            {"id": ..., "clientSecret": ...}
        """
        metadata = None
        if items:
            metadata = {'item_count': sum(int(item.get('quantity') or 1) for item in items)}

        intent = await self.connector.create_payment_intent(
            to_cents(amount),
            currency.lower(),
            metadata=metadata,
            shipping=stripe_shipping(shipping_address)
        )
        logger.info(f"Created payment intent {intent.get('id')} for {amount} {currency}")
        return {'id': intent['id'], 'clientSecret': intent['client_secret']}

    async def create_customer(self, email: str, name: str) -> Dict:
        return await self.connector.create_customer(email, name)
