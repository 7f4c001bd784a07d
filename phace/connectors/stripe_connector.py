"""
Stripe REST Connector
Creates payment intents and customers through the Stripe v1 API

Author: Phace Web Team
Date: 2025-02-20
"""
import logging
from typing import Any, Dict, List, Tuple
from urllib.parse import urlencode

import httpx

from phace.core.config import settings
from phace.core.exceptions import StripeAPIError

logger = logging.getLogger(__name__)

STRIPE_API_URL = "https://api.stripe.com/v1"


def encode_form(data: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flatten nested dicts/lists into Stripe's bracketed form fields

    {'shipping': {'address': {'city': 'X'}}} -> [('shipping[address][city]', 'X')]
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in data.items():
        field = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(encode_form(value, field))
        elif isinstance(value, (list, tuple)):
            for index, element in enumerate(value):
                if isinstance(element, dict):
                    pairs.extend(encode_form(element, f"{field}[{index}]"))
                else:
                    pairs.append((f"{field}[{index}]", str(element)))
        elif isinstance(value, bool):
            pairs.append((field, "true" if value else "false"))
        else:
            pairs.append((field, str(value)))
    return pairs


class StripeConnector:
    """
    Connector for Stripe REST API

    Handles:
    - Payment intents
    - Customers
    """

    def __init__(self, secret_key: str = None):
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY

        if not self.secret_key:
            raise ValueError("Stripe credentials not configured. Set STRIPE_SECRET_KEY")

        self.headers = {
            'Authorization': f'Bearer {self.secret_key}',
            'Content-Type': 'application/x-www-form-urlencoded'
        }

    async def _post(self, path: str, data: Dict[str, Any]) -> Dict:
        """
        POST form-encoded data to Stripe

        Raises:
            StripeAPIError: Stripe answered with a non-2xx status
        """
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{STRIPE_API_URL}{path}",
                headers=self.headers,
                content=urlencode(encode_form(data)),
                timeout=30.0
            )

        body = response.json() if response.content else {}

        if response.status_code >= 400:
            message = (body.get('error') or {}).get('message') or f"Stripe API error ({response.status_code})"
            logger.error(f"Stripe POST {path} failed: {message}")
            raise StripeAPIError(message, status_code=response.status_code)

        return body

    async def create_payment_intent(self, amount_cents: int, currency: str,
                                    metadata: Dict[str, Any] = None, shipping: Dict[str, Any] = None) -> Dict:
        payload: Dict[str, Any] = {
            'amount': amount_cents,
            'currency': currency,
            'automatic_payment_methods': {'enabled': True}
        }
        if metadata:
            payload['metadata'] = metadata
        if shipping:
            payload['shipping'] = shipping
        return await self._post("/payment_intents", payload)

    async def create_customer(self, email: str, name: str) -> Dict:
        return await self._post("/customers", {'email': email, 'name': name})
