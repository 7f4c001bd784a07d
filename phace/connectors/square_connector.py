"""
Square REST Connector
Handles all interactions with the Square v2 API (catalog, bookings, team,
customers, orders, payments)

Author: Phace Web Team
Date: 2025-03-18
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

import httpx

from phace.core.config import settings
from phace.core.exceptions import SquareAPIError

logger = logging.getLogger(__name__)

PRODUCTION_URL = "https://connect.squareup.com/v2"
SANDBOX_URL = "https://connect.squareupsandbox.com/v2"
SQUARE_VERSION = "2024-01-18"


def new_idempotency_key() -> str:
    return str(uuid.uuid4())


class SquareConnector:
    """
    Connector for Square REST API

    Handles:
    - Catalog search and object CRUD (services, add-ons, categories, discounts)
    - Team member and booking profile lookups
    - Availability search and bookings
    - Customers
    - Orders and payments
    """

    def __init__(self, access_token: str = None, environment: str = None, location_id: str = None):
        """
        Initialize Square connector

        Args:
            access_token: Square access token
            environment: 'production' or anything else for sandbox
            location_id: Default location for orders, payments and bookings
        """
        self.access_token = access_token or settings.SQUARE_ACCESS_TOKEN
        self.environment = environment or settings.SQUARE_ENVIRONMENT
        self.location_id = location_id or settings.SQUARE_LOCATION_ID

        if not self.access_token:
            raise ValueError("Square credentials not configured. Set SQUARE_ACCESS_TOKEN")

        self.base_url = PRODUCTION_URL if self.environment == "production" else SANDBOX_URL
        self.headers = {
            'Authorization': f'Bearer {self.access_token}',
            'Square-Version': SQUARE_VERSION,
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }

    async def _request(self, method: str, path: str, json: Dict = None, params: Dict = None) -> Dict:
        """
        Make an authenticated request to Square

        Args:
            method: HTTP method
            path: API path (e.g. '/catalog/search')
            json: Request body
            params: Query parameters

        Returns:
            Parsed response body

        Raises:
            SquareAPIError: Square answered with a non-2xx status
        """
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient() as client:
            response = await client.request(
                method,
                url,
                headers=self.headers,
                json=json,
                params=params,
                timeout=30.0
            )

        data = response.json() if response.content else {}

        if response.status_code >= 400:
            errors = data.get('errors') or []
            detail = errors[0].get('detail') if errors else None
            message = detail or f"Square API error ({response.status_code})"
            logger.error(f"Square {method} {path} failed: {message}")
            raise SquareAPIError(message, status_code=response.status_code)

        return data

    async def get_location_id(self) -> str:
        """Configured location, else the first location on the account"""
        if self.location_id:
            return self.location_id

        data = await self._request("GET", "/locations")
        locations = data.get('locations') or []
        if not locations:
            raise SquareAPIError("No Square locations found")
        self.location_id = locations[0]['id']
        return self.location_id

    # ========== Catalog ==========

    async def search_catalog_objects(self, object_types: List[str], query: Dict = None,
                                     include_related_objects: bool = False) -> Dict:
        body: Dict[str, Any] = {
            'object_types': object_types,
            'include_related_objects': include_related_objects
        }
        if query:
            body['query'] = query
        return await self._request("POST", "/catalog/search", json=body)

    async def search_catalog_items(self, category_ids: List[str] = None, product_types: List[str] = None) -> Dict:
        body: Dict[str, Any] = {}
        if category_ids:
            body['category_ids'] = category_ids
        if product_types:
            body['product_types'] = product_types
        return await self._request("POST", "/catalog/search-catalog-items", json=body)

    async def batch_retrieve_catalog_objects(self, object_ids: List[str], include_related_objects: bool = False) -> Dict:
        return await self._request("POST", "/catalog/batch-retrieve", json={
            'object_ids': object_ids,
            'include_related_objects': include_related_objects
        })

    async def retrieve_catalog_object(self, object_id: str) -> Dict:
        return await self._request("GET", f"/catalog/object/{object_id}")

    async def upsert_catalog_object(self, catalog_object: Dict) -> Dict:
        return await self._request("POST", "/catalog/object", json={
            'idempotency_key': new_idempotency_key(),
            'object': catalog_object
        })

    async def delete_catalog_object(self, object_id: str) -> Dict:
        return await self._request("DELETE", f"/catalog/object/{object_id}")

    # ========== Team ==========

    async def list_booking_profiles(self) -> Dict:
        return await self._request("GET", "/bookings/team-member-booking-profiles")

    async def retrieve_booking_profile(self, team_member_id: str) -> Dict:
        return await self._request("GET", f"/bookings/team-member-booking-profiles/{team_member_id}")

    async def search_team_members(self, query: Dict = None) -> Dict:
        return await self._request("POST", "/team-members/search", json={'query': query or {}})

    async def retrieve_team_member(self, team_member_id: str) -> Dict:
        return await self._request("GET", f"/team-members/{team_member_id}")

    # ========== Bookings ==========

    async def search_availability(self, query: Dict) -> Dict:
        return await self._request("POST", "/bookings/availability/search", json={'query': query})

    async def create_booking(self, booking: Dict) -> Dict:
        return await self._request("POST", "/bookings", json={
            'idempotency_key': new_idempotency_key(),
            'booking': booking
        })

    async def retrieve_booking(self, booking_id: str) -> Dict:
        return await self._request("GET", f"/bookings/{booking_id}")

    async def list_bookings(self, team_member_id: str = None, customer_id: str = None,
                            start_at_min: str = None, start_at_max: str = None) -> List[Dict]:
        """List bookings, following cursors until exhausted"""
        params: Dict[str, Any] = {'location_id': await self.get_location_id()}
        if team_member_id:
            params['team_member_id'] = team_member_id
        if customer_id:
            params['customer_id'] = customer_id
        if start_at_min:
            params['start_at_min'] = start_at_min
        if start_at_max:
            params['start_at_max'] = start_at_max

        bookings: List[Dict] = []
        while True:
            data = await self._request("GET", "/bookings", params=params)
            bookings.extend(data.get('bookings') or [])
            cursor = data.get('cursor')
            if not cursor:
                return bookings
            params['cursor'] = cursor

    async def cancel_booking(self, booking_id: str, booking_version: Optional[int] = None) -> Dict:
        body: Dict[str, Any] = {'idempotency_key': new_idempotency_key()}
        if booking_version is not None:
            body['booking_version'] = booking_version
        return await self._request("POST", f"/bookings/{booking_id}/cancel", json=body)

    # ========== Customers ==========

    async def search_customers_by_email(self, email: str) -> List[Dict]:
        data = await self._request("POST", "/customers/search", json={
            'query': {'filter': {'email_address': {'exact': email}}}
        })
        return data.get('customers') or []

    async def create_customer(self, customer: Dict) -> Dict:
        return await self._request("POST", "/customers", json={
            'idempotency_key': new_idempotency_key(),
            **customer
        })

    # ========== Orders & Payments ==========

    async def create_order(self, order: Dict) -> Dict:
        return await self._request("POST", "/orders", json={
            'idempotency_key': new_idempotency_key(),
            'order': order
        })

    async def calculate_order(self, order: Dict) -> Dict:
        return await self._request("POST", "/orders/calculate", json={'order': order})

    async def create_payment(self, payment: Dict) -> Dict:
        return await self._request("POST", "/payments", json={
            'idempotency_key': new_idempotency_key(),
            **payment
        })
