"""
Pytest fixtures and configuration for Phace backend tests

Every external system (Cognito, DynamoDB, S3, SES, Square, Stripe) is
replaced with unittest.mock objects; no test needs network access or AWS
credentials.

Author: Phace Web Team
Date: 2025-02-11
"""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from phace.core.auth import require_admin_token
from phace.domain.coupon import Coupon, CouponType
from phace.main import app


@pytest.fixture
def client():
    """
    Provides a TestClient for the FastAPI app

    Scope: function (fresh cookie jar per test)
    """
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer admin-id-token"}


@pytest.fixture
def sample_product_data():
    """
    Provides sample product data as sent by the admin UI
    """
    return {
        "id": "hydrafacial-serum",
        "name": "Hydrating Serum",
        "description": "Hyaluronic acid serum",
        "price": 89.0,
        "images": ["https://phace-images.s3.us-west-2.amazonaws.com/serum.jpg"],
        "category": "serums",
        "sku": "SER-001",
        "inStock": True
    }


@pytest.fixture
def sample_order_items():
    return [
        {"productId": "hydrafacial-serum", "name": "Hydrating Serum", "quantity": 2, "price": 40.0},
        {"productId": "spf-50", "name": "Mineral SPF 50", "quantity": 1, "price": 20.0},
    ]


@pytest.fixture
def shipping_address():
    return {
        "name": "Jane Client",
        "street": "123 Main St",
        "city": "Vancouver",
        "state": "BC",
        "zipCode": "V6B 1A1"
    }


@pytest.fixture
def percentage_coupon():
    return Coupon(code="WELCOME10", name="10% Welcome Discount", type=CouponType.PERCENTAGE,
                  value=10, usage_limit=100, current_usage=0)


@pytest.fixture
def fixed_coupon():
    return Coupon(code="SAVE25", name="$25 Off Your Order", type=CouponType.FIXED_AMOUNT, value=25)


@pytest.fixture
def tomorrow():
    return (date.today() + timedelta(days=1)).isoformat()


# Square objects as returned by the REST API

@pytest.fixture
def square_service_item():
    return {
        "type": "ITEM",
        "id": "SERVICE_1",
        "item_data": {
            "name": "Signature Facial",
            "description": "60 minute facial",
            "category_id": "CAT_FACIALS",
            "product_type": "APPOINTMENTS_SERVICE",
            "variations": [{
                "type": "ITEM_VARIATION",
                "id": "VAR_1",
                "version": 1700000000000,
                "item_variation_data": {
                    "item_id": "SERVICE_1",
                    "name": "60 min",
                    "price_money": {"amount": 15000, "currency": "CAD"},
                    "service_duration": 3600000
                }
            }]
        }
    }


@pytest.fixture
def square_addon_item():
    return {
        "type": "ITEM",
        "id": "ADDON_1",
        "item_data": {
            "name": "LED Therapy",
            "variations": [{
                "type": "ITEM_VARIATION",
                "id": "ADDON_VAR_1",
                "item_variation_data": {
                    "price_money": {"amount": 2500, "currency": "CAD"},
                    "service_duration": 900000
                }
            }]
        }
    }


@pytest.fixture
def square_booking():
    return {
        "id": "BOOKING_1",
        "version": 3,
        "status": "ACCEPTED",
        "start_at": "2030-05-01T17:00:00Z",
        "customer_id": "CUSTOMER_1",
        "customer_note": "First visit",
        "appointment_segments": [{
            "duration_minutes": 60,
            "service_variation_id": "VAR_1",
            "team_member_id": "TM_1"
        }]
    }


@pytest.fixture
def as_admin():
    """
    Treats every request as coming from a verified admin

    Overrides the require_admin_token dependency for the duration of a test.
    """
    app.dependency_overrides[require_admin_token] = lambda: {"sub": "admin-sub", "email": "owner@phace.ca"}
    yield
    app.dependency_overrides.pop(require_admin_token, None)
