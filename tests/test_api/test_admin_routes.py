"""
Route tests for /api/admin
"""
from unittest.mock import AsyncMock, patch

import pytest

from phace.core.exceptions import NotFoundError, ServiceError, TokenVerificationError
from phace.domain.booking import Appointment, WaitlistEntry, WaitlistStatus
from phace.domain.order import Order
from phace.domain.product import Product


@pytest.fixture
def order():
    return Order(id="ORDER_1", user_id="user-1", total=80.0, status="shipped",
                 customer_email="jane@example.com")


class TestAdminAuth:

    @patch("phace.api.admin.AdminService")
    def test_login_returns_admin(self, mock_service, client):
        mock_service.return_value.verify_admin.return_value = {
            "admin": {"email": "owner@phace.ca", "name": "Owner", "role": "admin"}
        }

        response = client.post("/api/admin/auth", json={"email": "owner@phace.ca", "password": "pw"})

        assert response.status_code == 200
        assert response.json()["admin"]["email"] == "owner@phace.ca"

    @patch("phace.api.admin.AdminService")
    def test_login_wrong_password(self, mock_service, client):
        mock_service.return_value.verify_admin.side_effect = ServiceError("Invalid password")

        response = client.post("/api/admin/auth", json={"email": "owner@phace.ca", "password": "bad"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid password"}

    def test_login_missing_fields(self, client):
        assert client.post("/api/admin/auth", json={}).status_code == 401

    @patch("phace.api.admin.AdminService")
    def test_session_check(self, mock_service, client, admin_headers):
        mock_service.return_value.verify_token.return_value = {"sub": "admin-sub"}

        response = client.get("/api/admin/auth", headers=admin_headers)

        assert response.json() == {"admin": {"sub": "admin-sub"}}
        mock_service.return_value.verify_token.assert_called_once_with("admin-id-token")

    @patch("phace.api.admin.AdminService")
    def test_session_invalid_token(self, mock_service, client, admin_headers):
        mock_service.return_value.verify_token.side_effect = TokenVerificationError("Token has expired")

        response = client.get("/api/admin/auth", headers=admin_headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}


class TestAdminOrders:

    def test_update_requires_id_and_status(self, client):
        response = client.put("/api/admin/orders", json={"orderId": "ORDER_1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Order ID and status are required"}

    def test_update_rejects_unknown_status(self, client):
        response = client.put("/api/admin/orders", json={"orderId": "ORDER_1", "status": "lost"})

        assert response.status_code == 400

    @patch("phace.api.admin.EmailService")
    @patch("phace.api.admin.OrderRepository")
    def test_update_with_tracking_emails_customer(self, mock_repo, mock_email, client, order):
        mock_repo.return_value.update_status.return_value = order
        mock_repo.return_value.add_tracking_info.return_value = order.model_copy(
            update={"tracking_number": "1Z999", "carrier": "UPS"}
        )

        response = client.put("/api/admin/orders", json={
            "orderId": "ORDER_1", "status": "shipped", "trackingNumber": "1Z999", "carrier": "UPS"
        })

        assert response.status_code == 200
        assert response.json()["trackingNumber"] == "1Z999"
        mock_repo.return_value.add_tracking_info.assert_called_once_with("ORDER_1", "1Z999", "UPS")
        sent_order, recipient, status = mock_email.return_value.send_order_status_update.call_args[0]
        assert recipient == "jane@example.com"
        assert status == "shipped"

    @patch("phace.api.admin.EmailService")
    @patch("phace.api.admin.OrderRepository")
    def test_tracking_needs_both_fields(self, mock_repo, mock_email, client, order):
        mock_repo.return_value.update_status.return_value = order

        client.put("/api/admin/orders", json={"orderId": "ORDER_1", "status": "shipped", "trackingNumber": "1Z"})

        mock_repo.return_value.add_tracking_info.assert_not_called()

    @patch("phace.api.admin.EmailService")
    @patch("phace.api.admin.OrderRepository")
    def test_email_failure_does_not_fail_update(self, mock_repo, mock_email, client, order):
        mock_repo.return_value.update_status.return_value = order
        mock_email.return_value.send_order_status_update.side_effect = Exception("SES throttled")

        response = client.put("/api/admin/orders", json={"orderId": "ORDER_1", "status": "delivered"})

        assert response.status_code == 200

    @patch("phace.api.admin.EmailService")
    @patch("phace.api.admin.OrderRepository")
    def test_no_customer_email_skips_notification(self, mock_repo, mock_email, client, order):
        mock_repo.return_value.update_status.return_value = order.model_copy(update={"customer_email": None})

        response = client.put("/api/admin/orders", json={"orderId": "ORDER_1", "status": "delivered"})

        assert response.status_code == 200
        mock_email.assert_not_called()

    @patch("phace.api.admin.OrderRepository")
    def test_update_unknown_order(self, mock_repo, client):
        mock_repo.return_value.update_status.side_effect = NotFoundError("Order NOPE not found")

        response = client.put("/api/admin/orders", json={"orderId": "NOPE", "status": "shipped"})

        assert response.status_code == 404

    @patch("phace.api.admin.OrderRepository")
    def test_list_orders_failure(self, mock_repo, client):
        mock_repo.return_value.find_all.side_effect = Exception("table missing")

        response = client.get("/api/admin/orders")

        assert response.status_code == 500
        assert response.json() == {"error": "table missing"}


class TestAdminProducts:

    def test_writes_require_admin_token(self, client, sample_product_data):
        assert client.put("/api/admin/products", json=sample_product_data).status_code == 401
        assert client.put("/api/admin/products/x", json={"price": 1}).status_code == 401
        assert client.delete("/api/admin/products/x").status_code == 401

    @patch("phace.core.auth.CognitoTokenVerifier")
    def test_rejected_admin_token(self, mock_verifier, client, admin_headers, sample_product_data):
        mock_verifier.return_value.verify.side_effect = TokenVerificationError("bad signature")

        response = client.put("/api/admin/products", json=sample_product_data, headers=admin_headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid admin token"}

    @patch("phace.api.admin.ProductRepository")
    def test_create_product(self, mock_repo, client, as_admin, sample_product_data):
        mock_repo.return_value.create.side_effect = lambda product: product

        response = client.put("/api/admin/products", json=sample_product_data)

        assert response.status_code == 200
        assert response.json()["inStock"] is True
        stored = mock_repo.return_value.create.call_args[0][0]
        assert isinstance(stored, Product)
        assert stored.id == "hydrafacial-serum"

    def test_create_product_invalid(self, client, as_admin):
        response = client.put("/api/admin/products", json={"name": "No id", "price": -1})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid product")

    @patch("phace.api.admin.ProductRepository")
    def test_update_missing_product(self, mock_repo, client, as_admin):
        mock_repo.return_value.update.side_effect = NotFoundError("Product not found")

        response = client.put("/api/admin/products/missing", json={"price": 10})

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found"}

    @patch("phace.api.admin.ProductRepository")
    def test_delete_product(self, mock_repo, client, as_admin):
        response = client.delete("/api/admin/products/hydrafacial-serum")

        assert response.json() == {"success": True}
        mock_repo.return_value.delete.assert_called_once_with("hydrafacial-serum")

    @patch("phace.api.admin.ProductRepository")
    def test_list_products_failure(self, mock_repo, client):
        mock_repo.return_value.find_all.side_effect = Exception("throttled")

        response = client.get("/api/admin/products")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to load products"}


class TestAdminBooking:

    def test_appointments_require_range(self, client):
        response = client.get("/api/admin/appointments", params={"staffId": "TM_1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameters"}

    @patch("phace.api.admin.BookingService")
    def test_staff_appointments(self, mock_service, client, square_booking):
        mock_service.return_value.get_staff_appointments = AsyncMock(
            return_value=[Appointment.from_square(square_booking)]
        )

        response = client.get("/api/admin/appointments", params={
            "staffId": "TM_1", "startDate": "2030-05-01", "endDate": "2030-05-07"
        })

        assert [a["id"] for a in response.json()] == ["BOOKING_1"]
        mock_service.return_value.get_staff_appointments.assert_awaited_once_with("TM_1", "2030-05-01", "2030-05-07")

    @patch("phace.api.admin.BookingService")
    def test_waitlist_defaults_to_active(self, mock_service, client):
        mock_service.return_value.get_waitlist_entries.return_value = []

        response = client.get("/api/admin/waitlist")

        assert response.json() == []
        mock_service.return_value.get_waitlist_entries.assert_called_once_with(WaitlistStatus.ACTIVE, None)

    def test_waitlist_bad_status(self, client):
        assert client.get("/api/admin/waitlist", params={"status": "lost"}).status_code == 400

    @patch("phace.api.admin.BookingService")
    def test_waitlist_update(self, mock_service, client):
        mock_service.return_value.update_waitlist_status.return_value = WaitlistEntry(
            id="w1", service_id="SERVICE_1", client_name="Jane", client_email="jane@example.com",
            client_phone="+16045551234", status=WaitlistStatus.CONTACTED
        )

        response = client.patch("/api/admin/waitlist", json={"id": "w1", "status": "contacted", "notes": "called"})

        assert response.json()["status"] == "contacted"
        mock_service.return_value.update_waitlist_status.assert_called_once_with(
            "w1", WaitlistStatus.CONTACTED, "called"
        )

    @patch("phace.api.admin.BookingService")
    def test_waitlist_update_missing_entry(self, mock_service, client):
        mock_service.return_value.update_waitlist_status.side_effect = NotFoundError("Waitlist entry not found")

        response = client.patch("/api/admin/waitlist", json={"id": "nope", "status": "booked"})

        assert response.status_code == 404

    def test_waitlist_delete_requires_id(self, client):
        response = client.delete("/api/admin/waitlist")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing waitlist entry ID"}

    @patch("phace.api.admin.BookingService")
    def test_waitlist_delete(self, mock_service, client):
        response = client.delete("/api/admin/waitlist", params={"id": "w1"})

        assert response.json() == {"success": True}
        mock_service.return_value.delete_waitlist_entry.assert_called_once_with("w1")
