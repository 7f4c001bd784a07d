"""
Admin API Endpoints
Admin login, order fulfilment, product management, staff, appointments and
the waitlist

Product writes require a verified admin ID token (Authorization: Bearer).

Author: Phace Web Team
Date: 2025-03-02
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError

from phace.api.schemas import AdminLoginRequest, OrderUpdateRequest, WaitlistUpdateRequest
from phace.core.auth import get_bearer_token, require_admin_token
from phace.core.exceptions import NotFoundError, ServiceError, TokenVerificationError
from phace.domain.booking import WaitlistStatus
from phace.domain.order import OrderStatus
from phace.domain.product import Product
from phace.repositories.order_repository import OrderRepository
from phace.repositories.product_repository import ProductRepository
from phace.services.admin_service import AdminService
from phace.services.booking_service import BookingService
from phace.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Admin login
# =============================================================================

@router.post("/auth")
async def admin_login(body: AdminLoginRequest):
    """Check admin email/password against the admin table"""
    if not body.email or not body.password:
        raise HTTPException(status_code=401, detail="Authentication failed")

    try:
        return AdminService().verify_admin(body.email, body.password)
    except ServiceError as e:
        raise HTTPException(status_code=401, detail=e.message)
    except Exception as e:
        logger.error(f"Admin login error: {e}")
        raise HTTPException(status_code=401, detail=str(e) or "Authentication failed")


@router.get("/auth")
async def admin_session(token: str = Depends(get_bearer_token)):
    """Claims of the admin's ID token, 401 when it does not verify"""
    try:
        claims = AdminService().verify_token(token)
    except TokenVerificationError as e:
        logger.info(f"Admin token rejected: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    return {"admin": claims}


# =============================================================================
# Orders
# =============================================================================

@router.get("/orders")
async def list_orders():
    try:
        return [order.to_dict() for order in OrderRepository().find_all()]
    except Exception as e:
        logger.error(f"Get orders error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get orders")


@router.put("/orders")
async def update_order(body: OrderUpdateRequest):
    """
    Move an order to a new status

    Tracking details are stored only when both trackingNumber and carrier
    are given. The customer is emailed afterwards; a failed email does not
    fail the update.
    """
    if not body.order_id or not body.status:
        raise HTTPException(status_code=400, detail="Order ID and status are required")

    try:
        status = OrderStatus(body.status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid order status: {body.status}")

    try:
        repo = OrderRepository()
        order = repo.update_status(body.order_id, status)

        if body.tracking_number and body.carrier:
            order = repo.add_tracking_info(body.order_id, body.tracking_number, body.carrier)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Update order error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to update order")

    if order.customer_email:
        try:
            EmailService().send_order_status_update(order, order.customer_email, status.value)
        except Exception as e:
            logger.warning(f"Status email for order {order.id} failed: {e}")
    else:
        logger.warning(f"Order {order.id} has no customer email; status email skipped")

    return order.to_dict()


# =============================================================================
# Products
# =============================================================================

@router.get("/products")
async def list_products():
    try:
        return [product.to_dict() for product in ProductRepository().find_all()]
    except Exception as e:
        logger.error(f"Error loading products: {e}")
        raise HTTPException(status_code=500, detail="Failed to load products")


@router.put("/products")
async def create_product(
    product_data: Dict[str, Any] = Body(...),
    claims: dict = Depends(require_admin_token)
):
    """Create (or replace) a product; the body must carry its id"""
    try:
        product = Product.model_validate(product_data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid product: {e.errors()[0].get('msg')}")

    try:
        created = ProductRepository().create(product)
    except Exception as e:
        logger.error(f"Error creating product: {e}")
        raise HTTPException(status_code=500, detail="Failed to create product")

    logger.info(f"Product {created.id} saved by {claims.get('email')}")
    return created.to_dict()


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    product_data: Dict[str, Any] = Body(...),
    claims: dict = Depends(require_admin_token)
):
    try:
        updated = ProductRepository().update(product_id, product_data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid product: {e.errors()[0].get('msg')}")
    except Exception as e:
        logger.error(f"Error updating product: {e}")
        raise HTTPException(status_code=500, detail="Failed to update product")

    return updated.to_dict()


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, claims: dict = Depends(require_admin_token)):
    try:
        ProductRepository().delete(product_id)
    except Exception as e:
        logger.error(f"Error deleting product: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to delete product")

    return {"success": True}


# =============================================================================
# Staff and appointments
# =============================================================================

@router.get("/staff")
async def list_staff():
    try:
        staff = await BookingService().get_staff_members()
        return [member.to_dict() for member in staff]
    except Exception as e:
        logger.error(f"Error fetching staff members: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch staff members")


@router.get("/appointments")
async def list_staff_appointments(
    staff_id: Optional[str] = Query(None, alias="staffId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
):
    if not staff_id or not start_date or not end_date:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        appointments = await BookingService().get_staff_appointments(staff_id, start_date, end_date)
        return [appointment.to_dict() for appointment in appointments]
    except Exception as e:
        logger.error(f"Error fetching appointments: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch appointments")


# =============================================================================
# Waitlist
# =============================================================================

def _waitlist_status(value: str) -> WaitlistStatus:
    try:
        return WaitlistStatus(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid waitlist status: {value}")


@router.get("/waitlist")
async def list_waitlist(
    status: str = Query("active"),
    service_id: Optional[str] = Query(None, alias="serviceId")
):
    waitlist_status = _waitlist_status(status)
    try:
        entries = BookingService().get_waitlist_entries(waitlist_status, service_id)
        return [entry.to_dict() for entry in entries]
    except Exception as e:
        logger.error(f"Error fetching waitlist entries: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/waitlist")
async def update_waitlist(body: WaitlistUpdateRequest):
    if not body.id or not body.status:
        raise HTTPException(status_code=400, detail="Missing required fields")

    waitlist_status = _waitlist_status(body.status)
    try:
        entry = BookingService().update_waitlist_status(body.id, waitlist_status, body.notes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Error updating waitlist entry: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return entry.to_dict()


@router.delete("/waitlist")
async def delete_waitlist(entry_id: Optional[str] = Query(None, alias="id")):
    if not entry_id:
        raise HTTPException(status_code=400, detail="Missing waitlist entry ID")

    try:
        BookingService().delete_waitlist_entry(entry_id)
    except Exception as e:
        logger.error(f"Error deleting waitlist entry: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True}
