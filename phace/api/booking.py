"""
Booking API Endpoints
Staff and their blocked time, services, add-ons, availability, appointments
and the waitlist.
Everything except the waitlist and staff blocked time is read from and
written to Square.

Author: Phace Web Team
Date: 2025-03-18
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from phace.api.schemas import (
    AppointmentCreateRequest,
    AppointmentUpdateRequest,
    BlockedTimeCreateRequest,
    WaitlistCreateRequest,
)
from phace.core.auth import require_admin_token
from phace.core.exceptions import NotFoundError
from phace.domain.booking import Recurrence
from phace.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Staff and catalog
# =============================================================================

@router.get("/staff")
async def list_staff():
    try:
        staff = await BookingService().get_staff_members()
        return [member.to_dict() for member in staff]
    except Exception as e:
        logger.error(f"Error fetching staff: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch staff")


@router.get("/staff/blocked-time")
async def list_blocked_time(
    staff_id: Optional[str] = Query(None, alias="staffId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
):
    if not staff_id or not start_date or not end_date:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        blocks = BookingService().get_blocked_times(staff_id, start_date, end_date)
    except Exception as e:
        logger.error(f"Error fetching blocked times: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch blocked times")

    return [block.to_dict() for block in blocks]


@router.post("/staff/blocked-time")
async def create_blocked_time(body: BlockedTimeCreateRequest, claims: dict = Depends(require_admin_token)):
    """
    Block part of a staff member's calendar

    With recurring = {frequency: daily|weekly, until} the block is repeated
    up to and including `until`; the first block is returned.
    """
    if not body.staff_id or not body.start_time or not body.end_time:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        recurring = Recurrence.model_validate(body.recurring) if body.recurring else None
        block = BookingService().block_time(
            body.staff_id,
            body.start_time,
            body.end_time,
            reason=body.reason,
            recurring=recurring
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid blocked time: {e}")
    except Exception as e:
        logger.error(f"Error creating blocked time: {e}")
        raise HTTPException(status_code=500, detail="Failed to create blocked time")

    return block.to_dict()


@router.delete("/staff/blocked-time")
async def delete_blocked_time(
    staff_id: Optional[str] = Query(None, alias="staffId"),
    start_time: Optional[str] = Query(None, alias="startTime"),
    claims: dict = Depends(require_admin_token)
):
    if not staff_id or not start_time:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        BookingService().unblock_time(staff_id, start_time)
    except Exception as e:
        logger.error(f"Error deleting blocked time: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete blocked time")

    return {"message": "Blocked time deleted successfully"}


@router.get("/services")
async def list_services():
    """Service categories, each with its bookable services"""
    try:
        categories = await BookingService().get_services_with_categories()
        return [category.to_dict() for category in categories]
    except Exception as e:
        logger.error(f"Error fetching services: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch services")


@router.get("/categories")
async def list_categories():
    try:
        categories = await BookingService().get_service_categories()
        return [category.to_dict() for category in categories]
    except Exception as e:
        logger.error(f"Error fetching categories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.delete("/services/categories")
async def delete_category(
    category_id: Optional[str] = Query(None, alias="id"),
    claims: dict = Depends(require_admin_token)
):
    if not category_id:
        raise HTTPException(status_code=400, detail="Category ID is required")

    try:
        await BookingService().delete_service_category(category_id)
    except Exception as e:
        logger.error(f"Error deleting category: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to delete category")

    return {"success": True}


@router.get("/addons")
async def list_addons(service_id: Optional[str] = Query(None, alias="serviceId")):
    if not service_id:
        raise HTTPException(status_code=400, detail="Service ID is required")

    try:
        addons = await BookingService().get_service_addons(service_id)
        return [addon.to_dict() for addon in addons]
    except Exception as e:
        logger.error(f"Error fetching addons: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch addons")


@router.get("/addons/selected")
async def selected_addons(ids: Optional[str] = Query(None)):
    if not ids:
        raise HTTPException(status_code=400, detail="Add-on IDs are required")

    try:
        addons = await BookingService().get_addons_by_ids(ids.split(","))
        return [addon.to_dict() for addon in addons]
    except Exception as e:
        logger.error(f"Error fetching selected addons: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch selected addons")


# =============================================================================
# Availability
# =============================================================================

@router.get("/availability")
async def get_availability(
    day: Optional[str] = Query(None, alias="date"),
    service_id: Optional[str] = Query(None, alias="serviceId"),
    variation_id: Optional[str] = Query(None, alias="variationId"),
    staff_id: Optional[str] = Query(None, alias="staffId"),
    addons: Optional[str] = Query(None, description="Comma-separated add-on ids")
):
    """
    Open slots for a staff member and service on a date

    A past date or an unknown service is not an error: both answer 200 with
    no slots and a message.
    """
    if not day:
        raise HTTPException(status_code=400, detail="Date is required")

    try:
        requested = date.fromisoformat(day[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date")

    if requested < date.today():
        logger.info(f"Requested date {day} is in the past")
        return {
            "slots": [],
            "isFullyBooked": True,
            "staffAvailable": False,
            "message": "Date is in the past"
        }

    if not service_id and not variation_id:
        raise HTTPException(status_code=400, detail="Service ID or Variation ID is required")

    if not staff_id:
        raise HTTPException(status_code=400, detail="Staff ID is required")

    addon_ids = [addon_id for addon_id in (addons or "").split(",") if addon_id]

    try:
        service_layer = BookingService()
        staff = await service_layer.get_staff_by_id(staff_id)
        if staff is None:
            logger.info(f"Staff member not found: {staff_id}")
            raise HTTPException(status_code=404, detail="Staff member not found")

        id_to_use = variation_id or service_id
        service = await service_layer.get_service_by_id(id_to_use)
        if service is None:
            logger.info(f"Service not found: {id_to_use}")
            return {
                "slots": [],
                "isFullyBooked": False,
                "staffAvailable": True,
                "message": "Service not found"
            }

        slots = await service_layer.get_available_time_slots(
            staff_id,
            id_to_use,
            requested.isoformat(),
            variation_id=variation_id or service.variation_id,
            addon_ids=addon_ids or None
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in availability endpoint: {e}")
        raise HTTPException(status_code=500, detail="Failed to get availability")

    logger.info(f"Retrieved {len(slots)} available slots for {staff.name} on {day}")
    return {
        "slots": [slot.to_dict() for slot in slots],
        "isFullyBooked": len(slots) == 0,
        "staffAvailable": True
    }


# =============================================================================
# Appointments
# =============================================================================

@router.post("/appointments")
async def create_appointment(body: AppointmentCreateRequest):
    """
    Book a service (plus add-ons) with a staff member

    The slot is re-checked against Square right before booking; a slot taken
    in the meantime answers 409.
    """
    if not all([body.service_id, body.staff_id, body.start_time,
                body.client_name, body.client_email, body.client_phone]):
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        start = datetime.fromisoformat(body.start_time.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid startTime")

    try:
        service_layer = BookingService()
        service = await service_layer.get_service_by_id(body.service_id)
        if service is None:
            raise HTTPException(status_code=404, detail="Service not found")

        total_duration = service.duration
        total_price = service.price
        if body.addons:
            for addon in await service_layer.get_addons_by_ids(body.addons):
                total_duration += addon.duration
                total_price += addon.price

        end = start + timedelta(minutes=total_duration)
        is_available = await service_layer.check_time_slot_availability(
            body.staff_id,
            body.start_time,
            end.isoformat().replace("+00:00", "Z"),
            service_id=service.id
        )
        if not is_available:
            raise HTTPException(status_code=409, detail="Selected time slot is no longer available")

        appointment = await service_layer.create_appointment(
            service,
            body.staff_id,
            body.start_time,
            client_name=body.client_name,
            client_email=body.client_email,
            client_phone=body.client_phone,
            total_duration=total_duration,
            total_price=total_price,
            addons=body.addons,
            notes=body.notes
        )
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Error creating appointment: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create appointment")

    return appointment.to_dict()


@router.get("/appointments")
async def list_appointments(
    client_email: Optional[str] = Query(None, alias="clientEmail"),
    staff_id: Optional[str] = Query(None, alias="staffId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
):
    """A client's appointments by email, or a staff member's within a date range"""
    if not client_email and not (staff_id and start_date and end_date):
        raise HTTPException(status_code=400, detail="Invalid query parameters")

    try:
        service_layer = BookingService()
        if client_email:
            appointments = await service_layer.get_client_appointments(client_email)
        else:
            appointments = await service_layer.get_staff_appointments(staff_id, start_date, end_date)
    except Exception as e:
        logger.error(f"Error fetching appointments: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch appointments")

    return [appointment.to_dict() for appointment in appointments]


@router.put("/appointments")
async def update_appointment(body: AppointmentUpdateRequest):
    """Change an appointment's status; Square bookings can only be cancelled from here"""
    if not body.appointment_id or not body.status:
        raise HTTPException(status_code=400, detail="Appointment ID and status are required")

    if body.status != "cancelled":
        raise HTTPException(status_code=400, detail=f"Unsupported appointment status: {body.status}")

    try:
        appointment = await BookingService().cancel_appointment(body.appointment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Error updating appointment: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to update appointment")

    return appointment.to_dict()


@router.get("/appointments/{appointment_id}")
async def get_appointment(appointment_id: str):
    try:
        appointment = await BookingService().get_appointment_by_id(appointment_id)
    except Exception as e:
        logger.error(f"Error fetching appointment {appointment_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch appointment details")

    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment.to_dict()


# =============================================================================
# Waitlist
# =============================================================================

@router.post("/waitlist")
async def join_waitlist(body: WaitlistCreateRequest):
    if not all([body.service_id, body.client_name, body.client_email,
                body.client_phone, body.preferred_dates]):
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        BookingService().add_to_waitlist(
            body.service_id,
            body.client_name,
            body.client_email,
            body.client_phone,
            body.preferred_dates,
            preferred_staff_ids=body.preferred_staff_ids
        )
    except Exception as e:
        logger.error(f"Error in waitlist endpoint: {e}")
        raise HTTPException(status_code=500, detail="Failed to add to waitlist")

    return {"success": True}
