"""
User API Endpoints
Profile updates for the signed-in customer
"""
import logging

from fastapi import APIRouter, HTTPException, Request

from phace.api.schemas import UpdatePhoneRequest
from phace.services.auth_service import AuthService, format_phone_number

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/update-phone")
async def update_phone(body: UpdatePhoneRequest, request: Request):
    """Store the customer's phone number (E.164) on their Cognito profile"""
    access_token = request.cookies.get("accessToken")
    if not access_token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not body.phone:
        raise HTTPException(status_code=400, detail="Phone number is required")

    try:
        format_phone_number(body.phone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        AuthService().update_phone(access_token, body.phone)
    except Exception as e:
        logger.error(f"Error updating phone number: {e}")
        raise HTTPException(status_code=500, detail="Failed to update phone number")

    return {"success": True}
