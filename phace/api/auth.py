"""
Auth API Endpoints
Customer sign-up, sign-in and password flows (Cognito)

Author: Phace Web Team
Date: 2025-02-06
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from phace.api.schemas import (
    ConfirmRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SetNewPasswordRequest,
    SignInRequest,
    SignUpRequest,
)
from phace.core.auth import get_bearer_token, get_current_user
from phace.core.exceptions import NewPasswordRequiredError
from phace.domain.user import AuthUser
from phace.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup")
async def signup(body: SignUpRequest):
    """Register a customer; Cognito emails a confirmation code"""
    if not body.email or not body.password or not body.name:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        result = AuthService().sign_up(body.email, body.password, body.name)
        return {
            "message": "User registered successfully",
            "userSub": result.get("UserSub")
        }
    except Exception as e:
        logger.error(f"Signup error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to register user")


@router.post("/signin")
async def signin(body: SignInRequest):
    """
    Password sign-in

    Accounts created by an admin must first choose a password; that case
    answers 401 with the challenge session so the client can call
    /set-new-password.
    """
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        result = AuthService().sign_in(body.email, body.password)
    except NewPasswordRequiredError as e:
        raise HTTPException(status_code=401, detail={
            "error": e.message,
            "challengeName": "NEW_PASSWORD_REQUIRED",
            "session": e.session
        })
    except Exception as e:
        logger.error(f"Signin error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to sign in")

    return {
        "accessToken": result.get("AccessToken"),
        "refreshToken": result.get("RefreshToken"),
        "idToken": result.get("IdToken")
    }


@router.post("/set-new-password")
async def set_new_password(body: SetNewPasswordRequest):
    if not body.email or not body.new_password or not body.session:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        result = AuthService().set_new_password(body.email, body.new_password, body.session)
        if not result.get("IdToken") or not result.get("AccessToken"):
            raise ValueError("No token received from authentication")
        return {
            "idToken": result["IdToken"],
            "accessToken": result["AccessToken"]
        }
    except Exception as e:
        logger.error(f"Set new password error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to set new password")


@router.post("/confirm")
async def confirm(body: ConfirmRequest):
    """Confirm an email address; a bad or expired code is a client error"""
    if not body.email or not body.code:
        raise HTTPException(status_code=400, detail="Email and verification code are required")

    try:
        AuthService().confirm_sign_up(body.email, body.code)
    except Exception as e:
        logger.error(f"Email verification error: {e}")
        raise HTTPException(status_code=400, detail=str(e) or "Failed to verify email")

    return {"message": "Email verified successfully"}


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest):
    if not body.email:
        raise HTTPException(status_code=400, detail="Email is required")

    try:
        AuthService().forgot_password(body.email)
    except Exception as e:
        logger.error(f"Forgot password error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to send reset code")

    return {"message": "Reset code sent successfully"}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest):
    if not body.email or not body.code or not body.new_password:
        raise HTTPException(status_code=400, detail="Email, code, and new password are required")

    try:
        AuthService().confirm_forgot_password(body.email, body.code, body.new_password)
    except Exception as e:
        logger.error(f"Reset password error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to reset password")

    return {"message": "Password reset successfully"}


@router.get("/user")
async def get_user(request: Request, access_token: str = Depends(get_bearer_token)):
    """Latest Cognito attributes for the access token's owner"""
    try:
        user = AuthService().get_user(access_token)
    except Exception as e:
        logger.error(f"Error getting user data: {e}")
        raise HTTPException(status_code=500, detail="Failed to get user data")

    return {
        "user": user,
        "token": request.cookies.get("idToken")
    }


@router.get("/me")
async def me(user: AuthUser = Depends(get_current_user)):
    return {
        "username": user.username,
        "email": user.email,
        "isAdmin": user.is_admin
    }
