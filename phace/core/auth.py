"""
Authentication helpers for Phace Backend
Verifies Cognito ID tokens and provides FastAPI dependencies for admin routes

Author: Phace Web Team
Date: 2025-03-02
"""
import logging
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from phace.core.config import settings
from phace.core.exceptions import TokenVerificationError
from phace.domain.user import AuthUser

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

ADMIN_GROUP = "admin"


class CognitoConfig:
    """Cognito user pool configuration"""

    @staticmethod
    def get_user_pool_id() -> str:
        pool_id = settings.COGNITO_USER_POOL_ID
        if not pool_id:
            raise TokenVerificationError("COGNITO_USER_POOL_ID is not configured")
        return pool_id

    @staticmethod
    def get_client_id() -> str:
        client_id = settings.COGNITO_CLIENT_ID
        if not client_id:
            raise TokenVerificationError("COGNITO_CLIENT_ID is not configured")
        return client_id

    @staticmethod
    def get_issuer() -> str:
        return f"https://cognito-idp.{settings.AWS_REGION}.amazonaws.com/{CognitoConfig.get_user_pool_id()}"

    @staticmethod
    def get_jwks_url() -> str:
        return f"{CognitoConfig.get_issuer()}/.well-known/jwks.json"


class CognitoTokenVerifier:
    """
    Verifies Cognito ID tokens (RS256).

    Checks signature against the pool JWKS, expiry, issuer, audience
    (app client id) and that token_use is "id". Any failure raises
    TokenVerificationError; callers do not distinguish expired from invalid.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def _fetch_jwks(self) -> dict:
        """Download the user pool signing keys"""
        try:
            response = httpx.get(CognitoConfig.get_jwks_url(), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise TokenVerificationError(f"Could not fetch signing keys: {e}")

    def verify(self, token: str) -> dict:
        """
        Verify a Cognito ID token and return its claims

        Args:
            token: Raw JWT string

        Returns:
            Decoded claims dictionary

        Raises:
            TokenVerificationError: token is missing, malformed, expired or untrusted
        """
        if not token:
            raise TokenVerificationError("No token provided")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise TokenVerificationError(f"Invalid token: {e}")

        issuer = CognitoConfig.get_issuer()
        client_id = CognitoConfig.get_client_id()

        jwks = self._fetch_jwks()
        key = next(
            (k for k in jwks.get("keys", []) if k.get("kid") == header.get("kid")),
            None
        )
        if key is None:
            raise TokenVerificationError("Invalid token: unknown signing key")

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=client_id,
                issuer=issuer,
                options={"verify_at_hash": False}  # ID tokens are verified without the paired access token
            )
        except ExpiredSignatureError:
            raise TokenVerificationError("Token has expired")
        except JWTError as e:
            raise TokenVerificationError(f"Invalid token: {e}")

        if claims.get("token_use") != "id":
            raise TokenVerificationError("Invalid token: expected an ID token")

        return claims


def user_from_claims(claims: dict) -> AuthUser:
    """Build the AuthUser view of a verified ID token"""
    groups = claims.get("cognito:groups") or []
    return AuthUser(
        username=claims.get("cognito:username") or claims.get("sub", ""),
        email=claims.get("email"),
        name=claims.get("name"),
        is_admin=ADMIN_GROUP in groups
    )


def get_request_token(request: Request, cookie_name: str) -> Optional[str]:
    """Token from the Authorization header, falling back to the named cookie"""
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return request.cookies.get(cookie_name)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Dependency returning the raw bearer token, 401 when absent"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return credentials.credentials


async def require_admin_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Dependency for admin write endpoints.

    Usage:
        @router.put("/products")
        async def create_product(claims: dict = Depends(require_admin_token)):
            ...
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        return CognitoTokenVerifier().verify(credentials.credentials)
    except TokenVerificationError as e:
        logger.warning(f"Admin token rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token",
            headers={"WWW-Authenticate": "Bearer"}
        )


async def get_current_user(request: Request) -> AuthUser:
    """
    Dependency that resolves the signed-in customer from a bearer token or
    the idToken cookie.
    """
    token = get_request_token(request, "idToken")
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        claims = CognitoTokenVerifier().verify(token)
    except TokenVerificationError as e:
        logger.info(f"User token rejected: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    return user_from_claims(claims)
