"""
Admin gate middleware for Phace Backend

Every request to an /admin page (except the login page itself) must carry an
adminToken cookie holding a valid Cognito ID token. A verified token is
forwarded to the page as an Authorization header; a missing or rejected token
clears the cookie and redirects to the login page.
"""
import logging

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from phace.core import auth
from phace.core.exceptions import TokenVerificationError

logger = logging.getLogger(__name__)

ADMIN_PREFIX = "/admin"
LOGIN_PATH = "/admin/login"
TOKEN_COOKIE = "adminToken"


def is_protected_path(path: str) -> bool:
    """True for /admin and /admin/... except the login page"""
    if path.rstrip("/") == LOGIN_PATH:
        return False
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


class AdminGateMiddleware(BaseHTTPMiddleware):
    """
    Middleware that guards admin pages.

    unchecked -> verify adminToken cookie -> authorized (Authorization header
    attached, request continues) or rejected (cookie cleared, redirect).
    """

    def _reject(self) -> RedirectResponse:
        response = RedirectResponse(url=LOGIN_PATH)
        response.delete_cookie(TOKEN_COOKIE)
        return response

    async def dispatch(self, request: Request, call_next):
        if not is_protected_path(request.url.path):
            return await call_next(request)

        token = request.cookies.get(TOKEN_COOKIE)
        if not token:
            return self._reject()

        try:
            auth.CognitoTokenVerifier().verify(token)
        except TokenVerificationError as e:
            logger.info(f"Admin gate rejected token for {request.url.path}: {e}")
            return self._reject()

        headers = [
            (name, value) for name, value in request.scope["headers"]
            if name != b"authorization"
        ]
        headers.append((b"authorization", f"Bearer {token}".encode()))
        request.scope["headers"] = headers

        return await call_next(request)
