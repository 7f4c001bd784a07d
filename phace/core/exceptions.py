"""
Domain exceptions raised by services and connectors

Route handlers catch these at the boundary and map them to HTTP status codes.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Requested record does not exist in the external system"""


class TokenVerificationError(ServiceError):
    """Identity token missing, malformed, expired or signed by someone else"""


class NewPasswordRequiredError(ServiceError):
    """Cognito answered sign-in with a NEW_PASSWORD_REQUIRED challenge"""

    def __init__(self, session: str, challenge_parameters: Optional[Dict[str, Any]] = None):
        super().__init__("You must set a new password before you can sign in")
        self.session = session
        self.challenge_parameters = challenge_parameters or {}


class SquareAPIError(ServiceError):
    """Square REST API returned an error payload"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StripeAPIError(ServiceError):
    """Stripe REST API returned an error payload"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
