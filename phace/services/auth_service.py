"""
Auth Service
Customer sign-up, sign-in and password flows against the Cognito user pool

Author: Phace Web Team
Date: 2025-02-06
"""
import logging
import re
from typing import Dict

from phace.core.aws import get_cognito_client
from phace.core.config import settings
from phace.core.exceptions import NewPasswordRequiredError

logger = logging.getLogger(__name__)

# Cognito attribute name -> user dict key
USER_ATTRIBUTE_MAP = {
    'phone_number': 'phone',
    'email': 'email',
    'name': 'name',
    'sub': 'sub',
}


def format_phone_number(phone: str) -> str:
    """
    Format a phone number as E.164

    10 digits are assumed to be North American (+1), 11 digits starting
    with 1 already carry the country code, and anything starting with '+'
    is passed through.

    Raises:
        ValueError: number matches none of the accepted shapes
    """
    digits = re.sub(r"\D", "", phone)

    if len(digits) == 10:
        return f"+1{digits}"

    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"

    if phone.startswith("+"):
        return phone

    raise ValueError("Invalid phone number format. Please enter a valid 10-digit phone number.")


class AuthService:
    """
    Service for Cognito user pool operations

    Handles:
    - Sign up and email confirmation
    - Password sign-in (USER_PASSWORD_AUTH) and the new-password challenge
    - Forgot / reset password
    - Reading and updating the signed-in user's attributes
    """

    def __init__(self, client_id: str = None):
        self.client_id = client_id or settings.COGNITO_CLIENT_ID
        if not self.client_id:
            raise ValueError("Cognito not configured. Set COGNITO_CLIENT_ID")
        self.client = get_cognito_client()

    def sign_up(self, email: str, password: str, name: str) -> Dict:
        return self.client.sign_up(
            ClientId=self.client_id,
            Username=email,
            Password=password,
            UserAttributes=[
                {'Name': 'name', 'Value': name},
                {'Name': 'email', 'Value': email},
            ]
        )

    def sign_in(self, email: str, password: str) -> Dict:
        """
        Password sign-in

        Returns:
            Cognito AuthenticationResult (AccessToken, RefreshToken, IdToken, ...)

        Raises:
            NewPasswordRequiredError: account still holds a temporary password
        """
        result = self.client.initiate_auth(
            AuthFlow='USER_PASSWORD_AUTH',
            ClientId=self.client_id,
            AuthParameters={'USERNAME': email, 'PASSWORD': password}
        )

        if result.get('ChallengeName') == 'NEW_PASSWORD_REQUIRED':
            logger.info(f"Sign-in for {email} requires a new password")
            raise NewPasswordRequiredError(
                session=result.get('Session'),
                challenge_parameters=result.get('ChallengeParameters')
            )

        return result.get('AuthenticationResult') or {}

    def set_new_password(self, email: str, new_password: str, session: str) -> Dict:
        result = self.client.respond_to_auth_challenge(
            ClientId=self.client_id,
            ChallengeName='NEW_PASSWORD_REQUIRED',
            Session=session,
            ChallengeResponses={'USERNAME': email, 'NEW_PASSWORD': new_password}
        )
        return result.get('AuthenticationResult') or {}

    def confirm_sign_up(self, email: str, code: str) -> None:
        self.client.confirm_sign_up(
            ClientId=self.client_id,
            Username=email,
            ConfirmationCode=code
        )

    def forgot_password(self, email: str) -> None:
        self.client.forgot_password(ClientId=self.client_id, Username=email)

    def confirm_forgot_password(self, email: str, code: str, new_password: str) -> None:
        self.client.confirm_forgot_password(
            ClientId=self.client_id,
            Username=email,
            ConfirmationCode=code,
            Password=new_password
        )

    def get_user(self, access_token: str) -> Dict[str, str]:
        """
        Current attributes of the user owning the access token

        Known attributes are renamed (phone_number -> phone); others keep their
        Cognito names.
        """
        result = self.client.get_user(AccessToken=access_token)
        user: Dict[str, str] = {}
        for attribute in result.get('UserAttributes', []):
            name = attribute.get('Name')
            value = attribute.get('Value')
            if name and value:
                user[USER_ATTRIBUTE_MAP.get(name, name)] = value
        return user

    def update_phone(self, access_token: str, phone: str) -> str:
        """
        Store a phone number on the user, formatted as E.164

        Returns:
            The formatted number

        Raises:
            ValueError: phone number is not in an accepted shape
        """
        formatted = format_phone_number(phone)
        self.client.update_user_attributes(
            AccessToken=access_token,
            UserAttributes=[{'Name': 'phone_number', 'Value': formatted}]
        )
        return formatted
