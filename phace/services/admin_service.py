"""
Admin Service
Admin accounts (admin table + bcrypt hashes) and admin token checks

Author: Phace Web Team
Date: 2025-03-02
"""
import logging
from typing import Dict, List, Optional

from passlib.context import CryptContext

from phace.core.auth import CognitoTokenVerifier
from phace.core.exceptions import NotFoundError, ServiceError
from phace.domain.user import AdminRole, AdminUser
from phace.repositories.admin_repository import AdminRepository

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AdminService:
    """
    Service for admin accounts

    Handles:
    - Creating admins with hashed passwords
    - Email/password verification against the admin table
    - Cognito ID token verification for admin API calls
    - Listing admins and changing roles
    """

    def __init__(self, repository: AdminRepository = None):
        self.repository = repository or AdminRepository()

    def create_admin(self, email: str, password: str, name: str,
                     role: AdminRole = AdminRole.ADMIN) -> AdminUser:
        admin = AdminUser(
            email=email,
            name=name,
            role=role,
            password_hash=pwd_context.hash(password)
        )
        created = self.repository.create(admin)
        logger.info(f"Created admin {email} with role {created.role.value}")
        return created

    def verify_admin(self, email: str, password: str) -> Dict:
        """
        Check admin credentials

        Returns:
            {"admin": {email, name, role}}

        Raises:
            NotFoundError: no admin with this email
            ServiceError: password does not match
        """
        admin = self.repository.get(email)
        if admin is None:
            raise NotFoundError("Admin not found")

        if not admin.password_hash or not pwd_context.verify(password, admin.password_hash):
            raise ServiceError("Invalid password")

        return {"admin": admin.public_dict()}

    def verify_token(self, token: str) -> dict:
        """Verify a Cognito ID token, raising TokenVerificationError when it is not trusted"""
        return CognitoTokenVerifier().verify(token)

    def get_admin(self, email: str) -> Optional[AdminUser]:
        return self.repository.get(email)

    def list_admins(self) -> List[Dict]:
        return [admin.public_dict() for admin in self.repository.list_all()]

    def update_admin_role(self, email: str, role: AdminRole) -> None:
        self.repository.update_role(email, role)
        logger.info(f"Admin {email} role set to {AdminRole(role).value}")
