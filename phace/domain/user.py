"""
User Domain Models

AuthUser is the view of a Cognito identity; AdminUser mirrors the admin
table. Credentials are never persisted by this app except the admin
password hash.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthUser(BaseModel):
    """Signed-in customer or admin as seen by the identity provider"""
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminUser(BaseModel):
    """Admin table record"""
    email: str
    name: Optional[str] = None
    role: AdminRole = AdminRole.ADMIN
    password_hash: Optional[str] = Field(None, description="bcrypt hash, never returned by the API")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @staticmethod
    def key(email: str) -> dict:
        return {"pk": f"ADMIN#{email}", "sk": f"ADMIN#{email}"}

    def public_dict(self) -> dict:
        """Fields safe to send to the browser"""
        return {"email": self.email, "name": self.name, "role": self.role.value}
