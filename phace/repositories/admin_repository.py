"""
Admin Repository - Data Access Layer for admin users

Items are stored under pk = sk = ADMIN#<email>.
"""
from datetime import datetime, timezone
from typing import List, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from phace.core.aws import (
    from_dynamo,
    get_dynamodb_table,
    is_conditional_check_failure,
    scan_all,
    to_dynamo,
)
from phace.core.config import settings
from phace.core.exceptions import NotFoundError, ServiceError
from phace.domain.user import AdminRole, AdminUser


class AdminRepository:
    """Repository for AdminUser data access"""

    def _table(self):
        return get_dynamodb_table(settings.ADMIN_TABLE)

    def get(self, email: str) -> Optional[AdminUser]:
        response = self._table().get_item(Key=AdminUser.key(email))
        item = response.get("Item")
        if not item:
            return None
        return AdminUser.model_validate(from_dynamo(item))

    def create(self, admin: AdminUser) -> AdminUser:
        admin = admin.model_copy(update={"created_at": datetime.now(timezone.utc)})
        item = to_dynamo(admin.model_dump(by_alias=True, mode="json"))
        item.update(AdminUser.key(admin.email))
        try:
            self._table().put_item(Item=item, ConditionExpression="attribute_not_exists(pk)")
        except ClientError as e:
            if is_conditional_check_failure(e):
                raise ServiceError(f"Admin {admin.email} already exists")
            raise
        return admin

    def list_all(self) -> List[AdminUser]:
        items = scan_all(self._table(), FilterExpression=Attr("pk").begins_with("ADMIN#"))
        return [AdminUser.model_validate(from_dynamo(item)) for item in items]

    def update_role(self, email: str, role: AdminRole) -> None:
        try:
            self._table().update_item(
                Key=AdminUser.key(email),
                UpdateExpression="SET #role = :role, updatedAt = :updated",
                ExpressionAttributeNames={"#role": "role"},
                ExpressionAttributeValues={
                    ":role": AdminRole(role).value,
                    ":updated": datetime.now(timezone.utc).isoformat(),
                },
                ConditionExpression="attribute_exists(pk)"
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                raise NotFoundError("Admin not found")
            raise
