"""
Waitlist Repository - Data Access Layer for waitlist entries

Entries are stored under pk = sk = WAITLIST#<id> with a GSI1 projection
(SERVICE#<serviceId>, STATUS#<status>) for per-service listings.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from phace.core.aws import (
    from_dynamo,
    get_dynamodb_table,
    is_conditional_check_failure,
    query_all,
    scan_all,
)
from phace.core.config import settings
from phace.core.exceptions import NotFoundError
from phace.domain.booking import WaitlistEntry, WaitlistStatus

SERVICE_STATUS_INDEX = "GSI1"


class WaitlistRepository:
    """Repository for WaitlistEntry data access"""

    def _table(self):
        return get_dynamodb_table(settings.WAITLIST_TABLE)

    def create(self, entry_data: dict) -> WaitlistEntry:
        entry = WaitlistEntry.model_validate({
            **entry_data,
            "id": uuid.uuid4().hex,
            "status": WaitlistStatus.ACTIVE.value,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        })
        self._table().put_item(Item=entry.to_item())
        return entry

    def get(self, entry_id: str) -> Optional[WaitlistEntry]:
        response = self._table().get_item(Key=WaitlistEntry.key(entry_id))
        item = response.get("Item")
        return WaitlistEntry.from_item(item) if item else None

    def find_by_status(self, status: WaitlistStatus) -> List[WaitlistEntry]:
        items = scan_all(
            self._table(),
            FilterExpression=Attr("type").eq("waitlist") & Attr("status").eq(WaitlistStatus(status).value)
        )
        return [WaitlistEntry.from_item(item) for item in items]

    def find_by_service(self, service_id: str, status: WaitlistStatus) -> List[WaitlistEntry]:
        items = query_all(
            self._table(),
            IndexName=SERVICE_STATUS_INDEX,
            KeyConditionExpression=(
                Key("GSI1PK").eq(f"SERVICE#{service_id}")
                & Key("GSI1SK").eq(f"STATUS#{WaitlistStatus(status).value}")
            )
        )
        return [WaitlistEntry.from_item(item) for item in items]

    def update_status(self, entry_id: str, status: WaitlistStatus, notes: Optional[str] = None) -> WaitlistEntry:
        """
        Move an entry to a new status, keeping the GSI1 sort key in step

        Raises:
            NotFoundError: entry does not exist
        """
        status = WaitlistStatus(status)
        expression = "SET #status = :status, GSI1SK = :gsi, updatedAt = :updated"
        values = {
            ":status": status.value,
            ":gsi": f"STATUS#{status.value}",
            ":updated": datetime.now(timezone.utc).isoformat(),
        }
        if notes is not None:
            expression += ", notes = :notes"
            values[":notes"] = notes

        try:
            response = self._table().update_item(
                Key=WaitlistEntry.key(entry_id),
                UpdateExpression=expression,
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues=values,
                ConditionExpression="attribute_exists(pk)",
                ReturnValues="ALL_NEW"
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                raise NotFoundError("Waitlist entry not found")
            raise
        return WaitlistEntry.from_item(from_dynamo(response["Attributes"]))

    def delete(self, entry_id: str) -> None:
        self._table().delete_item(Key=WaitlistEntry.key(entry_id))
