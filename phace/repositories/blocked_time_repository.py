"""
Blocked Time Repository - Data Access Layer for staff calendar blocks

Blocks live in the staff table under pk = STAFF#<staffId>#BLOCKED with the
block's start time as the sort key, so a date range is a single key query.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from boto3.dynamodb.conditions import Key

from phace.core.aws import get_dynamodb_table, query_all
from phace.core.config import settings
from phace.domain.booking import BlockedTime, Recurrence, RecurrenceFrequency

STEP = {
    RecurrenceFrequency.DAILY: timedelta(days=1),
    RecurrenceFrequency.WEEKLY: timedelta(days=7),
}


def parse_timestamp(value: str) -> datetime:
    """ISO date or datetime; values without an offset are UTC"""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class BlockedTimeRepository:
    """Repository for BlockedTime data access"""

    def _table(self):
        return get_dynamodb_table(settings.STAFF_TABLE)

    def _put(self, staff_id: str, start_time: str, end_time: str, reason: Optional[str],
             recurring: Optional[Recurrence]) -> BlockedTime:
        block = BlockedTime(
            id=uuid.uuid4().hex,
            staff_id=staff_id,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
            recurring=recurring,
            created_at=datetime.now(timezone.utc).isoformat()
        )
        self._table().put_item(Item=block.to_item())
        return block

    def create(self, staff_id: str, start_time: str, end_time: str, reason: Optional[str] = None,
               recurring: Optional[Recurrence] = None) -> List[BlockedTime]:
        """
        Block a time range, repeating it daily or weekly up to recurring.until

        Returns:
            Every block written, the requested one first

        Raises:
            ValueError: a timestamp is not ISO 8601
        """
        first_start = parse_timestamp(start_time)
        first_end = parse_timestamp(end_time)
        until = parse_timestamp(recurring.until) if recurring else None

        blocks = [self._put(staff_id, start_time, end_time, reason, recurring)]
        if recurring is None:
            return blocks

        step = STEP[recurring.frequency]
        current_start, current_end = first_start + step, first_end + step
        while current_start <= until:
            blocks.append(self._put(
                staff_id, format_timestamp(current_start), format_timestamp(current_end), reason, recurring
            ))
            current_start, current_end = current_start + step, current_end + step
        return blocks

    def find_in_range(self, staff_id: str, start_date: str, end_date: str) -> List[BlockedTime]:
        items = query_all(
            self._table(),
            KeyConditionExpression=(
                Key("pk").eq(f"STAFF#{staff_id}#BLOCKED") & Key("sk").between(start_date, end_date)
            )
        )
        return [BlockedTime.from_item(item) for item in items]

    def delete(self, staff_id: str, start_time: str) -> None:
        self._table().delete_item(Key=BlockedTime.key(staff_id, start_time))
