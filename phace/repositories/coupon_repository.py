"""
Coupon Repository - Data Access Layer for Coupons

Coupons are keyed by upper-cased code. Usage counting is a plain ADD
update; the usage limit is not enforced atomically.
"""
import logging
from typing import List, Optional

from botocore.exceptions import ClientError

from phace.core.aws import (
    get_dynamodb_table,
    is_conditional_check_failure,
    scan_all,
    to_dynamo,
)
from phace.core.config import settings
from phace.domain.coupon import Coupon

logger = logging.getLogger(__name__)


class CouponRepository:
    """Repository for Coupon data access"""

    def _table(self):
        return get_dynamodb_table(settings.COUPONS_TABLE)

    def get(self, code: str) -> Optional[Coupon]:
        response = self._table().get_item(Key={"code": code.upper()})
        item = response.get("Item")
        if not item:
            return None
        return Coupon.from_item(item)

    def create(self, coupon: Coupon) -> bool:
        """
        Insert a new coupon

        Returns:
            False when a coupon with the same code already exists
        """
        try:
            self._table().put_item(
                Item=coupon.to_item(),
                ConditionExpression="attribute_not_exists(code)"
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.info(f"Coupon {coupon.code} already exists")
                return False
            raise

    def list_all(self) -> List[Coupon]:
        return [Coupon.from_item(item) for item in scan_all(self._table())]

    def increment_usage(self, code: str) -> bool:
        try:
            self._table().update_item(
                Key={"code": code.upper()},
                UpdateExpression="ADD currentUsage :inc",
                ExpressionAttributeValues={":inc": 1},
                ConditionExpression="attribute_exists(code)"
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            raise

    def update(self, code: str, updates: dict) -> bool:
        """
        SET the given camelCase attributes on an existing coupon

        Returns:
            False when nothing was given or the coupon does not exist
        """
        updates = {k: v for k, v in updates.items() if v is not None and k not in ("code", "createdAt")}
        if not updates:
            return False

        names = {}
        values = {}
        assignments = []
        for index, (field, value) in enumerate(updates.items()):
            names[f"#f{index}"] = field
            values[f":v{index}"] = to_dynamo(value)
            assignments.append(f"#f{index} = :v{index}")

        try:
            self._table().update_item(
                Key={"code": code.upper()},
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression="attribute_exists(code)"
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            raise

    def delete(self, code: str) -> bool:
        try:
            self._table().delete_item(
                Key={"code": code.upper()},
                ConditionExpression="attribute_exists(code)"
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            raise
