"""
Order Repository - Data Access Layer for Orders

Orders are partitioned by buyer (pk USER#<userId>, sk ORDER#<orderId>).
Admin lookups by order id scan with a filter.

Author: Phace Web Team
Date: 2025-02-11
"""
import secrets
import string
from datetime import datetime, timezone
from typing import List, Optional

from boto3.dynamodb.conditions import Attr, Key

from phace.core.aws import from_dynamo, get_dynamodb_table, query_all, scan_all
from phace.core.config import settings
from phace.core.exceptions import NotFoundError
from phace.domain.order import Order, OrderStatus

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_order_id(timestamp: str) -> str:
    """ORDER_<timestamp>_<9 random chars>"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"ORDER_{timestamp}_{suffix}"


class OrderRepository:
    """Repository for Order data access"""

    def _table(self):
        return get_dynamodb_table(settings.ORDERS_TABLE)

    def create(self, order_data: dict) -> Order:
        """
        Create an order

        Args:
            order_data: Order fields without id/createdAt/updatedAt

        Returns:
            The stored Order
        """
        timestamp = datetime.now(timezone.utc).isoformat()
        order = Order.model_validate({
            **order_data,
            "id": new_order_id(timestamp),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        })
        self._table().put_item(Item=order.to_item())
        return order

    def find_by_user(self, user_id: str) -> List[Order]:
        items = query_all(
            self._table(),
            KeyConditionExpression=Key("pk").eq(f"USER#{user_id}") & Key("sk").begins_with("ORDER#")
        )
        return [Order.from_item(item) for item in items]

    def find_all(self) -> List[Order]:
        items = scan_all(self._table(), FilterExpression=Attr("sk").begins_with("ORDER#"))
        orders = [Order.from_item(item) for item in items]
        return sorted(orders, key=lambda o: o.created_at or "", reverse=True)

    def find_by_id(self, order_id: str) -> Optional[Order]:
        items = scan_all(self._table(), FilterExpression=Attr("id").eq(order_id))
        if not items:
            return None
        return Order.from_item(items[0])

    def _update(self, order_id: str, values: dict) -> Order:
        existing = self.find_by_id(order_id)
        if existing is None:
            raise NotFoundError(f"Order {order_id} not found")

        values = {**values, "updatedAt": datetime.now(timezone.utc).isoformat()}
        names = {f"#{field}": field for field in values}
        expression_values = {f":{field}": value for field, value in values.items()}
        response = self._table().update_item(
            Key=Order.key(existing.user_id, order_id),
            UpdateExpression="SET " + ", ".join(f"#{field} = :{field}" for field in values),
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=expression_values,
            ReturnValues="ALL_NEW"
        )
        return Order.from_item(from_dynamo(response["Attributes"]))

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """
        Set an order's status

        Raises:
            NotFoundError: no order with this id
        """
        return self._update(order_id, {"status": OrderStatus(status).value})

    def add_tracking_info(self, order_id: str, tracking_number: str, carrier: str) -> Order:
        return self._update(order_id, {"trackingNumber": tracking_number, "carrier": carrier})
