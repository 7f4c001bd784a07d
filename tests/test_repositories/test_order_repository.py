"""
Unit tests for OrderRepository
"""
import re
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from phace.core.exceptions import NotFoundError
from phace.domain.order import OrderStatus
from phace.repositories.order_repository import OrderRepository, new_order_id


@pytest.fixture
def order_item():
    return {
        "pk": "USER#user-1",
        "sk": "ORDER#ORDER_1",
        "id": "ORDER_1",
        "userId": "user-1",
        "items": [{"productId": "serum", "name": "Serum", "quantity": Decimal("2"), "price": Decimal("40")}],
        "total": Decimal("80"),
        "status": "paid",
        "customerEmail": "jane@example.com",
        "createdAt": "2025-02-01T10:00:00+00:00"
    }


class TestOrderRepository:

    def test_order_id_format(self):
        order_id = new_order_id("2025-02-01T10:00:00+00:00")

        assert re.fullmatch(r"ORDER_2025-02-01T10:00:00\+00:00_[a-z0-9]{9}", order_id)

    @patch("phace.repositories.order_repository.get_dynamodb_table")
    def test_create_partitions_by_user(self, mock_get_table, sample_order_items):
        mock_table = MagicMock()
        mock_get_table.return_value = mock_table

        order = OrderRepository().create({"userId": "user-1", "items": sample_order_items, "total": 100.0})

        assert order.status == OrderStatus.PENDING
        assert order.id.startswith("ORDER_")
        item = mock_table.put_item.call_args.kwargs["Item"]
        assert item["pk"] == "USER#user-1"
        assert item["sk"] == f"ORDER#{order.id}"
        assert item["total"] == Decimal("100.0")

    @patch("phace.repositories.order_repository.get_dynamodb_table")
    def test_find_all_newest_first(self, mock_get_table, order_item):
        older = {**order_item, "id": "ORDER_0", "createdAt": "2025-01-01T00:00:00+00:00"}
        mock_get_table.return_value.scan.return_value = {"Items": [older, order_item]}

        orders = OrderRepository().find_all()

        assert [o.id for o in orders] == ["ORDER_1", "ORDER_0"]

    @patch("phace.repositories.order_repository.get_dynamodb_table")
    def test_update_status_uses_owner_key(self, mock_get_table, order_item):
        mock_table = MagicMock()
        mock_get_table.return_value = mock_table
        mock_table.scan.return_value = {"Items": [order_item]}
        mock_table.update_item.return_value = {"Attributes": {**order_item, "status": "shipped"}}

        order = OrderRepository().update_status("ORDER_1", OrderStatus.SHIPPED)

        assert order.status == OrderStatus.SHIPPED
        kwargs = mock_table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"pk": "USER#user-1", "sk": "ORDER#ORDER_1"}
        assert kwargs["ExpressionAttributeValues"][":status"] == "shipped"

    @patch("phace.repositories.order_repository.get_dynamodb_table")
    def test_update_unknown_order(self, mock_get_table):
        mock_get_table.return_value.scan.return_value = {"Items": []}

        with pytest.raises(NotFoundError):
            OrderRepository().add_tracking_info("NOPE", "1Z999", "UPS")

    @patch("phace.repositories.order_repository.get_dynamodb_table")
    def test_invalid_status_rejected(self, mock_get_table, order_item):
        mock_get_table.return_value.scan.return_value = {"Items": [order_item]}

        with pytest.raises(ValueError):
            OrderRepository().update_status("ORDER_1", "lost")
