"""
Product Repository - Data Access Layer for Products

Handles all table operations for products and returns Product domain models.

Author: Phace Web Team
Date: 2025-02-11
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from boto3.dynamodb.conditions import Key

from phace.core.aws import get_dynamodb_table, query_all, scan_all
from phace.core.config import settings
from phace.core.exceptions import NotFoundError
from phace.domain.product import Product

logger = logging.getLogger(__name__)

CATEGORY_INDEX = "CategoryIndex"


class ProductRepository:
    """
    Repository for Product data access

    Items are stored under pk = sk = PRODUCT#<id>.
    """

    def _table(self):
        return get_dynamodb_table(settings.PRODUCTS_TABLE)

    def create(self, product: Product) -> Product:
        """Insert or replace a product"""
        now = datetime.now(timezone.utc).isoformat()
        product = product.model_copy(update={
            "created_at": product.created_at or now,
            "updated_at": now,
        })
        self._table().put_item(Item=product.to_item())
        return product

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        response = self._table().get_item(Key=Product.key(product_id))
        item = response.get("Item")
        if not item:
            return None
        return Product.from_item(item)

    def find_all(self, category: Optional[str] = None) -> List[Product]:
        """
        List products, optionally restricted to one category

        Category filtering goes through the CategoryIndex GSI; the unfiltered
        listing is a full scan.
        """
        table = self._table()
        if category:
            items = query_all(
                table,
                IndexName=CATEGORY_INDEX,
                KeyConditionExpression=Key("category").eq(category)
            )
        else:
            items = scan_all(table)
        return [Product.from_item(item) for item in items]

    def update(self, product_id: str, updates: dict) -> Product:
        """
        Merge updates into an existing product

        The product id never changes, whatever the updates contain.

        Raises:
            NotFoundError: product does not exist
        """
        existing = self.find_by_id(product_id)
        if existing is None:
            raise NotFoundError("Product not found")

        merged = existing.model_dump(by_alias=True, mode="json")
        merged.update(updates)
        merged["id"] = product_id
        merged["updatedAt"] = datetime.now(timezone.utc).isoformat()
        product = Product.model_validate(merged)

        self._table().put_item(Item=product.to_item())
        return product

    def delete(self, product_id: str) -> None:
        logger.info(f"Deleting product {product_id}")
        self._table().delete_item(Key=Product.key(product_id))
