"""
Product Domain Model

Represents a store product. Field names on the wire and in the products table
are camelCase (inStock, createdAt); Python attributes are snake_case.

Author: Phace Web Team
Date: 2025-02-11
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from phace.core.aws import from_dynamo, to_dynamo


class ProductVariant(BaseModel):
    """A purchasable variation of a product (size, shade, ...)"""
    id: str
    name: str
    price: float = Field(..., ge=0)
    sku: Optional[str] = None
    in_stock: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Product ID (partition key suffix PRODUCT#<id>)
        name: Product name
        description: Marketing description
        price: Unit price in dollars
        images: Public image URLs (uploaded through presigned S3 URLs)
        category: Category name, indexed by CategoryIndex
        sku: Stock Keeping Unit
        in_stock: Whether the product can be purchased
        quantity: Units on hand, when tracked
        variants: Optional variations
    """
    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    price: float = Field(0, ge=0, description="Unit price")
    images: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    sku: Optional[str] = None
    in_stock: bool = True
    quantity: Optional[int] = None
    variants: List[ProductVariant] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @staticmethod
    def key(product_id: str) -> dict:
        return {"pk": f"PRODUCT#{product_id}", "sk": f"PRODUCT#{product_id}"}

    @classmethod
    def from_item(cls, item: dict) -> "Product":
        return cls.model_validate(from_dynamo(item))

    def to_item(self) -> dict:
        item = to_dynamo(self.model_dump(by_alias=True, mode="json"))
        item.update(self.key(self.id))
        return item

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ProductCategory(BaseModel):
    """Catalog category as returned by Square"""
    id: str
    name: str
    updated_at: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_square(cls, obj: dict) -> "ProductCategory":
        data = obj.get("category_data") or {}
        return cls(
            id=obj["id"],
            name=data.get("name") or "Unnamed Category",
            updated_at=obj.get("updated_at")
        )
