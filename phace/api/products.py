"""
Products API Endpoints
Public store catalog (products table) and Square category lookup

Author: Phace Web Team
Date: 2025-02-11
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from phace.repositories.product_repository import ProductRepository
from phace.services.square_payment_service import SquarePaymentService

logger = logging.getLogger(__name__)

router = APIRouter()
categories_router = APIRouter()


@router.get("")
async def list_products(
    category: Optional[str] = Query(None, description="Filter by category")
):
    """All products, or one category's products through the category index"""
    try:
        products = ProductRepository().find_all(category=category)
        return [product.to_dict() for product in products]
    except Exception as e:
        logger.error(f"Error loading products: {e}")
        raise HTTPException(status_code=500, detail="Failed to load products")


@router.get("/{product_id}")
async def get_product(product_id: str):
    try:
        product = ProductRepository().find_by_id(product_id)
    except Exception as e:
        logger.error(f"Error getting product {product_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get product")

    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.to_dict()


@categories_router.get("")
async def get_categories(
    category_ids: Optional[str] = Query(None, alias="categoryIds", description="Comma-separated ids")
):
    if not category_ids:
        raise HTTPException(status_code=400, detail="categoryIds query parameter is required")

    try:
        categories = await SquarePaymentService().get_categories(category_ids.split(","))
        return [category.model_dump(by_alias=True, mode="json") for category in categories]
    except Exception as e:
        logger.error(f"Error loading categories: {e}")
        raise HTTPException(status_code=500, detail="Failed to load categories")
