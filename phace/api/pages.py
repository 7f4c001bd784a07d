"""
Pages
Server-rendered store and admin pages (Jinja2)

Admin pages sit behind AdminGateMiddleware; by the time a handler here runs
the adminToken cookie has been verified.
"""
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from phace.repositories.order_repository import OrderRepository
from phace.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter()


def _load(loader, what: str):
    """Page data, or ([], message) when the table cannot be read"""
    try:
        return loader(), None
    except Exception as e:
        logger.error(f"Could not load {what}: {e}")
        return [], f"Could not load {what}"


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "home.html", {})


@router.get("/store", response_class=HTMLResponse)
async def store(request: Request, category: str = None):
    products, error = _load(lambda: ProductRepository().find_all(category=category), "products")
    return templates.TemplateResponse(request, "store.html", {
        "products": products,
        "category": category,
        "error": error,
    })


@router.get("/store/product/{product_id}", response_class=HTMLResponse)
async def product_page(request: Request, product_id: str):
    product = ProductRepository().find_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return templates.TemplateResponse(request, "product.html", {"product": product})


@router.get("/login", response_class=HTMLResponse)
async def login(request: Request):
    return templates.TemplateResponse(request, "login.html", {})


@router.get("/admin/login", response_class=HTMLResponse)
async def admin_login(request: Request):
    return templates.TemplateResponse(request, "admin/login.html", {})


@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(request: Request):
    orders, error = _load(lambda: OrderRepository().find_all(), "orders")
    return templates.TemplateResponse(request, "admin/dashboard.html", {
        "recent_orders": orders[:10],
        "order_count": len(orders),
        "error": error,
    })


@router.get("/admin/orders", response_class=HTMLResponse)
async def admin_orders(request: Request):
    orders, error = _load(lambda: OrderRepository().find_all(), "orders")
    return templates.TemplateResponse(request, "admin/orders.html", {"orders": orders, "error": error})


@router.get("/admin/products", response_class=HTMLResponse)
async def admin_products(request: Request):
    products, error = _load(lambda: ProductRepository().find_all(), "products")
    return templates.TemplateResponse(request, "admin/products.html", {"products": products, "error": error})
