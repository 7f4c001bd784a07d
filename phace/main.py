"""
Phace - Backend API
Store, booking and admin backend for the Phace medical spa
"""
import logging
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from phace.api import admin, auth, booking, coupons, orders, pages, payments, products, uploads, user
from phace.core.config import settings
from phace.core.errors import register_exception_handlers
from phace.core.middleware import AdminGateMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
app.add_middleware(AdminGateMiddleware)

register_exception_handlers(app)

# Include API routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(user.router, prefix="/api/user", tags=["User"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(products.categories_router, prefix="/api/categories", tags=["Products"])
app.include_router(coupons.router, prefix="/api", tags=["Coupons"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])
app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
app.include_router(booking.router, prefix="/api/booking", tags=["Booking"])

# Server-rendered pages (home page included)
app.include_router(pages.router, include_in_schema=False)


@app.get("/health")
async def health():
    """Health check - which integrations are configured (never their values)"""
    return {
        "status": "healthy",
        "service": "phace-api",
        "version": settings.API_VERSION,
        "integrations": {
            "cognito": bool(settings.COGNITO_USER_POOL_ID and settings.COGNITO_CLIENT_ID),
            "stripe": bool(settings.STRIPE_SECRET_KEY),
            "square": bool(settings.SQUARE_ACCESS_TOKEN),
            "s3": bool(settings.S3_BUCKET_NAME),
            "ses": bool(settings.SES_SENDER_EMAIL),
        }
    }


@app.get("/api")
async def api_root():
    """API status"""
    return {
        "message": "Phace API",
        "status": "online",
        "version": settings.API_VERSION
    }
