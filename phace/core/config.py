"""
Centralized application configuration

Every external identifier (pool ids, tokens, bucket and table names) comes
from the environment or a local .env file.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_TITLE: str = "Phace API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Store, booking and admin API for Phace"
    LOG_LEVEL: str = "INFO"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://phace.ca" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # AWS
    AWS_REGION: str = "us-west-2"
    COGNITO_USER_POOL_ID: str = ""
    COGNITO_CLIENT_ID: str = ""

    # DynamoDB tables
    PRODUCTS_TABLE: str = "phace-products"
    ORDERS_TABLE: str = "phace-orders"
    COUPONS_TABLE: str = "phace-coupons"
    ADMIN_TABLE: str = "phace-admin-users"
    WAITLIST_TABLE: str = "phace-waitlist"
    STAFF_TABLE: str = "phace-staff"

    # S3 / SES
    S3_BUCKET_NAME: str = ""
    SES_SENDER_EMAIL: str = ""
    ADMIN_EMAIL: str = ""

    # Payments and booking
    STRIPE_SECRET_KEY: str = ""
    SQUARE_ACCESS_TOKEN: str = ""
    SQUARE_ENVIRONMENT: str = "sandbox"
    SQUARE_LOCATION_ID: str = ""
    SQUARE_ADDON_CATEGORY_ID: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
