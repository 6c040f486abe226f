"""
Application configuration management using Pydantic Settings
Handles all environment variables and storefront business settings
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from decimal import Decimal
from functools import lru_cache


class Settings(BaseSettings):
    """Main application settings"""

    # Application Settings
    APP_NAME: str = "Vitals Storefront API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # Security Settings
    SECRET_KEY: str
    SESSION_COOKIE_NAME: str = "storefront_session"
    SESSION_MAX_AGE_SECONDS: int = 14 * 24 * 60 * 60

    # CORS Configuration
    ALLOWED_HOSTS: List[str] = ["*"]
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Upstream order/promo/loyalty backend
    STOREFRONT_API_URL: str = "http://localhost:3500/api"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    PROMO_VALIDATE_PATH: str = "/promo/validate"
    LOYALTY_BALANCE_PATH: str = "/loyalty/balance"
    ORDERS_PATH: str = "/orders"
    PAYMENT_VERIFY_PATH: str = "/payments/verify-payment"
    PAYMENT_FAILED_PATH: str = "/payments/payment-failed"

    # Cart persistence
    CART_STORAGE_DIR: str = "var/carts"
    SESSION_CACHE_SIZE: int = 10000
    MAX_ITEM_QUANTITY: int = 99

    # Pricing rules
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("1000")
    SHIPPING_FLAT_FEE: Decimal = Decimal("50")
    TAX_RATE: Decimal = Decimal("0.08")
    POINT_VALUE: Decimal = Decimal("1")

    # Payment Gateway (Razorpay)
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    PAYMENT_CURRENCY: str = "INR"
    PAYMENT_MERCHANT_NAME: str = "Thryv Nutrition"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_DEFAULT: str = "1000/hour"
    RATE_LIMIT_PROMO: str = "30/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def razorpay_enabled(self) -> bool:
        """Online payments need both halves of the key pair"""
        return bool(self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET)


@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance
    This ensures settings are loaded only once
    """
    return Settings()

# Global settings instance
settings = get_settings()
