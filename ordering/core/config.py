"""Application configuration."""

from decimal import Decimal
from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Restaurant Ordering API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./ordering.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "480"))
    admin_email: str = getenv("ADMIN_EMAIL", "admin@restaurant.local")
    admin_password: str = getenv("ADMIN_PASSWORD", "change-me")

    default_delivery_fee: Decimal = Decimal(getenv("DEFAULT_DELIVERY_FEE", "2.50"))
    order_number_prefix: str = getenv("ORDER_NUMBER_PREFIX", "PCB")

    smtp_host: str = getenv("SMTP_HOST", "")
    smtp_port: int = int(getenv("SMTP_PORT", "587"))
    smtp_user: str = getenv("SMTP_USER", "")
    smtp_password: str = getenv("SMTP_PASSWORD", "")
    smtp_use_tls: bool = getenv("SMTP_USE_TLS", "1") == "1"
    from_email: str = getenv("FROM_EMAIL", "noreply@restaurant.local")
    from_name: str = getenv("FROM_NAME", "Restaurant")
    reply_to_email: str = getenv("REPLY_TO_EMAIL", "info@restaurant.local")

    company_name: str = getenv("COMPANY_NAME", "Restaurant s.r.o.")
    company_address: str = getenv("COMPANY_ADDRESS", "Hlavná 1")
    company_city: str = getenv("COMPANY_CITY", "945 01 Komárno")
    company_ico: str = getenv("COMPANY_ICO", "")
    company_dic: str = getenv("COMPANY_DIC", "")
    company_vat_number: str = getenv("COMPANY_VAT_NUMBER", "")


settings: Settings = Settings()
