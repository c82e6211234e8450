from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings; environment variables override `.env.local`."""

    model_config = SettingsConfigDict(env_file=".env.local", extra="ignore")

    # ── Service ──────────────────────────────────────────────────
    app_name: str = "Aymur Retail"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    api_version: str = "v1"

    # ── MongoDB ──────────────────────────────────────────────────
    mongodb_uri: Optional[str] = None
    database_name: str = "aymur_db"

    # ── Tokens ───────────────────────────────────────────────────
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440

    # Request header naming the shop a call acts on
    shop_header: str = "X-Shop-Id"

    # ── POS ──────────────────────────────────────────────────────
    # Percent; a request's tax_rate query parameter takes precedence
    default_tax_rate: float = Field(0.0, ge=0, le=100)

    # ── CORS (dashboard origins) ─────────────────────────────────
    cors_allowed_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = ["*"]
    cors_allowed_headers: list[str] = ["*"]


settings = Settings()
