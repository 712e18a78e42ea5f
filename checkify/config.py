from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database - can use either DATABASE_URL or separate params
    database_url: str | None = None

    # Separate DB params (for passwords with special characters)
    db_host: str | None = None
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str | None = None
    db_name: str = "postgres"

    # Auth - dev mode bypass
    dev_user_id: str | None = None  # Set this to bypass JWT auth in local dev

    # Supabase Auth (production)
    supabase_url: str | None = None
    supabase_jwt_secret: str | None = None

    # CORS - production frontend URL
    frontend_url: str | None = None

    # Notion upstream
    notion_api_base: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_timeout_seconds: float = 30.0
    notion_page_size: int = 100  # Notion API limit
    notion_request_delay_seconds: float = 0.1

    # Batch scheduling
    sync_batch_size: int = 5
    sync_batch_delay_seconds: float = 0.2
    stream_batch_size: int = 10
    stream_batch_delay_seconds: float = 0.05

    # Upstream retry (1 attempt = no retry)
    upstream_max_attempts: int = 1
    upstream_retry_base_delay: float = 1.0

    # Tiers
    allow_tier_override: bool = True

    # Stripe billing
    stripe_api_base: str = "https://api.stripe.com/v1"
    stripe_secret_key: str | None = None
    stripe_price_id_pro: str | None = None
    stripe_price_id_max: str | None = None

    @property
    def billing_enabled(self) -> bool:
        return self.stripe_secret_key is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
