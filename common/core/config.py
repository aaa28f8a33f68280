from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "billing-sync"
    api_version: str = "v1"
    debug: bool = False

    # Database Components
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "billing"
    db_use_nullpool: bool = False
    db_pool_size: int = 10
    db_pool_overflow: int = 5
    # PgBouncer in transaction mode cannot reuse named prepared statements
    db_behind_pgbouncer: bool = False

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def async_database_url(self) -> str:
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://")

    # Rate limiting (use a redis:// URI to share limits across pods)
    rate_limit_storage_uri: str = "memory://"
    checkout_rate_limit: str = "20/minute"
    portal_rate_limit: str = "20/minute"

    # OpenTelemetry
    otel_service_name: str = "billing-sync"
    otel_service_version: str = "0.1.0"

    # Axiom (exporters are only wired when a token is configured)
    axiom_token: Optional[str] = None
    axiom_dataset: Optional[str] = None

    # Billing - Stripe (payments)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Base URL of the dashboard, used for checkout/portal redirects
    # when the request carries no Origin header
    app_base_url: str = "http://localhost:3000"

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        if self.environment == Environment.LOCAL:
            return [
                "http://localhost:3000",
                "http://localhost:3001",
            ]
        return [self.app_base_url]


settings = Settings()
