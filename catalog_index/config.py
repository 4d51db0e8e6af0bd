"""Application configuration via environment variables.

Default values are intended for local development only.
Production deployments should override via .env file or environment variables.

Security considerations:
- search_api_key: Use an admin key scoped to the store indices, never commit it
- postgres_password: Override with a strong password in production
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Hosted search service
    search_app_id: str = "LOCALDEV"
    search_api_key: str | None = None
    search_host: str | None = None
    search_timeout: float = 30.0
    index_prefix: str = "catalog_"

    # Merchant configuration
    store_config_path: str | None = "data/stores.json"
    batch_size: int = 1000

    # PostgreSQL (reference catalog source)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "catalog"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"

    @property
    def search_url(self) -> str:
        if self.search_host:
            return self.search_host.rstrip("/")
        return f"https://{self.search_app_id.lower()}.algolia.net"

    @property
    def postgres_url_sync(self) -> str:
        return f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"


settings = Settings()
