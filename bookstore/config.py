import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets import fetch_vault_secret

load_dotenv(".env")

INSECURE_MARKERS = ("postgres:postgres@", "changeme", "change-me", "replace-me", "root@")


def _postgres_url(db_name: str) -> str:
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{db_name}"


def _default_db_url() -> str:
    return os.getenv("APP_DATABASE_URL") or os.getenv("DATABASE_URL") or _postgres_url(os.getenv("POSTGRES_DB", "books"))


def _default_test_db_url() -> str:
    return os.getenv("APP_TEST_DATABASE_URL") or _postgres_url(os.getenv("POSTGRES_TEST_DB", "books_test"))


class Settings(BaseSettings):
    app_name: str = "Bookstore API"
    version: str = "1.0.0"
    environment: str = "development"
    database_url: str = Field(default_factory=_default_db_url)
    test_database_url: str = Field(default_factory=_default_test_db_url)
    require_https: bool = False
    strict_security: bool = False
    cors_origins: str = ""
    vault_addr: str | None = None
    vault_token: str | None = None
    vault_kv_mount: str = "kv"
    vault_secret_path: str = "bookstore/config"
    otel_enabled: bool = True
    otel_service_name: str = "bookstore-api"
    otel_exporter_endpoint: str = "http://otel-collector:4318"
    log_level: str = "INFO"
    rate_limit_max_requests: int = 1000
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        if self.environment.lower() == "test":
            return self.test_database_url
        return self.database_url

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    settings = Settings()
    if settings.vault_addr and settings.vault_token:
        secret = fetch_vault_secret(
            addr=settings.vault_addr,
            token=settings.vault_token,
            mount=settings.vault_kv_mount,
            path=settings.vault_secret_path,
        )
        if secret.get("database_url"):
            settings.database_url = secret["database_url"]
        if secret.get("test_database_url"):
            settings.test_database_url = secret["test_database_url"]
    if settings.strict_security:
        if any(marker in settings.resolved_database_url for marker in INSECURE_MARKERS):
            raise RuntimeError("Insecure database credentials detected")
        if settings.vault_token and settings.vault_token.lower() == "root":
            raise RuntimeError("Insecure Vault token detected")
    return settings
