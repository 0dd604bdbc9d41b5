from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Household Budget API"
    app_env: str = "dev"
    app_version: str = "1.0.0"
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    database_url: str = "sqlite+aiosqlite:///./household_budget.db"
    cors_allow_origins: str = "http://localhost:5173"
    ledger_timezone: str = "UTC"
    analytics_transaction_window: int | None = None
    default_transaction_limit: int = 10
    log_level: str = "INFO"
    log_json: bool = False
    login_url: str = "/api/login"
    identity_enabled: bool = False
    identity_issuer: str | None = None
    identity_jwks_url: str | None = None
    identity_authorized_parties: str = ""
    identity_jwt_audience: str | None = None
    identity_jwks_cache_ttl_seconds: int = 300

    @property
    def cors_origins(self) -> list[str]:
        return [x.strip() for x in self.cors_allow_origins.split(",") if x.strip()]

    @property
    def identity_authorized_party_list(self) -> list[str]:
        return [x.strip() for x in self.identity_authorized_parties.split(",") if x.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
