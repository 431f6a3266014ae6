from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-18.v1"
    database_url: str = "sqlite:///./rentdesk.db"
    public_app_url: str = "http://localhost:3000"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Auth ----
    auth_mode: str = "dev"  # dev|jwt
    dev_header_user_id: str = "X-User-Id"
    jwt_secret: str = "dev-change-me"
    jwt_algorithm: str = "HS256"

    # ---- Escrow / checkout provider ----
    checkout_base_url: str | None = None
    checkout_api_key: str | None = None
    checkout_timeout_seconds: float = 15.0
    currency: str = "USD"
    platform_fee_rate: float = 0.05
    agent_commission_rate: float = 0.50  # of the first month's rent

    # ---- Leasing ----
    lease_term_years: int = 1

    # ---- Approval workflow ----
    approval_lock_ttl_seconds: int = 60

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if (self.auth_mode or "").strip().lower() == "dev":
                raise ValueError("SECURITY: auth_mode=dev is not allowed in prod")
            if self.jwt_secret == "dev-change-me":
                raise ValueError("SECURITY: jwt_secret must be set in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
