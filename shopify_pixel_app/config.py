from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SHOPIFY_CLIENT_ID: str = "3f1c5e0b8d2a4c6e9b7f1a2d4c6e8b0a"
    SHOPIFY_CLIENT_SECRET: str | None = None
    SHOPIFY_SCOPES: str = "write_pixels,read_customer_events"
    SHOPIFY_REDIRECT_URI: str | None = None
    SHOPIFY_DEFAULT_SHOP: str = "pixel-sandbox.myshopify.com"
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = 20.0

    # Externally visible hostname provided by the hosting platform.
    PUBLIC_HOSTNAME: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PUBLIC_HOSTNAME", "RENDER_EXTERNAL_HOSTNAME"),
    )
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("SHOPIFY_SCOPES")
    @classmethod
    def validate_scopes(cls, value: str) -> str:
        scopes = [scope.strip() for scope in value.split(",") if scope.strip()]
        if not scopes:
            raise ValueError("SHOPIFY_SCOPES must include at least one scope")
        return ",".join(scopes)

    @field_validator("PUBLIC_HOSTNAME")
    @classmethod
    def strip_public_hostname(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip().rstrip("/")
        if "://" in cleaned:
            cleaned = cleaned.split("://", 1)[1]
        return cleaned or None

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be one of: json, text")
        return normalized

    @property
    def public_base_url(self) -> str:
        if self.PUBLIC_HOSTNAME:
            return f"https://{self.PUBLIC_HOSTNAME}"
        return f"http://localhost:{self.PORT}"

    @property
    def redirect_uri(self) -> str:
        if self.SHOPIFY_REDIRECT_URI:
            return self.SHOPIFY_REDIRECT_URI.rstrip("/")
        return f"{self.public_base_url}/shopify/auth/callback"

    @property
    def has_client_secret(self) -> bool:
        return bool(self.SHOPIFY_CLIENT_SECRET)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


def get_settings() -> Settings:
    return settings
