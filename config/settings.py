from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
class Settings(BaseSettings):
    """
    Application settings managed by Pydantic.
    Reads from environment variables and/or .env file.
    """
    # Project Info
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # REST routing
    API_NAMESPACE: str = "wc/v1"
    REST_URL_ROOT: str | None = None  # e.g. https://shop.example.com/wp-json

    # Registry source; built-in methods are used when unset
    SHIPPING_METHODS_FILE: str | None = None

    # Capabilities granted to API callers, formatted "<resource>:<action>"
    GRANTED_CAPABILITIES: list[str] = ["shipping_methods:read"]

    # Config to read from .env file if available
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
        )

settings = Settings() # type: ignore


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the running app was built with."""
    return getattr(request.app.state, "settings", settings)
