"""
Configuration Management for Money Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external dependencies are the Firebase project (auth + Firestore)
and, optionally, a Google Sheets spreadsheet for backups.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firebase project configuration (Authentication + Firestore)."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Firebase Web API key (used by the Identity Toolkit REST API)"
    )
    project_id: str = Field(
        ...,
        description="Firebase project ID"
    )
    credentials_path: str = Field(
        ...,
        description="Path to the Firebase service account credentials JSON"
    )
    auth_domain: Optional[str] = Field(
        default=None,
        description="Auth domain, used as the request URI for federated sign-in"
    )
    request_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        le=120,
        description="Timeout for calls to the Identity Toolkit"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets backup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet that receives backups"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    categories_sheet_name: str = Field(
        default="Categories",
        description="Name of the sheet for categories"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    storage_backend: str = Field(
        default="firestore",
        pattern="^(firestore|memory)$",
        description="Which backend the stores talk to"
    )

    # Navigation
    public_paths: str = Field(
        default="/,/login,/register",
        description="Comma-separated list of paths reachable without signing in"
    )

    # Dashboard
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions the recent list shows"
    )
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many categories the top spending list shows"
    )
    default_category_color: str = Field(
        default="#3b82f6",
        pattern="^#[0-9a-fA-F]{6}$",
        description="Color used when a category is created without one"
    )

    @property
    def public_paths_set(self) -> frozenset[str]:
        """Get public paths as a set."""
        return frozenset(p.strip() for p in self.public_paths.split(",") if p.strip())


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the memory backend runs
    # without any Firebase configuration.

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for every section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("firebase", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
