"""
Configuration Management for Budget & Loan Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.

Two behaviours of the loan arithmetic are deliberately configurable
rather than hard-coded:
- How total interest is estimated for indefinite loans (per call site)
- Whether payment edits/removals replay the loan's history or patch
  the running balance in place
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IndefiniteInterestMode(str, Enum):
    """How total interest is derived for a loan without a fixed term."""
    PROJECTED = "projected"  # payment * horizon - principal, floored at 0
    ZERO = "zero"            # no estimate at all


class PaymentRecalculation(str, Enum):
    """Strategy used when a payment is edited or removed."""
    REPLAY = "replay"        # recompute the loan's whole payment history
    IN_PLACE = "in_place"    # adjust the running balance only


DEFAULT_CATEGORIES = (
    "Food",
    "Gifts",
    "Health/Medical",
    "Home",
    "Transportation",
    "Personal",
    "Pets",
    "Utilities",
    "Travel",
    "Debt",
    "Other",
)


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

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
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    expenses_sheet_name: str = Field(
        default="Expenses",
        description="Name of the sheet for expenses"
    )
    categories_sheet_name: str = Field(
        default="Categories",
        description="Name of the sheet for expense categories"
    )
    loans_sheet_name: str = Field(
        default="Loans",
        description="Name of the sheet for loans"
    )
    payments_sheet_name: str = Field(
        default="Payments",
        description="Name of the sheet for loan payments"
    )
    legacy_sheet_name: str = Field(
        default="Sheet1",
        description="Flat sheet imported once into Loans by the migration"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    def table_names(self) -> dict[str, str]:
        """Map logical table names to the configured sheet titles."""
        return {
            "Expenses": self.expenses_sheet_name,
            "Categories": self.categories_sheet_name,
            "Loans": self.loans_sheet_name,
            "Payments": self.payments_sheet_name,
        }


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
    log_level: str = Field(
        default="INFO",
        description="Root log level for structured logging"
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to turn datetimes into calendar dates"
    )

    # Loan arithmetic
    indefinite_interest_on_create: IndefiniteInterestMode = Field(
        default=IndefiniteInterestMode.PROJECTED,
        description="Total interest estimate for indefinite loans when added"
    )
    indefinite_interest_on_update: IndefiniteInterestMode = Field(
        default=IndefiniteInterestMode.ZERO,
        description="Total interest estimate for indefinite loans when edited"
    )
    indefinite_horizon_months: int = Field(
        default=360,
        ge=1,
        le=1200,
        description="Projection horizon for indefinite-loan interest (months)"
    )
    payment_recalculation: PaymentRecalculation = Field(
        default=PaymentRecalculation.REPLAY,
        description="How payment edits/removals reconcile the loan balance"
    )

    # Categories seeded into a freshly created Categories sheet
    default_categories: str = Field(
        default=",".join(DEFAULT_CATEGORIES),
        description="Comma-separated list of seed categories"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject unknown IANA timezone names early."""
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def default_categories_list(self) -> list[str]:
        """Get seed categories as a list."""
        return [c.strip() for c in self.default_categories.split(",") if c.strip()]


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

    # Sub-settings are loaded lazily so the app can run without Sheets

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

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
