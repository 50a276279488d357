"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from budget_tracker.config import (
    AppSettings,
    GoogleSheetsSettings,
    IndefiniteInterestMode,
    PaymentRecalculation,
)
from budget_tracker.config.settings import DEFAULT_CATEGORIES


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self):
        """Test the default loan arithmetic behaviour."""
        settings = AppSettings(_env_file=None)
        assert settings.payment_recalculation == PaymentRecalculation.REPLAY
        assert settings.indefinite_interest_on_create == IndefiniteInterestMode.PROJECTED
        assert settings.indefinite_interest_on_update == IndefiniteInterestMode.ZERO
        assert settings.indefinite_horizon_months == 360
        assert settings.timezone == "UTC"

    def test_environment_override(self, monkeypatch):
        """Test that environment variables are read."""
        monkeypatch.setenv("PAYMENT_RECALCULATION", "in_place")
        monkeypatch.setenv("INDEFINITE_INTEREST_ON_CREATE", "zero")
        settings = AppSettings(_env_file=None)
        assert settings.payment_recalculation == PaymentRecalculation.IN_PLACE
        assert settings.indefinite_interest_on_create == IndefiniteInterestMode.ZERO

    def test_invalid_timezone(self):
        """Test that unknown timezone names are rejected."""
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, timezone="Mars/Olympus")

    def test_horizon_bounds(self):
        """Test that the projection horizon must be positive."""
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, indefinite_horizon_months=0)

    def test_default_categories_list(self):
        """Test splitting the comma-separated seed list."""
        assert AppSettings(_env_file=None).default_categories_list == list(DEFAULT_CATEGORIES)
        custom = AppSettings(_env_file=None, default_categories="Rent, Food,,")
        assert custom.default_categories_list == ["Rent", "Food"]


class TestGoogleSheetsSettings:
    """Tests for Google Sheets settings."""

    def test_table_names(self, monkeypatch, tmp_path):
        """Test that sheet names can be overridden per table."""
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc")
        monkeypatch.setenv("GOOGLE_SHEETS_LOANS_SHEET_NAME", "Debts")

        settings = GoogleSheetsSettings(_env_file=None)

        assert settings.table_names() == {
            "Expenses": "Expenses",
            "Categories": "Categories",
            "Loans": "Debts",
            "Payments": "Payments",
        }
        assert settings.legacy_sheet_name == "Sheet1"

    def test_missing_credentials_warns(self):
        """Test that a missing credentials file only warns."""
        with pytest.warns(UserWarning, match="credentials"):
            GoogleSheetsSettings(
                _env_file=None,
                credentials_path="/nonexistent/credentials.json",
                spreadsheet_id="abc",
            )

    def test_required_fields(self, monkeypatch):
        """Test that the spreadsheet id is required."""
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        with pytest.raises(ValidationError):
            GoogleSheetsSettings(_env_file=None)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
