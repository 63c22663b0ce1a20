"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from finance_ledger.config import LedgerSettings, LoggingSettings, get_settings, validate_all_settings


class TestLedgerSettings:
    """Tests for LedgerSettings."""

    def test_defaults(self, monkeypatch):
        """Test the documented defaults."""
        for name in ("LEDGER_SEED_DEFAULT_DATA", "LEDGER_EXPORT_FORMAT_VERSION", "LEDGER_STATE_FILE_PATH"):
            monkeypatch.delenv(name, raising=False)

        settings = LedgerSettings()

        assert settings.export_format_version == "1.0.0"
        assert settings.seed_default_data is True
        assert settings.state_file.name == "finance-data.json"

    def test_environment_overrides(self, monkeypatch):
        """Test LEDGER_ variables are read."""
        monkeypatch.setenv("LEDGER_COLLAPSE_LEGACY_TRANSFERS", "true")
        monkeypatch.setenv("LEDGER_MAX_TRANSACTION_AMOUNT", "500")

        settings = LedgerSettings()

        assert settings.collapse_legacy_transfers is True
        assert settings.max_transaction_amount == 500.0

    def test_directory_path_rejected(self, tmp_path):
        """Test the state file cannot be a directory."""
        with pytest.raises(ValidationError):
            LedgerSettings(state_file_path=str(tmp_path))


class TestLoggingSettings:
    """Tests for LoggingSettings."""

    def test_level_normalized(self):
        """Test levels are case-insensitive."""
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level_rejected(self):
        """Test typos in the level are caught."""
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")


class TestValidateAllSettings:
    """Tests for the settings health check."""

    def test_reports_broken_section(self, monkeypatch):
        """Test one broken section does not hide the others."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        get_settings.cache_clear()

        results = validate_all_settings()

        assert results["ledger"] is True
        assert results["logging"] is False
        assert "logging_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
