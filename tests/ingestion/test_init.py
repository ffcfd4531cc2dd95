import pytest

from ingestion import get_ingestion_module, get_available_modules
import ingestion.bank_csv as bank_csv


class TestGetIngestionModule:
    """Tests for get_ingestion_module function."""

    def test_get_bank_csv_module(self):
        """Test retrieving the bank_csv module."""
        module = get_ingestion_module("bank_csv")
        assert module == bank_csv

    def test_get_invalid_module_raises_error(self):
        """Test that requesting an unknown module raises ValueError."""
        with pytest.raises(ValueError, match="Unknown ingestion module: invalid"):
            get_ingestion_module("invalid")

    def test_get_case_sensitive(self):
        """Test that module names are case-sensitive."""
        with pytest.raises(ValueError, match="Unknown ingestion module: BANK_CSV"):
            get_ingestion_module("BANK_CSV")


class TestGetAvailableModules:
    """Tests for get_available_modules function."""

    def test_returns_all_modules(self):
        """Test that all expected modules are returned."""
        assert get_available_modules() == ["bank_csv"]
