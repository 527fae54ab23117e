"""Tests for the cng-tools exception hierarchy.

These tests verify:
1. Exception structure (code, message, details)
2. Inheritance hierarchy
3. String representation
4. Dictionary conversion for JSON serialization
"""

import pytest

from cng_tools.exceptions import (
    BackupAbortError,
    CngToolsError,
    ConfigurationError,
    ValidationError,
)


class TestCngToolsError:
    """Tests for base CngToolsError class."""

    def test_basic_construction(self):
        """Test basic exception construction."""
        error = CngToolsError("TEST_CODE", "Test message")

        assert error.code == "TEST_CODE"
        assert error.message == "Test message"
        assert error.details == {}

    def test_construction_with_none_details(self):
        """Test that None details becomes empty dict."""
        error = CngToolsError("TEST_CODE", "Test message", details=None)
        assert error.details == {}

    def test_str_without_details(self):
        error = CngToolsError("TEST_CODE", "Test message")

        assert str(error) == "TEST_CODE: Test message"

    def test_str_with_details(self):
        error = CngToolsError("TEST_CODE", "Test message", details={"foo": "bar"})

        result = str(error)
        assert result.startswith("TEST_CODE: Test message")
        assert "foo" in result

    def test_args_contains_message(self):
        error = CngToolsError("TEST_CODE", "Test message")
        assert error.args == ("Test message",)

    def test_to_dict(self):
        """Test conversion for JSON serialization."""
        error = CngToolsError("TEST_CODE", "Test message", details={"key": "value"})

        assert error.to_dict() == {
            "code": "TEST_CODE",
            "message": "Test message",
            "details": {"key": "value"},
        }


class TestSubclasses:
    """Tests for the concrete error classes."""

    @pytest.mark.parametrize("exc_class", [ValidationError, ConfigurationError, BackupAbortError])
    def test_inherits_from_base(self, exc_class):
        assert issubclass(exc_class, CngToolsError)
        assert issubclass(exc_class, Exception)

    def test_can_be_caught_as_base(self):
        with pytest.raises(CngToolsError):
            raise ConfigurationError("CONFIG_NOT_FOUND", "database.yml not found")

    def test_exceptions_can_be_differentiated(self):
        try:
            raise ValidationError("INVALID_MAX_ATTEMPTS", "max_attempts must be >= 1")
        except ConfigurationError:
            pytest.fail("ValidationError caught as ConfigurationError")
        except ValidationError as e:
            assert e.code == "INVALID_MAX_ATTEMPTS"


class TestBackupAbortError:
    """Tests for BackupAbortError."""

    def test_label(self):
        """The string form is the operator-facing abort label."""
        error = BackupAbortError("un-archive", "uploads", output="tar: Error")

        assert str(error) == "un-archive of uploads failed"
        assert error.code == "BACKUP_ABORTED"
        assert error.output == "tar: Error"

    def test_details(self):
        error = BackupAbortError("sync", "lfs")

        assert error.details == {"action": "sync", "name": "lfs"}
        assert error.to_dict()["message"] == "sync of lfs failed"
        assert error.output == ""
