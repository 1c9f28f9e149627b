"""Tests for the error taxonomy and email validation."""

import pytest

from kanvas_snapshot.core.errors import (
    ConfigError,
    DesignCreationError,
    HTTPRequestError,
    InvalidEmailFormatError,
    KanvasSnapshotError,
    ManifestReadError,
    OutputWriteError,
    PayloadEncodingError,
    ResponseDecodingError,
    SnapshotTriggerError,
    format_error,
    is_valid_email,
)


class TestIsValidEmail:
    """Tests for is_valid_email()."""

    @pytest.mark.parametrize("email", [
        "user@example.com",
        "first.last+tag@sub.example.io",
        "User@Example.COM",
    ])
    def test_valid(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", [
        "not-an-email",
        "",
        "user@",
        "@example.com",
        "user@example",
        "user@example.c",
        "user name@example.com",
    ])
    def test_invalid(self, email):
        assert is_valid_email(email) is False


class TestErrorTaxonomy:
    """Tests for error attributes."""

    @pytest.mark.parametrize("error", [
        ManifestReadError("boom"),
        PayloadEncodingError("boom"),
        HTTPRequestError("boom"),
        ResponseDecodingError("boom"),
        DesignCreationError(RuntimeError("boom")),
        InvalidEmailFormatError("boom"),
        SnapshotTriggerError("boom"),
        ConfigError("boom"),
        OutputWriteError("boom"),
    ])
    def test_every_error_carries_descriptions_and_remedies(self, error):
        """Test that each error exposes code, descriptions and remedies."""
        assert isinstance(error, KanvasSnapshotError)
        assert error.code.startswith("kubectl-kanvas-snapshot-")
        assert error.short_description
        assert error.long_description
        assert error.remedies

    def test_codes_are_unique(self):
        classes = [
            ManifestReadError, PayloadEncodingError, HTTPRequestError, ResponseDecodingError,
            DesignCreationError, InvalidEmailFormatError, SnapshotTriggerError, ConfigError,
            OutputWriteError,
        ]
        codes = [cls.code for cls in classes]
        assert len(set(codes)) == len(codes)

    def test_remedies_are_per_instance(self):
        """Test that mutating one error's remedies leaves the class alone."""
        error = HTTPRequestError("boom")
        error.remedies.append("extra")

        assert "extra" not in HTTPRequestError("again").remedies

    def test_design_creation_error_keeps_cause(self):
        """Test that DesignCreationError wraps the lower-level error."""
        cause = HTTPRequestError("authentication failed", status_code=302)
        error = DesignCreationError(cause)

        assert error.cause is cause
        assert "authentication failed" in str(error)
        # Cause remedies are surfaced too
        assert "Check if your MESHERY_TOKEN is valid" in error.remedies

    def test_invalid_email_message(self):
        error = InvalidEmailFormatError("bad@")

        assert str(error) == "invalid email format for 'bad@'"
        assert error.email == "bad@"


class TestFormatError:
    """Tests for format_error()."""

    def test_includes_code_description_and_remedies(self):
        error = SnapshotTriggerError("workflow trigger failed with status 404", status_code=404)

        text = format_error(error)

        assert text.startswith("Error [kubectl-kanvas-snapshot-1006]: error generating snapshot:")
        assert "Probable cause: Failed to trigger snapshot generation workflow" in text
        for remedy in error.remedies:
            assert f"    - {remedy}" in text
