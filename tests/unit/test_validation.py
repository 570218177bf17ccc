"""Unit tests for UI input validation."""

import pytest

from coloria.ui.validation import (
    MAX_PROMPT_LENGTH,
    ValidationError,
    parse_viewer_key,
    validate_credentials,
    validate_prompt,
)


class TestValidatePrompt:
    def test_strips_whitespace(self):
        assert validate_prompt("  a fox  ") == "a fox"

    @pytest.mark.parametrize("prompt", ["", "   ", None])
    def test_blank_prompt(self, prompt):
        with pytest.raises(ValidationError, match="Prompt is required"):
            validate_prompt(prompt)

    def test_too_long(self):
        with pytest.raises(ValidationError, match="too long"):
            validate_prompt("x" * (MAX_PROMPT_LENGTH + 1))


class TestValidateCredentials:
    def test_normalizes_email(self):
        assert validate_credentials(" Ada@Example.COM ", "pw") == "ada@example.com"

    @pytest.mark.parametrize("email,password", [("", "pw"), ("ada@example.com", ""), (None, None)])
    def test_missing_fields(self, email, password):
        with pytest.raises(ValidationError, match="required"):
            validate_credentials(email, password)

    @pytest.mark.parametrize("email", ["ada", "@example.com", "ada@localhost"])
    def test_malformed_email(self, email):
        with pytest.raises(ValidationError, match="valid email"):
            validate_credentials(email, "pw")


class TestParseViewerKey:
    def test_strips_timestamp(self):
        assert parse_viewer_key("ArrowLeft|1715000000000") == "ArrowLeft"

    def test_plain_key(self):
        assert parse_viewer_key("Escape") == "Escape"

    def test_empty(self):
        assert parse_viewer_key(None) == ""
