"""Tests for env-based configuration and log redaction."""

import logging

import pytest

from shared.logging.logging_setup import SecretRedactionFilter


class TestHelperConfig:
    def test_string_is_stripped(self, helper_config, monkeypatch):
        monkeypatch.setenv("SOME_KEY", "  value  ")
        assert helper_config.get_string_val("some_key") == "value"

    def test_missing_without_default_raises(self, helper_config, monkeypatch):
        monkeypatch.delenv("SOME_KEY", raising=False)
        with pytest.raises(ValueError, match="SOME_KEY"):
            helper_config.get_string_val("SOME_KEY")

    def test_empty_value_falls_back_to_default(self, helper_config, monkeypatch):
        monkeypatch.setenv("SOME_KEY", "")
        assert helper_config.get_string_val("SOME_KEY", default="fallback") == "fallback"

    def test_numbers(self, helper_config, monkeypatch):
        monkeypatch.setenv("INT_KEY", "10")
        monkeypatch.setenv("FLOAT_KEY", "0.5")
        assert helper_config.get_number_val("INT_KEY") == 10
        assert helper_config.get_number_val("FLOAT_KEY") == 0.5

    def test_invalid_number_raises(self, helper_config, monkeypatch):
        monkeypatch.setenv("INT_KEY", "ten")
        with pytest.raises(ValueError, match="not a valid number"):
            helper_config.get_number_val("INT_KEY")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)])
    def test_bools(self, helper_config, monkeypatch, raw, expected):
        monkeypatch.setenv("BOOL_KEY", raw)
        assert helper_config.get_bool_val("BOOL_KEY") is expected

    def test_list(self, helper_config, monkeypatch):
        monkeypatch.setenv("LIST_KEY", "[default, archive,]")
        assert helper_config.get_list_val("LIST_KEY") == ["default", "archive"]

    def test_list_requires_brackets(self, helper_config, monkeypatch):
        monkeypatch.setenv("LIST_KEY", "default,archive")
        with pytest.raises(ValueError):
            helper_config.get_list_val("LIST_KEY")

    def test_list_default_is_a_copy(self, helper_config, monkeypatch):
        monkeypatch.delenv("LIST_KEY", raising=False)
        default = ["default"]
        value = helper_config.get_list_val("LIST_KEY", default=default)
        value.append("other")
        assert default == ["default"]


class TestSecretRedaction:
    def _record(self, msg, *args) -> logging.LogRecord:
        return logging.LogRecord("tests", logging.INFO, __file__, 1, msg, args, None)

    def test_bearer_token_is_masked(self):
        record = self._record("Sending %s", "Authorization: Bearer ya29.secret-token")
        SecretRedactionFilter().filter(record)
        assert record.getMessage() == "Sending Authorization: Bearer ***"

    def test_assertion_is_masked(self):
        record = self._record("grant_type=jwt-bearer&assertion=eyJhbGciOi.payload.sig")
        SecretRedactionFilter().filter(record)
        assert "eyJhbGciOi" not in record.getMessage()

    def test_access_token_in_body_is_masked(self):
        record = self._record('{"access_token": "ya29.abc", "expires_in": 3599}')
        SecretRedactionFilter().filter(record)
        assert "ya29.abc" not in record.getMessage()

    def test_plain_message_untouched(self):
        record = self._record("Retrieved %d chunk(s)", 3)
        assert SecretRedactionFilter().filter(record) is True
        assert record.args == (3,)
