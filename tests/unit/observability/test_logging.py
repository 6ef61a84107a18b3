"""Tests for structured logging."""

from timeboard.observability.logging import PIIRedactor, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        get_logger("test").info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        get_logger("test").debug("test_message")

    def test_setup_with_redaction(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=True)
        get_logger("test").info("test_message", token="secret-token")


class TestPIIRedactor:
    """Tests for PIIRedactor processor."""

    def setup_method(self) -> None:
        self.redactor = PIIRedactor()

    def test_redacts_sensitive_keys(self) -> None:
        result = self.redactor(None, "info", {"event": "x", "token": "abc", "api_token": "def"})
        assert result["token"] == "[REDACTED]"
        assert result["api_token"] == "[REDACTED]"
        assert result["event"] == "x"

    def test_key_match_is_case_insensitive(self) -> None:
        result = self.redactor(None, "info", {"Authorization": "Basic abc"})
        assert result["Authorization"] == "[REDACTED]"

    def test_redacts_connection_urls(self) -> None:
        result = self.redactor(None, "info", {"connection_url": "redis://:pw@host"})
        assert result["connection_url"] == "[REDACTED]"

    def test_redacts_emails_in_values(self) -> None:
        result = self.redactor(None, "info", {"message": "contact ana@example.com now"})
        assert result["message"] == "contact [EMAIL] now"

    def test_redacts_nested_structures(self) -> None:
        event = {"member": {"name": "Ana", "token": "t"}, "items": ["bo@example.com", {"secret": "s"}]}
        result = self.redactor(None, "info", event)
        assert result["member"] == {"name": "Ana", "token": "[REDACTED]"}
        assert result["items"] == ["[EMAIL]", {"secret": "[REDACTED]"}]

    def test_leaves_non_strings_alone(self) -> None:
        result = self.redactor(None, "info", {"status_code": 429, "stale": True})
        assert result == {"status_code": 429, "stale": True}
