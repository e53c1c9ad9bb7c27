"""Unit tests for the log redaction processor."""

from chronicle.core.logging.config import REDACTED, redact_sensitive


class TestRedactSensitive:
    """Tests for redact_sensitive."""

    def test_redacts_credential_keys(self):
        """Values of credential-bearing keys are replaced."""
        event = {
            "event": "login_failed",
            "password": "Secret123",
            "refresh_token": "abc",
            "api_key": "ch_live_xyz",
            "Authorization": "Bearer eyJ",
        }

        result = redact_sensitive(None, "info", event)

        assert result["password"] == REDACTED
        assert result["refresh_token"] == REDACTED
        assert result["api_key"] == REDACTED
        assert result["Authorization"] == REDACTED
        assert result["event"] == "login_failed"

    def test_redacts_nested_dicts(self):
        """Nested mappings are scrubbed as well."""
        event = {"event": "request", "details": {"token": "abc", "user_id": "42"}}

        result = redact_sensitive(None, "info", event)

        assert result["details"] == {"token": REDACTED, "user_id": "42"}

    def test_leaves_ids_alone(self):
        """Identifiers are not secrets and pass through."""
        event = {"event": "api_key_created", "api_key_id": "k1", "tenant_id": "t1"}

        assert redact_sensitive(None, "info", dict(event)) == event
