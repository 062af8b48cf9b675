"""
SessionGate — Session State Store Unit Tests
=============================================

What:  create / destroy / has_session over a plain dict session.
"""

import pytest

from sessiongate.exceptions import InvalidArgumentError
from sessiongate.services.session_store import SessionStateStore


class TestSessionStateStore:

    def test_new_session_has_no_principal(self, sessions):
        assert sessions.has_session() is False
        assert sessions.principal is None

    def test_create_session(self, sessions):
        sessions.create_session("Sub-Zero")
        assert sessions.has_session() is True
        assert sessions.principal == "Sub-Zero"

    def test_create_twice_keeps_latest_principal(self, sessions):
        sessions.create_session("Sub-Zero")
        sessions.create_session("Scorpion")
        assert sessions.has_session() is True
        assert sessions.principal == "Scorpion"

    def test_destroy_session(self, sessions):
        sessions.create_session("Sub-Zero")
        sessions.destroy_session()
        assert sessions.has_session() is False

    def test_destroy_without_session_is_harmless(self, sessions):
        sessions.destroy_session()
        assert sessions.has_session() is False

    def test_destroy_clears_other_session_data(self, session, sessions):
        """Logout must not leave data from the authenticated session behind."""
        sessions.create_session("Sub-Zero")
        session["cart"] = ["item"]
        sessions.destroy_session()
        assert session == {}

    def test_none_principal_rejected(self, sessions):
        with pytest.raises(InvalidArgumentError, match="must not be None") as exc_info:
            sessions.create_session(None)
        assert exc_info.value.field == "principal"
        assert sessions.has_session() is False

    def test_invalid_argument_is_a_value_error(self, sessions):
        with pytest.raises(ValueError):
            sessions.create_session(None)

    def test_principal_is_opaque(self, sessions):
        """Falsy principals still count: presence is what matters."""
        sessions.create_session(0)
        assert sessions.has_session() is True

    def test_stored_under_configured_key(self, session):
        store = SessionStateStore(session, key="user")
        store.create_session({"id": 7})
        assert session == {"user": {"id": 7}}

    def test_default_key_from_settings(self, session, sessions):
        from sessiongate.config import settings

        sessions.create_session("Sub-Zero")
        assert session[settings.principal_session_key] == "Sub-Zero"

    def test_sees_principal_written_elsewhere(self, session, sessions):
        """The store reads through to the mapping; it keeps no copy."""
        from sessiongate.config import settings

        session[settings.principal_session_key] = "Raiden"
        assert sessions.has_session() is True
