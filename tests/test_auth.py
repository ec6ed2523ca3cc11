"""Tests for Gmail session handling."""

from unittest.mock import MagicMock

import pytest

import subscription_scanner.auth as auth_module
from subscription_scanner.auth import GmailSession, check_auth, load_credentials
from subscription_scanner.exceptions import AuthError


def test_missing_credentials_raises_auth_error(tmp_path):
    with pytest.raises(AuthError) as excinfo:
        load_credentials(tmp_path / "nonexistent.json", tmp_path / "token.json")
    assert "Credentials file not found" in str(excinfo.value)


def test_session_is_discarded_on_exit():
    service = MagicMock()
    with GmailSession(credentials=MagicMock(), service=service) as session:
        assert session.service is service
        assert not session.closed

    assert session.closed
    service.close.assert_called_once()
    with pytest.raises(AuthError):
        session.service


def test_email_address_reads_profile():
    service = MagicMock()
    service.users.return_value.getProfile.return_value.execute.return_value = {
        "emailAddress": "me@example.com"
    }
    session = GmailSession(credentials=MagicMock(), service=service)
    assert session.email_address() == "me@example.com"


def test_check_auth_reports_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(auth_module, "CREDENTIALS_PATH", tmp_path / "nonexistent.json")
    monkeypatch.setattr(auth_module, "TOKEN_PATH", tmp_path / "token.json")

    ok, message = check_auth()

    assert ok is False
    assert "Credentials file not found" in message
