"""Unit tests for secure credential store helpers."""

from __future__ import annotations

import pytest
from keyring.errors import KeyringError

from mockingbird.credentials import KeyringCredentialStore


class _FakeBackend:
    """Keyring backend stand-in exposing only a priority."""

    def __init__(self, priority: float) -> None:
        """Initialize the backend priority."""

        self.priority = priority


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self, priority: float = 1.0) -> None:
        """Initialize fake storage dictionary."""

        self._storage: dict[tuple[str, str], str] = {}
        self._backend = _FakeBackend(priority)
        self.fail_reads = False

    def get_keyring(self) -> _FakeBackend:
        """Return the configured fake backend."""

        return self._backend

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        if self.fail_reads:
            raise KeyringError("backend locked")
        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


def test_keyring_store_roundtrip_set_get_clear(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Keyring store should set/get/clear API key values via keyring backend."""

    fake_keyring = FakeKeyringModule()
    monkeypatch.setattr("mockingbird.credentials.keyring", fake_keyring)
    store = KeyringCredentialStore()

    assert store.is_available() is True
    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert store.get_api_key() == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_reports_fail_backend_unavailable(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """A zero-priority backend should be reported as unavailable."""

    monkeypatch.setattr("mockingbird.credentials.keyring", FakeKeyringModule(priority=0))

    assert KeyringCredentialStore().is_available() is False


def test_keyring_store_treats_backend_errors_as_missing(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Read failures should degrade to a missing key."""

    fake_keyring = FakeKeyringModule()
    fake_keyring.fail_reads = True
    monkeypatch.setattr("mockingbird.credentials.keyring", fake_keyring)

    assert KeyringCredentialStore().get_api_key() is None


def test_keyring_store_rejects_blank_key(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Blank API keys should not be persisted."""

    monkeypatch.setattr("mockingbird.credentials.keyring", FakeKeyringModule())

    with pytest.raises(ValueError):
        KeyringCredentialStore().set_api_key("   ")
