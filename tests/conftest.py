"""Shared fixtures: in-memory keychain and a scriptable vault driver."""
import base64
import time
from pathlib import Path

import pytest

from vault_autounlock.exceptions import (
    CommandFailedError,
    KeychainAccessError,
)
from vault_autounlock.passphrase import Passphrase
from vault_autounlock.vault import Vault, VaultSettings


class MemoryKeychain:
    """Keychain keeping passphrases in a dict."""

    def __init__(self, secrets: dict | None = None, broken: tuple = ()):
        self._secrets = {k: v.encode("utf-8") for k, v in (secrets or {}).items()}
        self.broken = set(broken)
        self.loaded: list[str] = []
        self.handed_out: list[Passphrase] = []

    def is_supported(self) -> bool:
        return True

    def store_passphrase(self, vault_id, passphrase):
        self._secrets[vault_id] = bytes(passphrase.view())

    def load_passphrase(self, vault_id):
        self.loaded.append(vault_id)
        if vault_id in self.broken:
            raise KeychainAccessError("keychain is locked")
        secret = self._secrets.get(vault_id)
        if secret is None:
            return None
        passphrase = Passphrase(secret)
        self.handed_out.append(passphrase)
        return passphrase

    def delete_passphrase(self, vault_id):
        self._secrets.pop(vault_id, None)


class FakeDriver:
    """Vault driver recording every call, failing on request."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.times: dict[str, float] = {}
        self.seen_secrets: dict[str, bytes] = {}
        self.fail_unlock: dict[str, BaseException] = {}
        self.fail_mount: set[str] = set()
        self.fail_reveal: set[str] = set()

    def unlock(self, vault, passphrase):
        self.calls.append(("unlock", vault.id))
        self.times[vault.id] = time.monotonic()
        self.seen_secrets[vault.id] = bytes(passphrase.view())
        if vault.id in self.fail_unlock:
            raise self.fail_unlock[vault.id]

    def mount(self, vault):
        self.calls.append(("mount", vault.id))
        if vault.id in self.fail_mount:
            raise CommandFailedError("mount command failed")
        return Path("/mnt") / vault.id

    def reveal(self, vault, mount_point):
        self.calls.append(("reveal", vault.id))
        if vault.id in self.fail_reveal:
            raise CommandFailedError("no file browser")

    def ops(self, vault_id: str) -> list[str]:
        return [op for op, vid in self.calls if vid == vault_id]


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def make_vault(driver):
    """Factory for vaults flagged for auto-unlock by default."""
    def _make(vault_id: str, **settings) -> Vault:
        settings.setdefault("unlock_after_startup", True)
        return Vault(
            id=vault_id,
            path=Path("/home/user/vaults") / vault_id,
            driver=driver,
            settings=VaultSettings(**settings),
        )
    return _make


@pytest.fixture
def keychain():
    return MemoryKeychain({
        "v1": "correct horse",
        "v2": "battery staple",
        "v3": "tr0ub4dor&3",
        "v4": "hunter2",
    })


@pytest.fixture
def master_key_env(monkeypatch):
    """Configure two master key versions with v2 active."""
    keys = {1: b"\x01" * 32, 2: b"\x02" * 32}
    for version, key in keys.items():
        monkeypatch.setenv(
            f"AUTOUNLOCK_MASTER_KEY_v{version}", base64.b64encode(key).decode("ascii"),
        )
    monkeypatch.setenv("AUTOUNLOCK_ACTIVE_KEY_ID", "2")
    return keys
