"""
SystemKeychain — Passphrase storage in the OS keychain via ``keyring``.

Passphrases are stored under a fixed service name with the vault id as the
username, so they show up in the platform keychain UI (macOS Keychain,
Secret Service, Windows Credential Locker).
"""
import logging

import keyring
from keyring.backend import KeyringBackend
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from ..exceptions import KeychainAccessError
from ..passphrase import Passphrase

logger = logging.getLogger("autounlock")

SERVICE_NAME = "vault-autounlock"


class SystemKeychain:
    """Keychain backed by the active ``keyring`` backend.

    Args:
        backend: Explicit keyring backend; defaults to ``keyring.get_keyring()``.
        service: Service name entries are stored under.
    """

    def __init__(
        self,
        backend: KeyringBackend | None = None,
        service: str = SERVICE_NAME,
    ):
        self._backend = backend if backend is not None else keyring.get_keyring()
        self._service = service

    def is_supported(self) -> bool:
        """False when keyring only found its placeholder ``fail`` backend."""
        return not isinstance(self._backend, fail.Keyring)

    def store_passphrase(self, vault_id: str, passphrase: Passphrase) -> None:
        try:
            self._backend.set_password(self._service, vault_id, passphrase.reveal())
        except KeyringError as err:
            raise KeychainAccessError(
                f"Cannot store passphrase for vault {vault_id}: {err}"
            ) from err
        logger.debug("Keychain store: vault=%s", vault_id)

    def load_passphrase(self, vault_id: str) -> Passphrase | None:
        """Return the stored passphrase, or None if the keychain has none."""
        try:
            secret = self._backend.get_password(self._service, vault_id)
        except KeyringError as err:
            raise KeychainAccessError(
                f"Cannot load passphrase for vault {vault_id}: {err}"
            ) from err
        if secret is None:
            return None
        return Passphrase(secret)

    def delete_passphrase(self, vault_id: str) -> None:
        """Remove the passphrase of a vault. No-op if none is stored."""
        try:
            self._backend.delete_password(self._service, vault_id)
        except PasswordDeleteError:
            return
        except KeyringError as err:
            raise KeychainAccessError(
                f"Cannot delete passphrase for vault {vault_id}: {err}"
            ) from err
        logger.debug("Keychain delete: vault=%s", vault_id)
