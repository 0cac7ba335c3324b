"""Keychain access — where auto-unlock passphrases are stored.

The keychain is an optional collaborator: on platforms without a usable
store, :func:`get_keychain_access` returns None and auto-unlock stays inert.
"""
import logging
from typing import Protocol, runtime_checkable

from ..config import AutoUnlockConfig, load_keychain_keys
from ..passphrase import Passphrase
from .file import FileKeychain
from .system import SystemKeychain

logger = logging.getLogger("autounlock")


@runtime_checkable
class KeychainAccess(Protocol):
    """Secure passphrase store keyed by vault id.

    ``load_passphrase`` returns None when nothing is stored and raises
    :class:`~vault_autounlock.exceptions.KeychainAccessError` only for
    store-level failures.
    """

    def is_supported(self) -> bool: ...

    def store_passphrase(self, vault_id: str, passphrase: Passphrase) -> None: ...

    def load_passphrase(self, vault_id: str) -> Passphrase | None: ...

    def delete_passphrase(self, vault_id: str) -> None: ...


def get_keychain_access(config: AutoUnlockConfig) -> KeychainAccess | None:
    """Return the configured keychain, or None if it is not available here.

    Args:
        config: Auto-unlock configuration selecting the backend.

    Returns:
        A supported keychain, or None for backend ``"none"``, an OS without
        a usable keyring, or a file keychain without master keys.
    """
    backend = config.keychain_backend
    keychain: KeychainAccess
    if backend == "none":
        return None
    if backend == "file":
        try:
            keychain = FileKeychain(
                config.keychain_file, *load_keychain_keys(),
            )
        except (RuntimeError, ValueError, KeyError) as err:
            logger.warning("File keychain unavailable: %s", err)
            return None
    else:
        keychain = SystemKeychain()
    if not keychain.is_supported():
        logger.info("Keychain backend %r is not supported on this platform", backend)
        return None
    return keychain


__all__ = [
    "KeychainAccess",
    "FileKeychain",
    "SystemKeychain",
    "get_keychain_access",
]
