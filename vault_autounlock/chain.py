"""
UnlockChain — Unlock, mount and reveal a single vault without raising.

Each stage runs only if the previous one succeeded and the vault's settings
still ask for it. Stage failures are logged and end processing of that vault
only; the result is returned as a :class:`VaultOutcome`.

Security Note:
    The passphrase is wiped when the unlock stage is left, whatever the
    outcome. Never log passphrases.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import KeychainAccessError, VaultError
from .keychain import KeychainAccess
from .vault import Vault

logger = logging.getLogger("autounlock")


class UnlockStatus(Enum):
    NO_PASSPHRASE = "no_passphrase"
    UNLOCK_FAILED = "unlock_failed"
    UNLOCKED = "unlocked"
    MOUNT_FAILED = "mount_failed"
    MOUNTED = "mounted"
    REVEAL_FAILED = "reveal_failed"
    REVEALED = "revealed"

    @property
    def failed(self) -> bool:
        return self in (
            UnlockStatus.UNLOCK_FAILED,
            UnlockStatus.MOUNT_FAILED,
            UnlockStatus.REVEAL_FAILED,
        )


@dataclass(frozen=True)
class VaultOutcome:
    """Terminal state reached by one vault."""

    vault_id: str
    path: Path
    status: UnlockStatus
    error: Optional[BaseException] = None


class UnlockChain:
    """Runs the unlock → mount → reveal stages for one vault at a time."""

    def __init__(self, keychain: KeychainAccess):
        self._keychain = keychain

    def process(self, vault: Vault) -> VaultOutcome:
        """Auto-unlock ``vault`` and, as its settings allow, mount and reveal it."""
        return self._unlock_silently(vault)

    def _outcome(
        self, vault: Vault, status: UnlockStatus, error: Optional[BaseException] = None,
    ) -> VaultOutcome:
        return VaultOutcome(vault.id, vault.path, status, error)

    def _unlock_silently(self, vault: Vault) -> VaultOutcome:
        try:
            passphrase = self._keychain.load_passphrase(vault.id)
        except KeychainAccessError as err:
            logger.error("Auto unlock failed for %s.", vault.path, exc_info=True)
            return self._outcome(vault, UnlockStatus.UNLOCK_FAILED, err)
        if passphrase is None:
            logger.warning(
                "No passphrase stored in keychain for vault registered for "
                "auto unlocking: %s", vault.path,
            )
            return self._outcome(vault, UnlockStatus.NO_PASSPHRASE)
        with passphrase:
            try:
                vault.unlock(passphrase)
            except (OSError, VaultError) as err:
                logger.error("Auto unlock failed for %s.", vault.path, exc_info=True)
                return self._outcome(vault, UnlockStatus.UNLOCK_FAILED, err)
        return self._mount_silently(vault)

    def _mount_silently(self, vault: Vault) -> VaultOutcome:
        if not vault.settings.mount_after_unlock:
            return self._outcome(vault, UnlockStatus.UNLOCKED)
        try:
            vault.mount()
        except (OSError, VaultError) as err:
            logger.error(
                "Auto unlock succeeded, but mounting the drive failed: %s",
                vault.path, exc_info=True,
            )
            return self._outcome(vault, UnlockStatus.MOUNT_FAILED, err)
        return self._reveal_silently(vault)

    def _reveal_silently(self, vault: Vault) -> VaultOutcome:
        if not vault.settings.reveal_after_mount:
            return self._outcome(vault, UnlockStatus.MOUNTED)
        try:
            vault.reveal()
        except (OSError, VaultError) as err:
            logger.error(
                "Auto unlock succeeded, but revealing the drive failed: %s",
                vault.path, exc_info=True,
            )
            return self._outcome(vault, UnlockStatus.REVEAL_FAILED, err)
        return self._outcome(vault, UnlockStatus.REVEALED)
