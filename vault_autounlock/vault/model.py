"""
Vault model — identity, runtime state and the driver seam.

The cryptographic unlock and the filesystem mount are provided by a
:class:`VaultDriver`; the :class:`Vault` only tracks state transitions
and rejects operations that do not fit the current state.
"""
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from ..exceptions import IllegalVaultState
from ..passphrase import Passphrase
from .settings import VaultSettings


class VaultState(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    MOUNTED = "mounted"


class VaultDriver(Protocol):
    """Performs the actual unlock, mount and reveal of a vault.

    ``unlock`` raises :class:`~vault_autounlock.exceptions.CryptoError` or
    ``OSError``; ``mount`` and ``reveal`` raise
    :class:`~vault_autounlock.exceptions.CommandFailedError`.
    """

    def unlock(self, vault: "Vault", passphrase: Passphrase) -> None: ...

    def mount(self, vault: "Vault") -> Path: ...

    def reveal(self, vault: "Vault", mount_point: Path) -> None: ...


class Vault:
    """An encrypted vault registered in the vault list."""

    def __init__(
        self,
        id: str,
        path: Path,
        driver: VaultDriver,
        settings: Optional[VaultSettings] = None,
    ):
        self._id = id
        self._path = Path(path)
        self._driver = driver
        self._settings = settings or VaultSettings()
        self._state = VaultState.LOCKED
        self._mount_point: Optional[Path] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<Vault id={self._id} path={str(self._path)!r} state={self._state.value}>"

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> Path:
        return self._path

    @property
    def settings(self) -> VaultSettings:
        return self._settings

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def mount_point(self) -> Optional[Path]:
        return self._mount_point

    def _require(self, expected: VaultState, operation: str) -> None:
        if self._state is not expected:
            raise IllegalVaultState(
                f"Cannot {operation} vault {self._path}: "
                f"state is {self._state.value}, expected {expected.value}"
            )

    def unlock(self, passphrase: Passphrase) -> None:
        """Unlock the vault with ``passphrase``. Does not keep a reference to it."""
        with self._lock:
            self._require(VaultState.LOCKED, "unlock")
            self._driver.unlock(self, passphrase)
            self._state = VaultState.UNLOCKED

    def mount(self) -> Path:
        """Attach the unlocked vault to the filesystem and return the mount point."""
        with self._lock:
            self._require(VaultState.UNLOCKED, "mount")
            self._mount_point = self._driver.mount(self)
            self._state = VaultState.MOUNTED
            return self._mount_point

    def reveal(self) -> None:
        """Show the mount point of a mounted vault to the user."""
        with self._lock:
            self._require(VaultState.MOUNTED, "reveal")
            self._driver.reveal(self, self._mount_point)
