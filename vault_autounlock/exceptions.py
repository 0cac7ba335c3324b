"""Exception hierarchy for Vault AutoUnlock.

Stage errors are raised by vault drivers and keychains; the unlock chain
catches them per vault so they never reach the code that started a batch.
"""


class AutoUnlockError(Exception):
    """Base class for all errors raised by this package."""


class KeychainAccessError(AutoUnlockError):
    """The keychain is unreachable, corrupt or refused the operation.

    Raised only for store-level failures. A missing passphrase is not an
    error: ``load_passphrase`` returns ``None`` instead.
    """


class VaultError(AutoUnlockError):
    """Base class for vault stage failures."""


class CryptoError(VaultError):
    """Cryptographic unlock failed (wrong passphrase, damaged masterkey)."""


class CommandFailedError(VaultError):
    """A mount or reveal command failed."""


class IllegalVaultState(VaultError):
    """Operation not allowed in the current vault state."""
