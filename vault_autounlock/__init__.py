"""Vault AutoUnlock — Silent unlocking of vaults at application startup.

Security Note (Threat Model):
    Passphrases are held in wipeable buffers only for the duration of a
    single unlock call. Keychain backends that hand out immutable strings
    leave copies in process memory until garbage collection. This is an
    accepted limitation.
"""

from .chain import UnlockChain, UnlockStatus, VaultOutcome
from .config import AutoUnlockConfig, load_keychain_keys, generate_master_key
from .keychain import KeychainAccess, get_keychain_access
from .passphrase import Passphrase
from .pipeline import PacedPipeline
from .unlocker import AutoUnlocker
from .version import __version__

__all__ = [
    "AutoUnlocker",
    "AutoUnlockConfig",
    "KeychainAccess",
    "PacedPipeline",
    "Passphrase",
    "UnlockChain",
    "UnlockStatus",
    "VaultOutcome",
    "generate_master_key",
    "get_keychain_access",
    "load_keychain_keys",
    "__version__",
]
