"""
AutoUnlock Configuration — Master key loading and validated settings.

Reads master keys for the file keychain from environment variables:
    AUTOUNLOCK_MASTER_KEY_v{N} = <base64-encoded 32-byte key>
    AUTOUNLOCK_ACTIVE_KEY_ID = <integer>

Other settings:
    AUTOUNLOCK_PACING_MS = <milliseconds between vaults, default 500>
    AUTOUNLOCK_KEYCHAIN = system | file | none
    AUTOUNLOCK_KEYCHAIN_FILE = <path to the file keychain>
    AUTOUNLOCK_SETTINGS_FILE = <path to the vault list settings>

Security Note:
    Never log key material. Only log key IDs and version numbers.
"""
import os
import re
import base64
import binascii
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("autounlock")

_KEY_ENV_PATTERN = re.compile(r"^AUTOUNLOCK_MASTER_KEY_v(\d+)$")

NAP_TIME_MILLIS = 500
KEY_LENGTH = 32
KEYCHAIN_BACKENDS = ("system", "file", "none")

_CONFIG_DIR = Path.home() / ".config" / "vault-autounlock"


def load_keychain_keys(
    environ: Optional[Mapping[str, str]] = None,
) -> tuple[dict[int, bytes], int]:
    """Read the file keychain's master keys and the version used for new entries.

    Older versions stay loaded so entries written before a key change can
    still be decrypted. Without AUTOUNLOCK_ACTIVE_KEY_ID the highest version
    is active.

    Args:
        environ: Variables to read; defaults to ``os.environ``.

    Returns:
        Tuple of (version → raw 32-byte key, active version).

    Raises:
        RuntimeError: If no AUTOUNLOCK_MASTER_KEY_v{N} variable is set.
        ValueError: If a key is not base64 for 32 bytes, or the active
            version has no key.
    """
    environ = os.environ if environ is None else environ
    keys: dict[int, bytes] = {}
    for name, value in environ.items():
        match = _KEY_ENV_PATTERN.match(name)
        if not match:
            continue
        try:
            key = base64.b64decode(value, validate=True)
        except binascii.Error as err:
            raise ValueError(f"{name} is not valid base64") from err
        if len(key) != KEY_LENGTH:
            raise ValueError(f"{name} must hold {KEY_LENGTH} bytes, got {len(key)}")
        keys[int(match.group(1))] = key
    if not keys:
        raise RuntimeError(
            "File keychain needs AUTOUNLOCK_MASTER_KEY_v1=<base64 32-byte key>"
        )
    raw_active = environ.get("AUTOUNLOCK_ACTIVE_KEY_ID")
    active = max(keys) if raw_active is None else int(raw_active)
    if active not in keys:
        raise ValueError(
            f"Active keychain key v{active} is not configured "
            f"(available: {sorted(keys)})"
        )
    logger.debug("Keychain key versions %s, active v%d", sorted(keys), active)
    return keys, active


def generate_master_key() -> str:
    """Return a new base64 master key for AUTOUNLOCK_MASTER_KEY_v{N}."""
    return base64.b64encode(AESGCM.generate_key(bit_length=KEY_LENGTH * 8)).decode("ascii")


class AutoUnlockConfig(BaseModel):
    """Validated auto-unlock configuration."""

    pacing_interval: float = Field(default=NAP_TIME_MILLIS / 1000, ge=0)
    keychain_backend: str = Field(default="system")
    keychain_file: Path = Field(default=_CONFIG_DIR / "keychain.json")
    settings_file: Path = Field(default=_CONFIG_DIR / "settings.json")

    @field_validator("keychain_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate keychain backend is supported."""
        v = v.lower()
        if v not in KEYCHAIN_BACKENDS:
            raise ValueError(f"Unsupported keychain backend: {v}")
        return v

    @classmethod
    def from_env(cls) -> "AutoUnlockConfig":
        """Create AutoUnlockConfig by loading values from environment.

        Unset variables fall back to the field defaults.
        """
        values: dict = {}
        pacing = os.environ.get("AUTOUNLOCK_PACING_MS")
        if pacing is not None:
            values["pacing_interval"] = int(pacing) / 1000
        backend = os.environ.get("AUTOUNLOCK_KEYCHAIN")
        if backend is not None:
            values["keychain_backend"] = backend
        keychain_file = os.environ.get("AUTOUNLOCK_KEYCHAIN_FILE")
        if keychain_file:
            values["keychain_file"] = Path(keychain_file).expanduser()
        settings_file = os.environ.get("AUTOUNLOCK_SETTINGS_FILE")
        if settings_file:
            values["settings_file"] = Path(settings_file).expanduser()
        return cls(**values)
