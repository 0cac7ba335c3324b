"""
FileKeychain — Encrypted passphrase storage in a local JSON file.

Used on platforms without a usable OS keyring. The file maps vault ids to
base64-encoded entries produced by :func:`encrypt_entry`:

    {"version": 1, "entries": {"<vault id>": "<base64 entry>"}}

Security Note:
    The decrypted passphrase is copied into a wipeable buffer, but the
    intermediate ``bytes`` returned by the AEAD cipher cannot be wiped.
    Never log plaintext or ciphertext values.
"""
import base64
import binascii
import logging
import threading
from pathlib import Path

import orjson

from ..exceptions import KeychainAccessError
from ..passphrase import Passphrase
from .crypto import encrypt_entry, decrypt_entry

logger = logging.getLogger("autounlock")

_FILE_VERSION = 1


class FileKeychain:
    """Keychain backed by an encrypted JSON file.

    Args:
        path: Location of the keychain file. Created on first store.
        master_keys: Mapping of key version to raw 32-byte master key.
        active_key_id: Version used to encrypt new entries.
    """

    def __init__(
        self,
        path: Path,
        master_keys: dict[int, bytes],
        active_key_id: int,
    ):
        if active_key_id not in master_keys:
            raise KeyError(
                f"Active key version {active_key_id} not found in provided master keys"
            )
        self._path = Path(path)
        self._master_keys = master_keys
        self._active_key_id = active_key_id
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def is_supported(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read_entries(self) -> dict[str, str]:
        """Read all entries. Returns an empty mapping if the file is missing."""
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as err:
            raise KeychainAccessError(
                f"Cannot read keychain file {self._path}: {err}"
            ) from err
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as err:
            raise KeychainAccessError(
                f"Keychain file {self._path} is corrupt"
            ) from err
        if not isinstance(data, dict) or data.get("version") != _FILE_VERSION:
            raise KeychainAccessError(
                f"Unsupported keychain file format in {self._path}"
            )
        return dict(data.get("entries") or {})

    def _write_entries(self, entries: dict[str, str]) -> None:
        payload = orjson.dumps(
            {"version": _FILE_VERSION, "entries": entries},
            option=orjson.OPT_INDENT_2,
        )
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(payload)
            tmp.chmod(0o600)
            tmp.replace(self._path)
        except OSError as err:
            raise KeychainAccessError(
                f"Cannot write keychain file {self._path}: {err}"
            ) from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def store_passphrase(self, vault_id: str, passphrase: Passphrase) -> None:
        """Encrypt and persist the passphrase of a vault, replacing any previous one."""
        entry = encrypt_entry(
            bytes(passphrase.view()),
            vault_id,
            self._active_key_id,
            self._master_keys[self._active_key_id],
        )
        with self._lock:
            entries = self._read_entries()
            entries[vault_id] = base64.b64encode(entry).decode("ascii")
            self._write_entries(entries)
        logger.debug(
            "Keychain store: vault=%s key_version=%d", vault_id, self._active_key_id,
        )

    def load_passphrase(self, vault_id: str) -> Passphrase | None:
        """Decrypt and return the passphrase of a vault.

        Returns:
            The passphrase, or None if nothing is stored for ``vault_id``.

        Raises:
            KeychainAccessError: If the file or the entry cannot be decrypted.
        """
        with self._lock:
            encoded = self._read_entries().get(vault_id)
        if encoded is None:
            return None
        try:
            entry = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as err:
            raise KeychainAccessError(
                f"Keychain entry for vault {vault_id} is not valid base64"
            ) from err
        return Passphrase.wrap(decrypt_entry(entry, vault_id, self._master_keys))

    def delete_passphrase(self, vault_id: str) -> None:
        """Remove the passphrase of a vault. No-op if none is stored."""
        with self._lock:
            entries = self._read_entries()
            if entries.pop(vault_id, None) is None:
                return
            self._write_entries(entries)
        logger.debug("Keychain delete: vault=%s", vault_id)
