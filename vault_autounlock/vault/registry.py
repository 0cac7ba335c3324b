"""
VaultList — Registry of known vaults, persisted as JSON.

Settings file format:
    {"directories": [
        {"id": "...", "path": "...", "unlockAfterStartup": true,
         "mountAfterUnlock": true, "revealAfterMount": false}
    ]}

Iteration order is the order of the file, which is the order auto-unlock
processes vaults in.
"""
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Optional

import orjson
from pydantic import ValidationError

from .model import Vault, VaultDriver
from .settings import VaultSettings

logger = logging.getLogger("autounlock")


class VaultList:
    """Ordered, read-mostly collection of vaults."""

    def __init__(self, vaults: Optional[list[Vault]] = None, path: Optional[Path] = None):
        self._vaults: list[Vault] = list(vaults or [])
        self._path = path

    def __iter__(self) -> Iterator[Vault]:
        # snapshot, add/remove may run concurrently
        return iter(list(self._vaults))

    def __len__(self) -> int:
        return len(self._vaults)

    def __contains__(self, vault: object) -> bool:
        return vault in self._vaults

    def get(self, vault_id: str) -> Optional[Vault]:
        """Return the vault with ``vault_id``, or None."""
        for vault in self._vaults:
            if vault.id == vault_id:
                return vault
        return None

    def add(self, vault: Vault) -> None:
        if self.get(vault.id) is not None:
            raise ValueError(f"Vault {vault.id} is already registered")
        self._vaults.append(vault)

    def remove(self, vault_id: str) -> None:
        self._vaults = [v for v in self._vaults if v.id != vault_id]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path, driver: VaultDriver) -> "VaultList":
        """Load vaults and their settings from ``path``.

        A missing file yields an empty list. Entries that fail validation are
        logged and skipped.

        Raises:
            orjson.JSONDecodeError: If the file is not valid JSON.
            ValueError: If the file does not hold a ``directories`` list.
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug("No vault settings at %s", path)
            return cls(path=path)
        data = orjson.loads(raw) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Vault settings in {path} must be a JSON object")
        directories = data.get("directories", [])
        if not isinstance(directories, list):
            raise ValueError(f"\"directories\" in {path} must be a list")
        vaults: list[Vault] = []
        for entry in directories:
            try:
                vaults.append(Vault(
                    id=entry["id"],
                    path=Path(entry["path"]),
                    driver=driver,
                    settings=VaultSettings.model_validate(entry),
                ))
            except (KeyError, TypeError, ValidationError) as err:
                logger.error("Skipping invalid vault entry in %s: %s", path, err)
        logger.info("Loaded %d vault(s) from %s", len(vaults), path)
        return cls(vaults, path=path)

    def save(self, path: Optional[Path] = None) -> None:
        """Persist vault identities and settings.

        Raises:
            ValueError: If no path is given and the list was not loaded from one.
        """
        path = path or self._path
        if path is None:
            raise ValueError("VaultList has no settings path to save to")
        path = Path(path)
        directories = [
            {"id": v.id, "path": str(v.path), **v.settings.to_dict()}
            for v in self._vaults
        ]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(
            orjson.dumps({"directories": directories}, option=orjson.OPT_INDENT_2)
        )
