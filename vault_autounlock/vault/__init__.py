"""Vault model, policy settings and registry."""

from .model import Vault, VaultDriver, VaultState
from .registry import VaultList
from .reveal import SystemRevealer
from .settings import VaultSettings

__all__ = [
    "Vault",
    "VaultDriver",
    "VaultState",
    "VaultList",
    "VaultSettings",
    "SystemRevealer",
]
