"""Vault AutoUnlock Meta information.
   Vault AutoUnlock silently unlocks, mounts and reveals vaults at startup.
"""
__title__ = 'vault_autounlock'
__description__ = (
   'Vault AutoUnlock silently unlocks previously configured '
   'encrypted vaults at application startup.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
