"""
Keychain Crypto — Key derivation and entry encryption for the file keychain.

Each stored passphrase is encrypted with a key derived from a versioned
master key:
    HKDF(MASTER_KEY_vN, "autounlock-keychain-vN") → AES-GCM → [key_id|nonce|payload]

The vault id is bound as associated data, so an entry copied under another
vault id fails to decrypt.

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import struct

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..exceptions import KeychainAccessError

NONCE_SIZE = 12  # 96-bit nonce
KEY_ID_SIZE = 2  # uint16 big-endian
KEY_LENGTH = 32  # AES-256
TAG_SIZE = 16


def derive_key(seed: bytes, context: str) -> bytes:
    """Derive a 32-byte encryption key using HKDF-SHA256.

    Args:
        seed: Input key material (master key bytes).
        context: Context string for domain separation.

    Returns:
        32-byte derived key.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,  # deterministic derivation per key version
        info=context.encode("utf-8"),
    )
    return hkdf.derive(seed)


def _entry_cipher(key_id: int, master_key: bytes) -> AESGCM:
    return AESGCM(derive_key(master_key, f"autounlock-keychain-v{key_id}"))


def encrypt_entry(
    plaintext: bytes, vault_id: str, key_id: int, master_key: bytes,
) -> bytes:
    """Encrypt a passphrase for storage with embedded key version.

    Format: [key_id 2B uint16 BE][nonce 12B][encrypted_payload + tag]

    Args:
        plaintext: UTF-8 passphrase bytes.
        vault_id: Vault the passphrase belongs to, bound as associated data.
        key_id: Master key version identifier.
        master_key: Raw 32-byte master key for this version.

    Returns:
        Ciphertext with key_id prefix.
    """
    nonce = os.urandom(NONCE_SIZE)
    ct = _entry_cipher(key_id, master_key).encrypt(
        nonce, plaintext, vault_id.encode("utf-8"),
    )
    return struct.pack("!H", key_id) + nonce + ct


def decrypt_entry(
    ciphertext: bytes, vault_id: str, master_keys: dict[int, bytes],
) -> bytearray:
    """Decrypt a stored entry using its embedded key version.

    Args:
        ciphertext: Entry in format [key_id 2B][nonce 12B][payload+tag].
        vault_id: Vault the entry is expected to belong to.
        master_keys: Mapping of key_id → raw 32-byte master key.

    Returns:
        Decrypted passphrase as a wipeable bytearray.

    Raises:
        KeychainAccessError: If the entry is truncated, references an unknown
            key version, or fails authentication.
    """
    _min = KEY_ID_SIZE + NONCE_SIZE + TAG_SIZE
    if len(ciphertext) < _min:
        raise KeychainAccessError(
            f"Keychain entry too short: {len(ciphertext)} bytes "
            f"(minimum {_min})"
        )
    key_id = struct.unpack("!H", ciphertext[:KEY_ID_SIZE])[0]
    if key_id not in master_keys:
        raise KeychainAccessError(
            f"Master key version {key_id} not found in provided keys"
        )
    nonce = ciphertext[KEY_ID_SIZE:KEY_ID_SIZE + NONCE_SIZE]
    ct = ciphertext[KEY_ID_SIZE + NONCE_SIZE:]
    try:
        return bytearray(
            _entry_cipher(key_id, master_keys[key_id]).decrypt(
                nonce, ct, vault_id.encode("utf-8"),
            )
        )
    except InvalidTag as err:
        raise KeychainAccessError(
            f"Keychain entry for vault {vault_id} failed authentication"
        ) from err
