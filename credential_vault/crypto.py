"""
Vault Crypto Core — Key derivation, AES-GCM sealing, keyed hashing.

All envelope versions share the same primitives:
- Key derivation: PBKDF2-HMAC-SHA256(password, salt, 100,000 rounds) → 32-byte key
- Sealing: AES-256-GCM with a 16-byte IV, tag kept apart from the ciphertext

Security Note:
    Never log plaintext, derived keys or ciphertext values.
    Salts and IVs are drawn from os.urandom for every encryption.
"""
import os
import logging

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger("credential.vault")

KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16  # 128-bit IV
TAG_LENGTH = 16  # GCM tag
SALT_LENGTH = 32
ITERATIONS = 100_000


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 32-byte encryption key using PBKDF2-HMAC-SHA256.

    Args:
        password: Master password (UTF-8 encoded before derivation).
        salt: Per-record salt, or the global salt for legacy envelopes.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def random_bytes(length: int) -> bytes:
    """Return ``length`` bytes from the operating system CSPRNG."""
    return os.urandom(length)


# ---------------------------------------------------------------------------
# Authenticated encryption
# ---------------------------------------------------------------------------

def seal(key: bytes, iv: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
    """Encrypt plaintext with AES-256-GCM.

    AESGCM appends the tag to the ciphertext; envelopes store it in front,
    so it is split off here.

    Args:
        key: 32-byte AES key.
        iv: 16-byte initialization vector.
        plaintext: Data to encrypt.

    Returns:
        Tuple of (tag, ciphertext).
    """
    sealed = AESGCM(key).encrypt(iv, plaintext, None)
    return sealed[-TAG_LENGTH:], sealed[:-TAG_LENGTH]


def open_sealed(key: bytes, iv: bytes, tag: bytes, ciphertext: bytes) -> bytes:
    """Decrypt AES-256-GCM ciphertext and verify its tag.

    Args:
        key: 32-byte AES key.
        iv: Initialization vector used at encryption time.
        tag: 16-byte authentication tag.
        ciphertext: Encrypted payload without the tag.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        cryptography.exceptions.InvalidTag: If the tag does not match.
    """
    return AESGCM(key).decrypt(iv, ciphertext + tag, None)


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

def keyed_hash(value: str, key: bytes) -> str:
    """Hex SHA-256 digest of ``value`` followed by the hex form of ``key``."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(value.encode("utf-8"))
    digest.update(key.hex().encode("ascii"))
    return digest.finalize().hex()


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in constant time.

    Inputs of different length compare unequal instead of raising.
    """
    return constant_time.bytes_eq(a, b)
