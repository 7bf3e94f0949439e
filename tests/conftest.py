"""Shared fixtures for Credential Vault tests."""
import os
import pytest

from credential_vault.crypto import IV_LENGTH, derive_key, seal
from credential_vault.envelope import LegacyEnvelope
from credential_vault.service import CredentialEncryption

MASTER_PASSWORD = "k" * 40
OTHER_PASSWORD = "n" * 40
GLOBAL_SALT = bytes(range(32))


def make_legacy_envelope(password: str, salt: bytes, plaintext: str) -> str:
    """Build a legacy (unversioned) envelope the way older releases wrote them."""
    key = derive_key(password, salt)
    iv = os.urandom(IV_LENGTH)
    tag, ciphertext = seal(key, iv, plaintext.encode("utf-8"))
    return LegacyEnvelope(iv=iv, tag=tag, ciphertext=ciphertext).encode()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of the tests."""
    monkeypatch.delenv("CREDENTIAL_ENCRYPTION_KEY", raising=False)
    monkeypatch.delenv("CREDENTIAL_ENCRYPTION_SALT", raising=False)


@pytest.fixture
def service():
    """Service with a fixed master password and global salt."""
    return CredentialEncryption(MASTER_PASSWORD, GLOBAL_SALT)


@pytest.fixture
def rotated_service():
    """Service built with the new master password and the same global salt."""
    return CredentialEncryption(OTHER_PASSWORD, GLOBAL_SALT)
