"""
Vault Key Rotation — Per-record re-encryption for migration tooling.

Each helper takes one envelope and returns its replacement; storing the
result is up to the caller, so a record is either fully rotated or left as
it was. Already-upgraded envelopes are returned unchanged, which makes
re-running a migration safe.

Security Note:
    Plaintext exists in memory only during re-encryption of each record.
    Never log plaintext or ciphertext values.
"""
import logging
from typing import Optional

from .envelope import V1_PREFIX, is_v1
from .exceptions import EncryptionFailure
from .service import CredentialEncryption

logger = logging.getLogger("credential.vault")

# Marker stored in place of a per-record salt for credentials written
# before salts were tracked.
LEGACY_SALT_MARKER = "legacy"


def needs_upgrade(envelope: str) -> bool:
    """Return True if ``envelope`` is still in the legacy format."""
    return not is_v1(envelope)


def upgrade_envelope(
    service: CredentialEncryption,
    envelope: str,
    salt_hex: Optional[str] = None,
) -> str:
    """Re-encrypt a legacy envelope into the v1 format.

    Args:
        service: Service holding the current master password.
        envelope: Stored envelope, legacy or v1.
        salt_hex: Per-record salt tracked next to the credential, if any.
            ``None`` or the ``"legacy"`` marker selects the global salt.

    Returns:
        A v1 envelope. v1 input is returned as is.

    Raises:
        DecryptionFailure: If the legacy envelope cannot be opened.
        EncryptionFailure: If re-encryption does not produce a v1 envelope.
    """
    if is_v1(envelope):
        return envelope
    if salt_hex and salt_hex != LEGACY_SALT_MARKER:
        plaintext = service.decrypt_with_salt(envelope, salt_hex)
    else:
        plaintext = service.decrypt(envelope)
    upgraded = service.encrypt(plaintext)
    if not upgraded.startswith(V1_PREFIX):
        raise EncryptionFailure("Re-encryption did not produce v1 format")
    logger.debug("Upgraded legacy envelope to v1")
    return upgraded


def rotate_envelope(
    service: CredentialEncryption,
    old_password: str,
    envelope: str,
) -> str:
    """Re-encrypt an envelope written under ``old_password``.

    ``service`` must already be built with the new master password.

    Raises:
        DecryptionFailure: If ``old_password`` does not open the envelope.
    """
    plaintext = service.decrypt_with_password(old_password, envelope)
    rotated = service.encrypt(plaintext)
    logger.debug(
        "Rotated %s envelope to the active master password",
        "v1" if is_v1(envelope) else "legacy",
    )
    return rotated
