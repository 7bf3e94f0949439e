"""Credential Vault — Encrypted envelopes for stored service credentials.

Security Note (Threat Model):
    The master password and the legacy derived key live in process memory
    for the lifetime of the service. A memory dump of the application
    process could expose them, and with them every stored credential.
    This is an accepted limitation — mitigation requires HSM/KMS
    integration which is out of scope.
"""

from .version import __version__
from .exceptions import (
    CredentialVaultError,
    ConfigurationError,
    EncryptionFailure,
    DecryptionFailure,
    EnvelopeFormatError,
)
from .config import EncryptionConfig, generate_global_salt
from .envelope import V1Envelope, LegacyEnvelope, parse_envelope, is_v1
from .service import CredentialEncryption
from .key_rotation import needs_upgrade, upgrade_envelope, rotate_envelope

__all__ = [
    "__version__",
    "CredentialVaultError",
    "ConfigurationError",
    "EncryptionFailure",
    "DecryptionFailure",
    "EnvelopeFormatError",
    "EncryptionConfig",
    "generate_global_salt",
    "V1Envelope",
    "LegacyEnvelope",
    "parse_envelope",
    "is_v1",
    "CredentialEncryption",
    "needs_upgrade",
    "upgrade_envelope",
    "rotate_envelope",
]
