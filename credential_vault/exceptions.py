"""
Credential Vault errors.

Messages are deliberately generic: no key material, plaintext, envelope bytes
or parser detail is ever carried by an exception raised from this package.
"""


class CredentialVaultError(Exception):
    """Base class for all Credential Vault errors."""


class ConfigurationError(CredentialVaultError):
    """Master secret or global salt is missing or invalid."""


class EncryptionFailure(CredentialVaultError):
    """Raised when a credential could not be encrypted."""

    def __init__(self, message: str = "Failed to encrypt credential"):
        super().__init__(message)


class DecryptionFailure(CredentialVaultError):
    """Raised when an envelope could not be decrypted.

    Malformed base64, truncated payloads and authentication-tag mismatches
    are all reported the same way.
    """

    def __init__(self, message: str = "Failed to decrypt credential"):
        super().__init__(message)


class EnvelopeFormatError(CredentialVaultError, ValueError):
    """Envelope string could not be parsed."""
