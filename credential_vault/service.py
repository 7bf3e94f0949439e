"""
CredentialEncryption — Public API for encrypting stored credentials.

Provides:
- ``encrypt(plaintext)`` / ``decrypt(envelope)`` — v1 envelopes, legacy read support
- ``extract_salt`` / ``decrypt_with_salt`` — legacy migration helpers
- ``decrypt_with_password`` / ``rotate_key`` — master password rotation
- ``hash`` / ``compare_hash`` — keyed, non-reversible comparison values
- ``generate_secure_password`` — random credential generator

Construct one instance at process start and hand it to every collaborator
that stores secrets. Calls share no mutable state and are safe from threads.

Security Note:
    Failures are reported with generic messages only. Logs carry the
    internal exception class name, never plaintext, envelopes or keys.
"""
import logging
from typing import Any, Optional

from .config import GLOBAL_SALT_ENV, EncryptionConfig
from .crypto import (
    IV_LENGTH,
    SALT_LENGTH,
    constant_time_equals,
    derive_key,
    keyed_hash,
    open_sealed,
    random_bytes,
    seal,
)
from .envelope import (
    Envelope,
    LegacyEnvelope,
    V1Envelope,
    is_v1,
    parse_envelope,
)
from .exceptions import (
    ConfigurationError,
    DecryptionFailure,
    EncryptionFailure,
    EnvelopeFormatError,
)

logger = logging.getLogger("credential.vault")

PASSWORD_CHARSET = (
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "!@#$%^&*()_+-=[]{}|;:,.<>?"
)

_SALT_DECRYPT_ERROR = "Failed to decrypt credential with provided salt"


class CredentialEncryption:
    """AES-256-GCM encryption of credentials into versioned envelopes.

    New envelopes are always written in the v1 format, with a fresh salt and
    key per record. Legacy envelopes are still readable through the key
    derived once from the master password and the global salt.
    """

    def __init__(
        self,
        master_password: str,
        global_salt: Optional[Any] = None,
    ):
        config = EncryptionConfig.create(master_password, global_salt)
        self._init_from_config(config)

    def _init_from_config(self, config: EncryptionConfig) -> None:
        self._password = config.master_password.get_secret_value()
        salt = config.global_salt
        if salt is None:
            salt = random_bytes(SALT_LENGTH)
            logger.warning(
                "Generated new encryption salt. Set %s environment "
                "variable for persistence.", GLOBAL_SALT_ENV,
            )
            logger.info("%s=%s", GLOBAL_SALT_ENV, salt.hex())
        self._global_salt = salt
        self._legacy_key = derive_key(self._password, salt)
        logger.info("Credential encryption service initialized")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: EncryptionConfig) -> "CredentialEncryption":
        """Build the service from an already validated config."""
        service = cls.__new__(cls)
        service._init_from_config(config)
        return service

    @classmethod
    def from_env(cls) -> "CredentialEncryption":
        """Build the service from CREDENTIAL_ENCRYPTION_KEY/SALT.

        Raises:
            ConfigurationError: If the master password is missing or short,
                or the salt is not valid hex.
        """
        return cls.from_config(EncryptionConfig.from_env())

    @property
    def global_salt_hex(self) -> str:
        """Hex form of the global salt, for operators to persist."""
        return self._global_salt.hex()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} global_salt={self.global_salt_hex}>"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _key_for(self, envelope: Envelope, password: Optional[str] = None) -> bytes:
        """Select the decryption key for a parsed envelope."""
        if isinstance(envelope, V1Envelope):
            return derive_key(password or self._password, envelope.salt)
        if password is not None:
            return derive_key(password, self._global_salt)
        return self._legacy_key

    @staticmethod
    def _open(envelope: Envelope, key: bytes) -> str:
        plaintext = open_sealed(key, envelope.iv, envelope.tag, envelope.ciphertext)
        return plaintext.decode("utf-8")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a credential into a v1 envelope.

        Args:
            plaintext: Secret to encrypt. May be empty.

        Returns:
            ``"v1:" + base64(salt | iv | tag | ciphertext)``.

        Raises:
            EncryptionFailure: On any internal failure.
        """
        try:
            data = plaintext.encode("utf-8")
            salt = random_bytes(SALT_LENGTH)
            iv = random_bytes(IV_LENGTH)
            key = derive_key(self._password, salt)
            tag, ciphertext = seal(key, iv, data)
            return V1Envelope(
                salt=salt, iv=iv, tag=tag, ciphertext=ciphertext,
            ).encode()
        except Exception as err:
            logger.error("Encryption failed: %s", type(err).__name__)
            raise EncryptionFailure() from None

    def decrypt(self, envelope: str) -> str:
        """Decrypt a v1 or legacy envelope.

        Raises:
            DecryptionFailure: On malformed input or tag mismatch.
        """
        try:
            parsed = parse_envelope(envelope)
            return self._open(parsed, self._key_for(parsed))
        except Exception as err:
            logger.error("Decryption failed: %s", type(err).__name__)
            raise DecryptionFailure() from None

    def extract_salt(self, envelope: str) -> Optional[str]:
        """Return the embedded salt of a v1 envelope as lowercase hex.

        Returns None for legacy envelopes and for anything unparseable.
        """
        if not is_v1(envelope):
            return None
        try:
            parsed = parse_envelope(envelope)
        except EnvelopeFormatError as err:
            logger.warning("Failed to extract salt: %s", err)
            return None
        return parsed.salt_hex

    def decrypt_with_salt(self, envelope: str, salt_hex: str) -> str:
        """Decrypt a legacy envelope with a separately tracked salt.

        v1 envelopes carry their own salt, so they are passed to
        ``decrypt`` and ``salt_hex`` is ignored.

        Args:
            envelope: Stored envelope string.
            salt_hex: Hex-encoded salt recorded alongside the credential.

        Returns:
            Decrypted plaintext.

        Raises:
            DecryptionFailure: On malformed salt or envelope, or tag mismatch.
        """
        if is_v1(envelope):
            return self.decrypt(envelope)
        try:
            salt = bytes.fromhex(salt_hex)
            parsed = parse_envelope(envelope)
            key = derive_key(self._password, salt)
            return self._open(parsed, key)
        except Exception as err:
            logger.error("Decryption with salt failed: %s", type(err).__name__)
            raise DecryptionFailure(_SALT_DECRYPT_ERROR) from None

    def decrypt_with_password(self, password: str, envelope: str) -> str:
        """Decrypt an envelope written under a different master password.

        v1 envelopes use their embedded salt; legacy envelopes use this
        instance's global salt.

        Raises:
            DecryptionFailure: If the password does not open the envelope.
        """
        try:
            if not password:
                raise ValueError("password is required")
            parsed = parse_envelope(envelope)
            return self._open(parsed, self._key_for(parsed, password))
        except Exception as err:
            logger.error("Decryption failed: %s", type(err).__name__)
            raise DecryptionFailure() from None

    def rotate_key(self, old_password: str, new_password: str, envelope: str) -> str:
        """Re-encrypt an envelope from ``old_password`` to this instance.

        The instance must already be built with ``new_password``.

        Args:
            old_password: Master password the envelope was written with.
            new_password: Master password of this instance.
            envelope: Envelope to rotate.

        Returns:
            New v1 envelope under the current master password.

        Raises:
            ConfigurationError: If ``new_password`` is not this instance's
                master password.
            DecryptionFailure: If ``old_password`` does not open the envelope.
        """
        if not isinstance(new_password, str) or not constant_time_equals(
            new_password.encode("utf-8"), self._password.encode("utf-8")
        ):
            raise ConfigurationError(
                "rotate_key requires a service built with the new master password"
            )
        plaintext = self.decrypt_with_password(old_password, envelope)
        return self.encrypt(plaintext)

    def generate_secure_password(self, length: int = 32) -> str:
        """Generate a random password from PASSWORD_CHARSET.

        Bytes are mapped by modulo, so the distribution carries a small bias.
        """
        if length < 0:
            raise ValueError("length must be zero or positive")
        if length == 0:
            return ""
        size = len(PASSWORD_CHARSET)
        return "".join(PASSWORD_CHARSET[b % size] for b in random_bytes(length))

    def hash(self, value: str) -> str:
        """Hash a value for later comparison (non-reversible)."""
        return keyed_hash(value, self._legacy_key)

    def compare_hash(self, plaintext: str, digest: str) -> bool:
        """Check ``plaintext`` against a digest from ``hash`` in constant time."""
        computed = self.hash(plaintext)
        return constant_time_equals(
            computed.encode("utf-8"), digest.encode("utf-8"),
        )
