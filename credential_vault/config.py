"""
Vault Configuration — Master password and global salt loading.

Reads secret material from environment variables:
    CREDENTIAL_ENCRYPTION_KEY = <master password, at least 32 characters>
    CREDENTIAL_ENCRYPTION_SALT = <hex-encoded global salt> (optional)

Security Note:
    Never log the master password. The global salt is not secret, but it must
    be stable across restarts or every legacy envelope becomes unreadable.
"""
import os
import logging
from typing import Any, Optional

from pydantic import BaseModel, SecretStr, ValidationError, field_validator

from .crypto import SALT_LENGTH, random_bytes
from .exceptions import ConfigurationError

logger = logging.getLogger("credential.vault")

MASTER_KEY_ENV = "CREDENTIAL_ENCRYPTION_KEY"
GLOBAL_SALT_ENV = "CREDENTIAL_ENCRYPTION_SALT"
MIN_MASTER_PASSWORD_LENGTH = 32


def load_master_password() -> str:
    """Read the master password from CREDENTIAL_ENCRYPTION_KEY.

    Raises:
        ConfigurationError: If the variable is not set or empty.
    """
    value = os.environ.get(MASTER_KEY_ENV)
    if not value:
        raise ConfigurationError(
            f"{MASTER_KEY_ENV} environment variable is not set"
        )
    return value


def _decode_salt(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"{GLOBAL_SALT_ENV} must be hex-encoded") from None


def load_global_salt() -> Optional[bytes]:
    """Read the global salt from CREDENTIAL_ENCRYPTION_SALT.

    Returns:
        Raw salt bytes, or None when the variable is unset.

    Raises:
        ConfigurationError: If the value is not valid hex.
    """
    raw = os.environ.get(GLOBAL_SALT_ENV)
    if not raw:
        return None
    try:
        return _decode_salt(raw.strip())
    except ValueError as err:
        raise ConfigurationError(str(err)) from None


def generate_global_salt() -> str:
    """Generate a random 32-byte global salt and return it as hex.

    This is a utility for operators to seed CREDENTIAL_ENCRYPTION_SALT.
    """
    return random_bytes(SALT_LENGTH).hex()


class EncryptionConfig(BaseModel):
    """Validated encryption settings."""

    master_password: SecretStr
    global_salt: Optional[bytes] = None

    model_config = {"frozen": True}

    @field_validator("master_password")
    @classmethod
    def validate_master_password(cls, v: SecretStr) -> SecretStr:
        """Enforce the minimum master password length."""
        if len(v.get_secret_value()) < MIN_MASTER_PASSWORD_LENGTH:
            raise ValueError(
                f"{MASTER_KEY_ENV} must be at least "
                f"{MIN_MASTER_PASSWORD_LENGTH} characters long"
            )
        return v

    @field_validator("global_salt", mode="before")
    @classmethod
    def validate_global_salt(cls, v: Any) -> Any:
        """Accept raw bytes or a hex string; reject an empty salt."""
        if v is None:
            return v
        if isinstance(v, str):
            v = _decode_salt(v.strip())
        if not v:
            raise ValueError(f"{GLOBAL_SALT_ENV} cannot be empty")
        return v

    @classmethod
    def create(
        cls,
        master_password: Optional[str],
        global_salt: Optional[Any] = None,
    ) -> "EncryptionConfig":
        """Build a config, reporting every problem as ConfigurationError.

        Pydantic error messages echo the offending input, so only the
        field locations and validator messages are kept.
        """
        if not master_password:
            raise ConfigurationError(
                f"{MASTER_KEY_ENV} environment variable is not set"
            )
        try:
            return cls(master_password=master_password, global_salt=global_salt)
        except ValidationError as exc:
            reasons = "; ".join(
                err["msg"].removeprefix("Value error, ")
                for err in exc.errors(include_input=False, include_url=False)
            )
            raise ConfigurationError(reasons) from None

    @classmethod
    def from_env(cls) -> "EncryptionConfig":
        """Create EncryptionConfig by loading values from environment.

        Returns:
            Populated EncryptionConfig instance.
        """
        return cls.create(
            master_password=load_master_password(),
            global_salt=load_global_salt(),
        )
