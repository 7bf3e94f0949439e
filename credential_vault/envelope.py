"""
Envelope Codec — Versioned ciphertext strings stored at rest.

Two layouts exist, told apart only by the ``v1:`` prefix:

- v1:     "v1:" + base64(salt 32B | iv 16B | tag 16B | ciphertext)
- legacy: base64(iv 16B | tag 16B | ciphertext), keyed by the global salt

Envelopes are parsed once into ``V1Envelope`` or ``LegacyEnvelope`` and
callers dispatch on the variant.
"""
import base64
import binascii
from typing import Literal, Union

from pydantic import BaseModel, Field

from .crypto import IV_LENGTH, SALT_LENGTH, TAG_LENGTH
from .exceptions import EnvelopeFormatError

V1_PREFIX = "v1:"

_LEGACY_HEADER = IV_LENGTH + TAG_LENGTH
_V1_HEADER = SALT_LENGTH + _LEGACY_HEADER


class V1Envelope(BaseModel):
    """Envelope carrying its own per-record salt."""

    version: Literal["v1"] = "v1"
    salt: bytes = Field(repr=False)
    iv: bytes = Field(repr=False)
    tag: bytes = Field(repr=False)
    ciphertext: bytes = Field(repr=False)

    model_config = {"frozen": True}

    @property
    def salt_hex(self) -> str:
        return self.salt.hex()

    def encode(self) -> str:
        payload = self.salt + self.iv + self.tag + self.ciphertext
        return V1_PREFIX + base64.b64encode(payload).decode("ascii")


class LegacyEnvelope(BaseModel):
    """Pre-versioning envelope; decrypted with the global-salt key."""

    version: Literal["legacy"] = "legacy"
    iv: bytes = Field(repr=False)
    tag: bytes = Field(repr=False)
    ciphertext: bytes = Field(repr=False)

    model_config = {"frozen": True}

    def encode(self) -> str:
        payload = self.iv + self.tag + self.ciphertext
        return base64.b64encode(payload).decode("ascii")


Envelope = Union[V1Envelope, LegacyEnvelope]


def is_v1(envelope: str) -> bool:
    """Return True if ``envelope`` is in the v1 format."""
    return isinstance(envelope, str) and envelope.startswith(V1_PREFIX)


def _b64decode(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise EnvelopeFormatError("Envelope is not valid base64") from None


def parse_envelope(envelope: str) -> Envelope:
    """Parse an envelope string into its variant.

    Args:
        envelope: Stored envelope string.

    Returns:
        ``V1Envelope`` when the string carries the ``v1:`` prefix,
        ``LegacyEnvelope`` otherwise.

    Raises:
        EnvelopeFormatError: If the input is not a string, is not valid
            base64, or is shorter than the fixed header of its format.
    """
    if not isinstance(envelope, str):
        raise EnvelopeFormatError("Envelope must be a string")
    if is_v1(envelope):
        payload = _b64decode(envelope[len(V1_PREFIX):])
        if len(payload) < _V1_HEADER:
            raise EnvelopeFormatError("Envelope payload is truncated")
        iv_end = SALT_LENGTH + IV_LENGTH
        return V1Envelope(
            salt=payload[:SALT_LENGTH],
            iv=payload[SALT_LENGTH:iv_end],
            tag=payload[iv_end:_V1_HEADER],
            ciphertext=payload[_V1_HEADER:],
        )
    payload = _b64decode(envelope)
    if len(payload) < _LEGACY_HEADER:
        raise EnvelopeFormatError("Envelope payload is truncated")
    return LegacyEnvelope(
        iv=payload[:IV_LENGTH],
        tag=payload[IV_LENGTH:_LEGACY_HEADER],
        ciphertext=payload[_LEGACY_HEADER:],
    )
