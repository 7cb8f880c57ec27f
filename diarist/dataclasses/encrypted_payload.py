#!/usr/bin/env python3
"""
encrypted_payload.py
--------------------
Versioned envelope for password-protected post bodies.

Wire form (JSON, binary fields base64-encoded):

    {
      "v": 1,
      "alg": "AES-256-GCM",
      "digest": "SHA-256",
      "iterations": 180000,
      "salt": "<16 bytes>",
      "iv": "<12 bytes>",
      "data": "<ciphertext || 16-byte tag>"
    }

A payload is created once at publish time and never mutated. The version
field lets later payloads change parameters while old ones stay readable.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import base64
import binascii
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict

# --- Local imports ---
from diarist.core.exceptions import PayloadFormatError
from diarist.core.settings import (
    IV_LENGTH,
    MAX_KDF_ITERATIONS,
    PAYLOAD_ALGORITHM,
    PAYLOAD_DIGEST,
    PAYLOAD_VERSION,
    SALT_LENGTH,
    TAG_LENGTH,
)


REQUIRED_FIELDS = ("v", "alg", "digest", "iterations", "salt", "iv", "data")


def b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def b64decode(value: str, field_name: str) -> bytes:
    """
    Strictly decode a base64 field.

    Raises:
        PayloadFormatError: If the value is not valid base64
    """
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as e:
        raise PayloadFormatError(f"Field '{field_name}' is not valid base64") from e


@dataclass(frozen=True)
class EncryptedPostPayload:
    """Immutable v1 envelope for an encrypted post body."""

    iterations: int
    salt: str
    iv: str
    data: str
    v: int = PAYLOAD_VERSION
    alg: str = PAYLOAD_ALGORITHM
    digest: str = PAYLOAD_DIGEST

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {key: data[key] for key in REQUIRED_FIELDS}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> EncryptedPostPayload:
        """
        Validate and build a payload from a decoded JSON object.

        Raises:
            PayloadFormatError: On missing fields, unsupported parameters,
                or malformed binary fields
        """
        if not isinstance(data, dict):
            raise PayloadFormatError("Encrypted payload must be a JSON object")

        missing = [key for key in REQUIRED_FIELDS if key not in data]
        if missing:
            raise PayloadFormatError(f"Encrypted payload is missing {', '.join(missing)}")

        if data["v"] != PAYLOAD_VERSION:
            raise PayloadFormatError(f"Unsupported payload version: {data['v']}")
        if data["alg"] != PAYLOAD_ALGORITHM:
            raise PayloadFormatError(f"Unsupported algorithm: {data['alg']}")
        if data["digest"] != PAYLOAD_DIGEST:
            raise PayloadFormatError(f"Unsupported digest: {data['digest']}")

        iterations = data["iterations"]
        if (
            isinstance(iterations, bool)
            or not isinstance(iterations, int)
            or not 1 <= iterations <= MAX_KDF_ITERATIONS
        ):
            raise PayloadFormatError(f"Invalid iteration count: {iterations!r}")

        for key in ("salt", "iv", "data"):
            if not isinstance(data[key], str):
                raise PayloadFormatError(f"Field '{key}' must be a base64 string")

        payload = cls(
            iterations=iterations,
            salt=data["salt"],
            iv=data["iv"],
            data=data["data"],
        )
        # Validate binary fields up front
        if len(payload.salt_bytes) != SALT_LENGTH:
            raise PayloadFormatError(f"Salt must be {SALT_LENGTH} bytes")
        if len(payload.iv_bytes) != IV_LENGTH:
            raise PayloadFormatError(f"IV must be {IV_LENGTH} bytes")
        if len(payload.data_bytes) < TAG_LENGTH:
            raise PayloadFormatError("Ciphertext is shorter than the authentication tag")
        return payload

    @classmethod
    def from_json(cls, text: str) -> EncryptedPostPayload:
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise PayloadFormatError("Encrypted payload is not valid JSON") from e
        return cls.from_dict(data)

    @property
    def salt_bytes(self) -> bytes:
        return b64decode(self.salt, "salt")

    @property
    def iv_bytes(self) -> bytes:
        return b64decode(self.iv, "iv")

    @property
    def data_bytes(self) -> bytes:
        return b64decode(self.data, "data")
