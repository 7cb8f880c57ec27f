#!/usr/bin/env python3
"""
crypto.py
---------
Encrypt and decrypt password-protected post bodies.

Key derivation is PBKDF2-HMAC-SHA256 (180,000 iterations, 256-bit key);
the cipher is AES-256-GCM with a fresh 16-byte salt and 12-byte nonce per
encryption. The result is an ``EncryptedPostPayload`` (see
``diarist.dataclasses.encrypted_payload``) that a browser can also decrypt
with the Web Crypto API.

Decryption fails closed: a wrong password or any tampering raises
``AuthenticationError``; a malformed envelope raises
``PayloadFormatError``. Partial plaintext is never returned.

Usage:
    payload = encrypt_post_content("secret body", "pw")
    decrypt_post_content(payload, "pw")      # "secret body"
    decrypt_post_content(payload, "wrong")   # raises AuthenticationError
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third party imports ---
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# --- Local imports ---
from diarist.core.exceptions import AuthenticationError, PayloadFormatError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import IV_LENGTH, KDF_ITERATIONS, KEY_LENGTH, SALT_LENGTH
from diarist.dataclasses.encrypted_payload import EncryptedPostPayload, b64encode
from diarist.utils.md import dump_markdown, read_markdown


PASSWORD_KEY = "password"
ENCRYPTED_KEY = "encrypted"


def derive_key(password: str, salt: bytes, iterations: int = KDF_ITERATIONS) -> bytes:
    """Derive a 256-bit AES key from ``password`` and ``salt``."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def encrypt_post_content(plaintext: str, password: str) -> EncryptedPostPayload:
    """
    Encrypt ``plaintext`` under ``password``.

    Args:
        plaintext: Post body (any Unicode text)
        password: Non-empty password

    Returns:
        A new v1 EncryptedPostPayload

    Raises:
        ValueError: If the password is empty
    """
    if not password:
        raise ValueError("Password must not be empty")

    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = derive_key(password, salt)
    ciphertext_and_tag = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)

    return EncryptedPostPayload(
        iterations=KDF_ITERATIONS,
        salt=b64encode(salt),
        iv=b64encode(iv),
        data=b64encode(ciphertext_and_tag),
    )


def decrypt_post_content(
    payload: Union[EncryptedPostPayload, Dict[str, Any], str],
    password: str,
) -> str:
    """
    Decrypt a payload with ``password``.

    Args:
        payload: Payload object, decoded JSON dict, or JSON string
        password: Password used at encryption time

    Returns:
        The original plaintext

    Raises:
        PayloadFormatError: If the payload is not a valid v1 envelope
        AuthenticationError: If the password is wrong or data was altered
    """
    if isinstance(payload, str):
        payload = EncryptedPostPayload.from_json(payload)
    elif isinstance(payload, dict):
        payload = EncryptedPostPayload.from_dict(payload)
    elif not isinstance(payload, EncryptedPostPayload):
        raise PayloadFormatError(f"Unsupported payload type: {type(payload).__name__}")

    key = derive_key(password or "", payload.salt_bytes, payload.iterations)
    try:
        plaintext = AESGCM(key).decrypt(payload.iv_bytes, payload.data_bytes, None)
    except InvalidTag as e:
        raise AuthenticationError("Payload authentication failed") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PayloadFormatError("Decrypted content is not UTF-8 text") from e


def encrypt_post_file(
    path: Path,
    password: Optional[str] = None,
    logger: Optional[DiaristLogger] = None,
) -> EncryptedPostPayload:
    """
    Encrypt a post in place.

    The body is replaced by nothing; the frontmatter loses its ``password``
    field and gains an ``encrypted`` mapping holding the payload.

    Args:
        path: Markdown post with YAML frontmatter
        password: Password; defaults to the frontmatter ``password``
        logger: Optional DiaristLogger

    Returns:
        The payload written to the file

    Raises:
        ValueError: If no password is available, the body is empty, or the
            post is already encrypted
    """
    metadata, body = read_markdown(path)

    if ENCRYPTED_KEY in metadata:
        raise ValueError(f"Post is already encrypted: {path}")

    front_password = metadata.pop(PASSWORD_KEY, None)
    password = password or (str(front_password).strip() if front_password else None)
    if not password:
        raise ValueError(f"No password given for {path}")
    if not body.strip():
        raise ValueError(f"Post body is empty: {path}")

    payload = encrypt_post_content(body, password)
    metadata[ENCRYPTED_KEY] = payload.to_dict()
    path.write_text(dump_markdown(metadata, ""), encoding="utf-8")

    safe_logger(logger).log_operation(
        "encrypt_post", {"iterations": payload.iterations}, file=path
    )
    return payload
