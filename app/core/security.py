"""
Security utilities - password hashing, JWT access tokens and provider API
key handling (masking, encryption at rest).
"""

import hashlib
import logging
import os
from datetime import datetime, timedelta, timezone

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger("openbin.security")

# ---------------------------------------------------------------------------
# PASSWORD HASHING CONTEXT
# ---------------------------------------------------------------------------
# bcrypt only; deprecated="auto" lets old hashes verify if schemes change
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return the bcrypt hash stored in users.hashed_password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login password against the stored hash (timing-safe)."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT for the given user id.

    Args:
        subject: Stored in the "sub" claim (the user's id)
        expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        The encoded token, sent back as "Authorization: Bearer <token>"
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def mask_api_key(api_key: str) -> str:
    """
    Mask a provider API key for display.

    Keeps the last four characters so users can tell keys apart:
    "sk-abcdef123456" -> "****3456". Keys of four characters or fewer are
    fully masked.
    """
    if len(api_key) <= 4:
        return "****"
    return "****" + api_key[-4:]


# ---------------------------------------------------------------------------
# API KEY ENCRYPTION
# ---------------------------------------------------------------------------
# Stored format: "enc:<iv hex>:<tag hex>:<ciphertext hex>" (AES-256-GCM,
# key = SHA-256 of AI_ENCRYPTION_KEY). Without AI_ENCRYPTION_KEY keys are
# stored as given.
ENCRYPTED_PREFIX = "enc:"
_IV_BYTES = 12
_TAG_BYTES = 16


def _derived_key() -> bytes | None:
    if not settings.AI_ENCRYPTION_KEY:
        return None
    return hashlib.sha256(settings.AI_ENCRYPTION_KEY.encode("utf-8")).digest()


def encrypt_api_key(plaintext: str) -> str:
    """Encrypt a provider key for storage; a no-op when no encryption key is set."""
    key = _derived_key()
    if key is None:
        return plaintext

    iv = os.urandom(_IV_BYTES)
    # AESGCM appends the 16-byte tag to the ciphertext
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-_TAG_BYTES], sealed[-_TAG_BYTES:]
    return f"{ENCRYPTED_PREFIX}{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"


def decrypt_api_key(stored: str) -> str:
    """
    Reverse encrypt_api_key().

    Values without the "enc:" prefix (rows saved before encryption was
    enabled) are returned unchanged, as is anything that fails to decrypt.
    """
    if not stored.startswith(ENCRYPTED_PREFIX):
        return stored
    key = _derived_key()
    if key is None:
        return stored

    parts = stored.split(":")
    if len(parts) != 4:
        return stored
    _, iv_hex, tag_hex, ciphertext_hex = parts

    try:
        iv = bytes.fromhex(iv_hex)
        sealed = bytes.fromhex(ciphertext_hex) + bytes.fromhex(tag_hex)
        return AESGCM(key).decrypt(iv, sealed, None).decode("utf-8")
    except (ValueError, InvalidTag):
        logger.warning("Failed to decrypt stored API key, treating it as plaintext")
        return stored
