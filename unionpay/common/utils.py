"""
Utility functions for the UnionPay signer.
"""

import base64
import codecs
import hashlib

from .exceptions import EncodingError


def encode_text(text: str, charset: str) -> bytes:
    """
    Encode text with a Java-style charset name (UTF-8, GBK, ...).

    Args:
        text: Text to encode
        charset: Charset name

    Returns:
        Encoded bytes

    Raises:
        EncodingError: Unknown charset or unencodable text
    """
    try:
        codec = codecs.lookup(charset)
    except (LookupError, TypeError) as e:
        raise EncodingError(f"Unsupported charset: {charset!r}") from e

    try:
        return codec.encode(text)[0]
    except UnicodeError as e:
        raise EncodingError(f"Text cannot be encoded as {charset}: {e}") from e


def sha256_hex(data: bytes) -> str:
    """
    Compute SHA-256 hash and return as hex string.
    
    Args:
        data: Data to hash
    
    Returns:
        Lowercase hex-encoded SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def b64encode(data: bytes) -> str:
    """Base64 encode bytes to string."""
    return base64.b64encode(data).decode('ascii')


def b64decode(data: str) -> bytes:
    """
    Base64 decode string to bytes.

    Whitespace (line breaks from form transport) is ignored; any other
    non-alphabet character is an error.

    Raises:
        ValueError: Malformed Base64
    """
    cleaned = "".join(data.split())
    return base64.b64decode(cleaned, validate=True)


def is_blank(value) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not str(value).strip()
