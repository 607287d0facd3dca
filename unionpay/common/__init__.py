"""
Common utilities, protocol constants and exceptions for the UnionPay signer.
"""

from .protocol import *
from .utils import encode_text, sha256_hex, b64encode, b64decode, is_blank
from .exceptions import *

__all__ = [
    'encode_text',
    'sha256_hex',
    'b64encode',
    'b64decode',
    'is_blank',
]
