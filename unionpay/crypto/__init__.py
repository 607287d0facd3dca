"""
Cryptographic primitives for the UnionPay signer.

This package provides implementations of:
- Canonical key-value encoding of parameter sets
- SHA-256 digests and SHA256withRSA signatures
- X.509 certificate chain validation (PKI)
"""

from .canonical import build_kv_pair_str
from .sign import digest, sign, verify_signature, load_private_key
from .pki import (
    load_certificate,
    validate_chain,
    get_identity,
    get_certificate_fingerprint,
    get_certificate_info,
)

__all__ = [
    'build_kv_pair_str',
    'digest',
    'sign',
    'verify_signature',
    'load_private_key',
    'load_certificate',
    'validate_chain',
    'get_identity',
    'get_certificate_fingerprint',
    'get_certificate_info',
]
