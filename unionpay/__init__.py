"""
UnionPay Gateway Signer

Message authentication for the UnionPay online gateway (protocol 5.1.0):
- Canonical key-value encoding of parameter sets
- SHA256withRSA signatures
- X.509 chain-of-trust validation of the signing certificate
- Signer identity checks
"""

from .signer import Signer, V510Signer, DiagnosticSink, LoggingSink
from .common.protocol import SignerIdentity, TrustAnchors, SignatureEnvelope, VerifyOutcome

__version__ = "1.0.0"

__all__ = [
    'Signer',
    'V510Signer',
    'DiagnosticSink',
    'LoggingSink',
    'SignerIdentity',
    'TrustAnchors',
    'SignatureEnvelope',
    'VerifyOutcome',
]
