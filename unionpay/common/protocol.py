"""
Protocol constants and value types using Pydantic.

Field names and identity strings follow the UnionPay online gateway
protocol, version 5.1.0.
"""

from enum import Enum
from typing import Dict, Optional

from cryptography import x509
from pydantic import BaseModel, ConfigDict, Field


V510_VERSION = "5.1.0"
SIGN_METHOD_RSA = "01"
DEFAULT_CHARSET = "UTF-8"

VAR_SIGNATURE = "signature"
VAR_SIGN_PUBLIC_KEY_CERT = "signPublicKeyCert"
VAR_CERT_ID = "certId"
VAR_VERSION = "version"
VAR_SIGN_METHOD = "signMethod"
VAR_ENCRYPT_CERT_ID = "encryptCertId"

# Identity carried by the network's primary signing certificate
UNIONPAY_CNNAME = "中国银联股份有限公司"
# Identity of the network's dedicated signing certificate
UNIONPAY_SIGN_IDENTITY = "00040000:SIGN"


class SignerIdentity(BaseModel):
    """Merchant signing material, fixed for the life of a signer."""
    model_config = ConfigDict(frozen=True)

    private_key: str = Field(..., repr=False, description="PEM or Base64-DER RSA private key")
    cert_id: str = Field(..., description="Serial number of the merchant signing certificate")
    verify_strict_identity: bool = Field(
        False,
        description="Accept only the primary network identity on incoming certificates",
    )


class TrustAnchors(BaseModel):
    """Root and intermediate certificates defining the UnionPay trust chain."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    root_cert: x509.Certificate
    intermediate_cert: x509.Certificate
    encryption_cert: Optional[x509.Certificate] = None


class SignatureEnvelope(BaseModel):
    """Signature, signing certificate and remaining parameters of one response."""
    model_config = ConfigDict(frozen=True)

    signature: str = ""
    sign_cert: Optional[str] = None
    params: Dict[str, str] = Field(default_factory=dict)


class VerifyOutcome(str, Enum):
    """Where a verify call ended."""
    ACCEPTED = "accepted"
    MISSING_CERT = "missing_cert"
    BAD_CERT = "bad_cert"
    CERT_EXPIRED = "cert_expired"
    CERT_NOT_YET_VALID = "cert_not_yet_valid"
    CHAIN_INVALID = "chain_invalid"
    UNTRUSTED_IDENTITY = "untrusted_identity"
    BAD_ENCODING = "bad_encoding"
    BAD_SIGNATURE = "bad_signature"
