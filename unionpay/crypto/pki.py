"""
X.509 Certificate Chain Validation (PKI)

Implements the trust checks applied to the signing certificate embedded in
UnionPay responses:
- Validity period checking
- Path building from the signing certificate to the configured root
  through the configured intermediate (revocation is not checked)
- Subject identity validation
"""

import hashlib
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from ..common.exceptions import (
    CertificateError,
    CertificateParseError,
    CertificateExpired,
    CertificateNotYetValid,
    ChainBuildError,
    EncodingError,
    UntrustedSignerIdentity,
)
from ..common.protocol import TrustAnchors, UNIONPAY_CNNAME, UNIONPAY_SIGN_IDENTITY, DEFAULT_CHARSET
from ..common.utils import encode_text, b64decode, is_blank

MAX_PATH_DEPTH = 8


def load_certificate(cert_text: str, charset: str = DEFAULT_CHARSET) -> x509.Certificate:
    """
    Parse an X.509 certificate from its string form.
    
    Args:
        cert_text: PEM text, or Base64 of the DER encoding
        charset: Charset used to turn the text into bytes
    
    Returns:
        Certificate object

    Raises:
        CertificateParseError: Text is not a certificate
    """
    if not isinstance(cert_text, str) or is_blank(cert_text):
        raise CertificateParseError("Certificate text is empty")

    try:
        data = encode_text(cert_text, charset)
        if b"-----BEGIN" in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(b64decode(cert_text))
    except (EncodingError, ValueError) as e:
        raise CertificateParseError(f"Cannot parse certificate: {e}") from e


def get_certificate_fingerprint(cert: x509.Certificate) -> str:
    """
    Compute SHA-256 fingerprint of certificate.
    
    Args:
        cert: Certificate object
    
    Returns:
        Hex-encoded SHA-256 fingerprint
    """
    cert_bytes = cert.public_bytes(serialization.Encoding.DER)
    return hashlib.sha256(cert_bytes).hexdigest()


def check_validity(cert: x509.Certificate, now: Optional[datetime] = None) -> None:
    """
    Check that now lies within the certificate's validity window.

    Raises:
        CertificateNotYetValid: now is before not-before
        CertificateExpired: now is after not-after
    """
    now = now or datetime.now(timezone.utc)

    if now < cert.not_valid_before_utc:
        raise CertificateNotYetValid(
            f"Certificate not yet valid (valid from {cert.not_valid_before_utc})"
        )

    if now > cert.not_valid_after_utc:
        raise CertificateExpired(
            f"Certificate expired (expired on {cert.not_valid_after_utc})"
        )


def _check_issued_by(
    child: x509.Certificate,
    parent: x509.Certificate,
    intermediates_below: int,
    is_anchor: bool,
    now: datetime,
) -> None:
    """
    Check one link of a certification path.

    The anchor is trusted as configured; only name and signature chaining
    and key usage are checked against it.
    """
    if child.issuer != parent.subject:
        raise ChainBuildError(
            f"Issuer '{child.issuer.rfc4514_string()}' does not match "
            f"'{parent.subject.rfc4514_string()}'"
        )

    try:
        child.verify_directly_issued_by(parent)
    except InvalidSignature as e:
        raise ChainBuildError(
            f"Invalid signature from issuer '{parent.subject.rfc4514_string()}'"
        ) from e
    except (ValueError, TypeError) as e:
        raise ChainBuildError(f"Signature verification error: {e}") from e

    try:
        key_usage = parent.extensions.get_extension_for_class(x509.KeyUsage).value
        if not key_usage.key_cert_sign:
            raise ChainBuildError(
                f"Issuer '{parent.subject.rfc4514_string()}' may not sign certificates"
            )
    except x509.ExtensionNotFound:
        pass

    if is_anchor:
        return

    try:
        constraints = parent.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound as e:
        raise ChainBuildError(
            f"Intermediate '{parent.subject.rfc4514_string()}' has no basic constraints"
        ) from e

    if not constraints.ca:
        raise ChainBuildError(f"Intermediate '{parent.subject.rfc4514_string()}' is not a CA")

    if constraints.path_length is not None and intermediates_below > constraints.path_length:
        raise ChainBuildError(
            f"Path length constraint of '{parent.subject.rfc4514_string()}' exceeded"
        )

    try:
        check_validity(parent, now)
    except CertificateError as e:
        raise ChainBuildError(f"Intermediate '{parent.subject.rfc4514_string()}': {e}") from e


def build_cert_path(
    signing_cert: x509.Certificate,
    root_cert: x509.Certificate,
    pool: Sequence[x509.Certificate],
    now: Optional[datetime] = None,
) -> List[x509.Certificate]:
    """
    Build a certification path from signing_cert up to root_cert.

    root_cert is the only trust anchor; pool holds the candidate path
    members. Revocation is not checked.

    Args:
        signing_cert: Certificate to build the path for
        root_cert: Trust anchor
        pool: Candidate certificates (may include root and signing cert)
        now: Validation time (default: current UTC time)

    Returns:
        Ordered path [signing_cert, ..., root_cert]

    Raises:
        ChainBuildError: No valid path exists; __cause__ holds the last failure
    """
    now = now or datetime.now(timezone.utc)
    path = [signing_cert]
    current = signing_cert
    last_error: Optional[CertificateError] = None

    while len(path) <= MAX_PATH_DEPTH:
        try:
            _check_issued_by(current, root_cert, len(path) - 1, True, now)
            path.append(root_cert)
            return path
        except ChainBuildError as e:
            last_error = e

        for candidate in pool:
            if candidate == root_cert or candidate in path:
                continue
            try:
                _check_issued_by(current, candidate, len(path) - 1, False, now)
            except ChainBuildError as e:
                last_error = e
                continue
            path.append(candidate)
            current = candidate
            break
        else:
            raise ChainBuildError(
                f"No trusted path for '{signing_cert.subject.rfc4514_string()}'"
            ) from last_error

    raise ChainBuildError(f"Certification path longer than {MAX_PATH_DEPTH}") from last_error


def get_common_name(cert: x509.Certificate) -> str:
    """
    Extract Common Name from certificate.
    
    Args:
        cert: Certificate object
    
    Returns:
        Common Name (CN) value, or "" if absent
    """
    try:
        return cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value
    except IndexError:
        return ""


def get_identity(cert: x509.Certificate) -> str:
    """
    Extract the UnionPay identity from the certificate subject.

    UnionPay CNs look like "041@Z12@中国银联股份有限公司@00000001"; the
    identity is the third '@' segment. A CN without '@' is the identity
    itself.
    """
    cn = get_common_name(cert)
    if "@" not in cn:
        return cn

    parts = cn.split("@")
    return parts[2] if len(parts) > 2 else ""


def validate_chain(
    signing_cert: x509.Certificate,
    anchors: TrustAnchors,
    strict: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """
    Validate a signing certificate against the UnionPay trust anchors.
    
    Checks:
    1. Certificate is within its validity period
    2. A path exists to the root through the intermediate
    3. Subject identity is an accepted UnionPay identity
    
    Args:
        signing_cert: Certificate taken from the message
        anchors: Configured root and intermediate certificates
        strict: Accept only the primary network identity
        now: Validation time (default: current UTC time)
    
    Returns:
        The accepted identity string

    Raises:
        CertificateExpired, CertificateNotYetValid, ChainBuildError,
        UntrustedSignerIdentity
    """
    now = now or datetime.now(timezone.utc)

    check_validity(signing_cert, now)

    pool = [anchors.root_cert, anchors.intermediate_cert, signing_cert]
    build_cert_path(signing_cert, anchors.root_cert, pool, now)

    identity = get_identity(signing_cert)
    accepted = (UNIONPAY_CNNAME,) if strict else (UNIONPAY_CNNAME, UNIONPAY_SIGN_IDENTITY)
    if identity not in accepted:
        raise UntrustedSignerIdentity(f"Certificate owner is not UnionPay: '{identity}'")

    return identity


def get_certificate_info(cert: x509.Certificate) -> dict:
    """
    Extract certificate information for display.
    
    Args:
        cert: Certificate object
    
    Returns:
        Dictionary with certificate details
    """
    return {
        "subject": cert.subject.rfc4514_string(),
        "issuer": cert.issuer.rfc4514_string(),
        "common_name": get_common_name(cert),
        "identity": get_identity(cert),
        "serial_number": cert.serial_number,
        "not_valid_before": cert.not_valid_before_utc,
        "not_valid_after": cert.not_valid_after_utc,
        "fingerprint": get_certificate_fingerprint(cert),
    }
