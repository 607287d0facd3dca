"""
Signer configuration loaded from the environment.

Certificate and key files are named by environment variables (optionally
read from a .env file):

    UNIONPAY_ROOT_CERT_PATH      root certificate (PEM or DER)
    UNIONPAY_MIDDLE_CERT_PATH    intermediate certificate
    UNIONPAY_ENCRYPT_CERT_PATH   network encryption certificate (optional)
    UNIONPAY_SIGN_KEY_PATH       merchant RSA private key (PEM or DER)
    UNIONPAY_SIGN_CERT_ID        merchant signing certificate serial number
    UNIONPAY_VERIFY_CN_NAME      "true" to accept only the primary identity
"""

import os
from typing import Optional

from cryptography import x509
from dotenv import load_dotenv

from .common.exceptions import ConfigurationError, KeyFormatError
from .common.protocol import SignerIdentity, TrustAnchors
from .common.utils import b64encode
from .crypto.sign import load_private_key
from .signer import DiagnosticSink, V510Signer

TRUE_VALUES = ("1", "true", "yes", "on")


def load_certificate_file(cert_path: str) -> x509.Certificate:
    """
    Load X.509 certificate from a PEM or DER file.
    
    Args:
        cert_path: Path to certificate file
    
    Returns:
        Certificate object
    """
    try:
        with open(cert_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigurationError(f"Cannot read certificate {cert_path}: {e}") from e

    try:
        if b"-----BEGIN" in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid certificate {cert_path}: {e}") from e


def load_private_key_material(key_path: str) -> str:
    """
    Read a private key file as signer key material.

    PEM files are returned as text; DER files are returned Base64-encoded.
    """
    try:
        with open(key_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigurationError(f"Cannot read private key {key_path}: {e}") from e

    material = data.decode('ascii', errors='replace') if b"-----BEGIN" in data else b64encode(data)

    try:
        load_private_key(material)
    except KeyFormatError as e:
        raise ConfigurationError(f"Invalid private key {key_path}: {e}") from e

    return material


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"{name} is not set")
    return value


def load_signer_from_env(
    env_file: Optional[str] = None,
    sink: Optional[DiagnosticSink] = None,
) -> V510Signer:
    """
    Build a V510Signer from environment variables.

    Args:
        env_file: .env file to load first (default: search from cwd)
        sink: Diagnostic sink for verify outcomes

    Returns:
        Configured signer

    Raises:
        ConfigurationError: A required variable is missing or a file is invalid
    """
    load_dotenv(env_file)

    encrypt_cert_path = os.getenv('UNIONPAY_ENCRYPT_CERT_PATH')

    anchors = TrustAnchors(
        root_cert=load_certificate_file(_require('UNIONPAY_ROOT_CERT_PATH')),
        intermediate_cert=load_certificate_file(_require('UNIONPAY_MIDDLE_CERT_PATH')),
        encryption_cert=load_certificate_file(encrypt_cert_path) if encrypt_cert_path else None,
    )

    identity = SignerIdentity(
        private_key=load_private_key_material(_require('UNIONPAY_SIGN_KEY_PATH')),
        cert_id=_require('UNIONPAY_SIGN_CERT_ID'),
        verify_strict_identity=os.getenv('UNIONPAY_VERIFY_CN_NAME', 'false').strip().lower() in TRUE_VALUES,
    )

    return V510Signer(identity, anchors, sink)
