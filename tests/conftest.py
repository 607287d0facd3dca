"""
Pytest configuration and shared fixtures for the UnionPay signer tests.

Provides an in-memory certificate chain:
    root CA -> intermediate CA -> signing certificate
plus a factory for signing certificates with custom names, validity
windows and issuers.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from unionpay import SignerIdentity, TrustAnchors, V510Signer, VerifyOutcome
from unionpay.common.protocol import UNIONPAY_CNNAME, VAR_SIGNATURE, VAR_SIGN_PUBLIC_KEY_CERT
from unionpay.crypto.canonical import build_kv_pair_str
from unionpay.crypto.sign import digest, sign


def make_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_name(common_name: str) -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "CN"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "China UnionPay"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])


def make_cert(
    subject: x509.Name,
    key,
    issuer: x509.Name,
    issuer_key,
    is_ca: bool,
    path_length=None,
    not_before=None,
    not_after=None,
    key_cert_sign: bool = True,
) -> x509.Certificate:
    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=365))
        .add_extension(
            x509.BasicConstraints(ca=is_ca, path_length=path_length if is_ca else None),
            critical=True,
        )
    )
    if is_ca:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=True,
                key_cert_sign=key_cert_sign,
                crl_sign=True,
                key_encipherment=False,
                content_commitment=False,
                data_encipherment=False,
                key_agreement=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    return builder.sign(issuer_key, hashes.SHA256())


def private_key_pem(key) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('ascii')


def cert_pem(cert: x509.Certificate) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode('ascii')


def unionpay_cn(identity: str) -> str:
    return f"041@Z12@{identity}@00000001"


class Chain:
    """Keys and certificates of one test PKI."""

    def __init__(self):
        self.root_key = make_key()
        self.root_name = make_name("CFCA TEST CS CA")
        self.root_cert = make_cert(self.root_name, self.root_key, self.root_name, self.root_key, is_ca=True)

        self.middle_key = make_key()
        self.middle_name = make_name("CFCA TEST OCA1")
        self.middle_cert = make_cert(
            self.middle_name, self.middle_key, self.root_name, self.root_key, is_ca=True, path_length=0
        )

        self.leaf_key = make_key()
        self.leaf_cert = self.issue_leaf(unionpay_cn(UNIONPAY_CNNAME))

    def issue_leaf(self, common_name: str, not_before=None, not_after=None, key=None) -> x509.Certificate:
        """Issue a signing certificate from the intermediate."""
        return make_cert(
            make_name(common_name),
            key or self.leaf_key,
            self.middle_name,
            self.middle_key,
            is_ca=False,
            not_before=not_before,
            not_after=not_after,
        )

    @property
    def anchors(self) -> TrustAnchors:
        return TrustAnchors(root_cert=self.root_cert, intermediate_cert=self.middle_cert)


class RecordingSink:
    """Collects verify outcomes."""

    def __init__(self):
        self.events = []
        self.debug_lines = []

    def report(self, outcome: VerifyOutcome, detail: str) -> None:
        self.events.append((outcome, detail))

    def debug(self, detail: str) -> None:
        self.debug_lines.append(detail)

    @property
    def last(self) -> VerifyOutcome:
        return self.events[-1][0]


def sign_response(params: dict, cert: x509.Certificate, key) -> dict:
    """Sign params the way the network signs its responses."""
    signed = dict(params)
    signed[VAR_SIGN_PUBLIC_KEY_CERT] = cert_pem(cert)
    hex_digest = digest(build_kv_pair_str(signed), "UTF-8")
    signed[VAR_SIGNATURE] = sign(hex_digest, private_key_pem(key))
    return signed


@pytest.fixture(scope="session")
def chain() -> Chain:
    return Chain()


@pytest.fixture(scope="session")
def foreign_chain() -> Chain:
    return Chain()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def merchant_identity(chain) -> SignerIdentity:
    return SignerIdentity(private_key=private_key_pem(chain.leaf_key), cert_id="69629715588")


@pytest.fixture
def signer(chain, merchant_identity, sink) -> V510Signer:
    return V510Signer(merchant_identity, chain.anchors, sink)


@pytest.fixture
def strict_signer(chain, merchant_identity, sink) -> V510Signer:
    identity = merchant_identity.model_copy(update={"verify_strict_identity": True})
    return V510Signer(identity, chain.anchors, sink)
