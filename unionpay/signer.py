"""
UnionPay Gateway Signer (protocol 5.1.0)

Signs outgoing parameter sets and verifies incoming ones:
1. Signature and signing certificate extraction
2. Certificate validity and chain-of-trust checks
3. Signer identity checks
4. Canonical encoding and SHA-256 digest
5. SHA256withRSA verification with the certificate's public key

Verification never raises; every rejection is reported to a diagnostic
sink with a VerifyOutcome and returned as False.
"""

import logging
from abc import ABC, abstractmethod
from typing import Mapping, Optional, Protocol

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .common.exceptions import (
    CertificateParseError,
    CertificateExpired,
    CertificateNotYetValid,
    ChainBuildError,
    EncodingError,
    UntrustedSignerIdentity,
)
from .common.protocol import (
    DEFAULT_CHARSET,
    SIGN_METHOD_RSA,
    V510_VERSION,
    VAR_CERT_ID,
    VAR_ENCRYPT_CERT_ID,
    VAR_SIGN_METHOD,
    VAR_SIGN_PUBLIC_KEY_CERT,
    VAR_SIGNATURE,
    VAR_VERSION,
    SignatureEnvelope,
    SignerIdentity,
    TrustAnchors,
    VerifyOutcome,
)
from .common.utils import b64decode, is_blank
from .crypto.canonical import build_kv_pair_str
from .crypto.pki import load_certificate, validate_chain
from .crypto.sign import digest as sha256_digest, sign as rsa_sign, verify_signature

logger = logging.getLogger("unionpay")


class DiagnosticSink(Protocol):
    """Receives the reason each verify call ended, plus step-by-step detail."""

    def report(self, outcome: VerifyOutcome, detail: str) -> None:
        ...

    def debug(self, detail: str) -> None:
        ...


class LoggingSink:
    """Forwards verify outcomes to a standard library logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def debug(self, detail: str) -> None:
        self.log.debug("%s", detail)

    def report(self, outcome: VerifyOutcome, detail: str) -> None:
        if outcome is VerifyOutcome.ACCEPTED:
            self.log.debug("Verify accepted: %s", detail)
        else:
            self.log.warning("Verify rejected [%s]: %s", outcome.value, detail)


class Signer(ABC):
    """Contract shared by every UnionPay protocol-version signer."""

    @abstractmethod
    def digest(self, data: str, charset: str = DEFAULT_CHARSET) -> str:
        """Digest a canonical string."""

    @abstractmethod
    def sign(self, data: str) -> str:
        """Sign a string and return the Base64 signature."""

    @abstractmethod
    def verify(self, params: Mapping[str, str], charset: str = DEFAULT_CHARSET) -> bool:
        """Verify a signed parameter set."""

    @abstractmethod
    def get_cert_id(self) -> str:
        """Serial number of the merchant signing certificate."""

    @abstractmethod
    def get_version(self) -> str:
        """Protocol version handled by this signer."""

    @abstractmethod
    def get_sign_method(self) -> str:
        """Protocol code of the signature algorithm."""


class V510Signer(Signer):
    """Signer for the UnionPay online gateway, protocol version 5.1.0."""

    VERSION = V510_VERSION
    SIGN_METHOD = SIGN_METHOD_RSA

    def __init__(
        self,
        identity: SignerIdentity,
        anchors: TrustAnchors,
        sink: Optional[DiagnosticSink] = None,
    ):
        self._identity = identity
        self._anchors = anchors
        self._sink = sink or LoggingSink()

    @property
    def identity(self) -> SignerIdentity:
        return self._identity

    @property
    def anchors(self) -> TrustAnchors:
        return self._anchors

    def digest(self, data: str, charset: str = DEFAULT_CHARSET) -> str:
        """
        Compute the SHA-256 hex digest of a canonical string.

        Args:
            data: Canonical key-value string
            charset: Charset used to turn the text into bytes

        Returns:
            Lowercase hex digest

        Raises:
            EncodingError: Unsupported charset
        """
        return sha256_digest(data, charset)

    def sign(self, data: str) -> str:
        """
        Sign a string with the merchant private key (SHA256withRSA).

        Args:
            data: Text to sign, normally the hex digest of the request

        Returns:
            Base64-encoded signature

        Raises:
            KeyFormatError, SigningError
        """
        return rsa_sign(data, self._identity.private_key)

    def sign_params(self, params: Mapping[str, str], charset: str = DEFAULT_CHARSET) -> dict:
        """
        Fill in the protocol fields of a request and sign it.

        The signature covers the SHA-256 hex digest of the canonical string
        of every other field.

        Args:
            params: Request parameters
            charset: Charset used for the digest

        Returns:
            New key-sorted dict including version, signMethod, certId and signature

        Raises:
            EncodingError, KeyFormatError, SigningError
        """
        signed = {key: value for key, value in params.items() if key != VAR_SIGNATURE}
        signed[VAR_VERSION] = self.get_version()
        signed[VAR_SIGN_METHOD] = self.get_sign_method()
        signed[VAR_CERT_ID] = self.get_cert_id()

        encrypt_cert_id = self.get_encrypt_cert_id()
        if encrypt_cert_id is not None:
            signed[VAR_ENCRYPT_CERT_ID] = encrypt_cert_id

        kv_pair_str = build_kv_pair_str(signed)
        signed[VAR_SIGNATURE] = self.sign(self.digest(kv_pair_str, charset))

        return dict(sorted(signed.items()))

    @staticmethod
    def extract_envelope(params: Mapping[str, str]) -> SignatureEnvelope:
        """
        Split a parameter set into signature, signing certificate and the
        parameters covered by the signature.

        The caller's mapping is copied, never modified. A missing signature
        becomes "".
        """
        remaining = dict(sorted(params.items()))
        signature = remaining.pop(VAR_SIGNATURE, "")

        return SignatureEnvelope(
            signature=signature,
            sign_cert=remaining.get(VAR_SIGN_PUBLIC_KEY_CERT),
            params=remaining,
        )

    def _reject(self, outcome: VerifyOutcome, detail: str) -> bool:
        self._sink.report(outcome, detail)
        return False

    def verify(self, params: Mapping[str, str], charset: str = DEFAULT_CHARSET) -> bool:
        """
        Verify a signed UnionPay parameter set.

        The signing certificate carried in the parameters must be valid,
        chain to the configured root through the intermediate and belong to
        an accepted UnionPay identity before its key is used.

        Args:
            params: Parameters including signature and signPublicKeyCert
            charset: Charset used for the digest and the certificate text

        Returns:
            True if the signature matches, False otherwise (never raises)
        """
        try:
            envelope = self.extract_envelope(params)
        except (ValueError, TypeError, AttributeError) as e:
            return self._reject(VerifyOutcome.BAD_ENCODING, f"Malformed parameters: {e}")

        for key, value in envelope.params.items():
            self._sink.debug(f"[{key}]<=====>[{value}]")

        if is_blank(envelope.sign_cert):
            return self._reject(VerifyOutcome.MISSING_CERT, "Signing certificate is blank")

        try:
            sign_cert = load_certificate(envelope.sign_cert, charset)
        except CertificateParseError as e:
            return self._reject(VerifyOutcome.BAD_CERT, str(e))

        try:
            identity = validate_chain(
                sign_cert, self._anchors, self._identity.verify_strict_identity
            )
        except CertificateExpired as e:
            return self._reject(VerifyOutcome.CERT_EXPIRED, str(e))
        except CertificateNotYetValid as e:
            return self._reject(VerifyOutcome.CERT_NOT_YET_VALID, str(e))
        except ChainBuildError as e:
            cause = e.__cause__
            detail = f"{e} ({cause})" if cause is not None else str(e)
            return self._reject(VerifyOutcome.CHAIN_INVALID, detail)
        except UntrustedSignerIdentity as e:
            return self._reject(VerifyOutcome.UNTRUSTED_IDENTITY, str(e))

        try:
            kv_pair_str = build_kv_pair_str(envelope.params)
            digest = self.digest(kv_pair_str, charset)
        except EncodingError as e:
            return self._reject(VerifyOutcome.BAD_ENCODING, str(e))

        try:
            sign_data = b64decode(envelope.signature)
        except ValueError as e:
            return self._reject(VerifyOutcome.BAD_SIGNATURE, f"Signature is not Base64: {e}")

        public_key = sign_cert.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        result = verify_signature(digest.encode('utf-8'), sign_data, public_key)

        self._sink.debug(f"Signature: [{envelope.signature}]")
        self._sink.debug(f"Canonical string: [{kv_pair_str}]")
        self._sink.debug(f"Digest: [{digest}]")

        if result:
            self._sink.report(VerifyOutcome.ACCEPTED, f"Signed by '{identity}'")
        else:
            self._sink.report(VerifyOutcome.BAD_SIGNATURE, "Signature does not match digest")

        return result

    def get_cert_id(self) -> str:
        """Serial number of the merchant signing certificate, sent as certId."""
        return self._identity.cert_id

    def get_version(self) -> str:
        """Protocol version handled by this signer (5.1.0)."""
        return self.VERSION

    def get_sign_method(self) -> str:
        """Protocol code of SHA256withRSA, sent as signMethod."""
        return self.SIGN_METHOD

    def get_encrypt_cert(self) -> Optional[x509.Certificate]:
        """Network certificate for encrypting sensitive fields, if configured."""
        return self._anchors.encryption_cert

    def get_encrypt_cert_id(self) -> Optional[str]:
        """Serial number of the network encryption certificate, if configured."""
        cert = self._anchors.encryption_cert
        return str(cert.serial_number) if cert is not None else None
