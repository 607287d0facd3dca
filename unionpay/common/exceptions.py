"""
Custom exceptions for the UnionPay signer.
"""


class UnionPayException(Exception):
    """Base exception for UnionPay signer errors."""
    pass


class EncodingError(UnionPayException):
    """Text could not be encoded with the requested charset."""
    pass


class KeyFormatError(UnionPayException):
    """Private key material is malformed or not an RSA key."""
    pass


class SigningError(UnionPayException):
    """RSA signing failed."""
    pass


class CertificateError(UnionPayException):
    """Certificate validation failed."""
    pass


class CertificateParseError(CertificateError):
    """Certificate could not be parsed."""
    pass


class CertificateExpired(CertificateError):
    """Certificate is past its not-after date."""
    pass


class CertificateNotYetValid(CertificateError):
    """Certificate is before its not-before date."""
    pass


class ChainBuildError(CertificateError):
    """No trusted path from the signing certificate to the root."""
    pass


class UntrustedSignerIdentity(CertificateError):
    """Certificate subject is not an accepted UnionPay identity."""
    pass


class ConfigurationError(UnionPayException):
    """Signer configuration is missing or invalid."""
    pass
