"""
RSA Digital Signatures

Implements SHA-256 digests and RSA signing/verification using SHA-256 with
PKCS#1 v1.5 padding (SHA256withRSA).
"""

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization, hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..common.exceptions import KeyFormatError, SigningError
from ..common.utils import encode_text, sha256_hex, b64encode, b64decode


def digest(data: str, charset: str) -> str:
    """
    Compute the SHA-256 digest of a string.
    
    Args:
        data: Text to digest
        charset: Charset used to turn the text into bytes
    
    Returns:
        Lowercase hex digest

    Raises:
        EncodingError: Unsupported charset
    """
    return sha256_hex(encode_text(data, charset))


def load_private_key(material: str) -> rsa.RSAPrivateKey:
    """
    Load an RSA private key from PEM text or Base64-encoded DER.

    DER may be PKCS#8 or traditional PKCS#1.

    Args:
        material: Key material

    Returns:
        RSA private key object

    Raises:
        KeyFormatError: Material is malformed or not an RSA key
    """
    if not isinstance(material, str) or not material.strip():
        raise KeyFormatError("Private key material is empty")

    try:
        if "-----BEGIN" in material:
            key = serialization.load_pem_private_key(material.encode('ascii'), password=None)
        else:
            key = serialization.load_der_private_key(b64decode(material), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Cannot load private key: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyFormatError(f"Expected an RSA private key, got {type(key).__name__}")

    return key


def sign(data: str, private_key_material: str) -> str:
    """
    Sign a string with SHA256withRSA.
    
    The UTF-8 bytes of data are signed using PKCS#1 v1.5 padding.
    
    Args:
        data: Text to sign
        private_key_material: PEM or Base64-DER RSA private key
    
    Returns:
        Base64-encoded signature

    Raises:
        KeyFormatError: Key material cannot be loaded
        SigningError: RSA operation failed
    """
    private_key = load_private_key(private_key_material)

    try:
        signature = private_key.sign(
            data.encode('utf-8'),
            padding.PKCS1v15(),
            hashes.SHA256()
        )
    except (ValueError, TypeError, UnicodeError) as e:
        raise SigningError(f"RSA signing failed: {e}") from e

    return b64encode(signature)


def verify_signature(digest_bytes: bytes, signature_bytes: bytes, public_key_material: bytes) -> bool:
    """
    Verify a SHA256withRSA signature.
    
    Args:
        digest_bytes: Signed data (the digest hex string as bytes)
        signature_bytes: Raw signature
        public_key_material: DER-encoded SubjectPublicKeyInfo
    
    Returns:
        True if signature is valid, False otherwise
    """
    try:
        public_key = serialization.load_der_public_key(public_key_material)
        if not isinstance(public_key, rsa.RSAPublicKey):
            return False

        public_key.verify(
            signature_bytes,
            digest_bytes,
            padding.PKCS1v15(),
            hashes.SHA256()
        )
        
        return True
    
    except InvalidSignature:
        return False
    except (ValueError, TypeError, UnsupportedAlgorithm):
        return False


# Test function for development
if __name__ == "__main__":
    print("[*] Testing SHA256withRSA")
    
    print("\n[1] Generating test RSA keypair...")
    key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('ascii')
    spki = key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    
    hex_digest = digest("accessType=0&txnAmt=100", "UTF-8")
    print(f"\n[2] Digest: {hex_digest}")
    
    signature = sign(hex_digest, key_pem)
    print(f"\n[3] Signature (base64): {signature[:64]}...")
    
    is_valid = verify_signature(hex_digest.encode('utf-8'), b64decode(signature), spki)
    print(f"\n[4] Signature verification: {is_valid}")
    
    tampered = digest("accessType=0&txnAmt=101", "UTF-8")
    is_valid_tampered = verify_signature(tampered.encode('utf-8'), b64decode(signature), spki)
    print(f"[5] Tampered digest verification: {is_valid_tampered}")
    
    assert is_valid, "Signature verification failed!"
    assert not is_valid_tampered, "Tampered digest verification should fail!"
    
    print("\n[✓] RSA signature test passed!")
