#!/usr/bin/env python3
"""
Generate a UnionPay-style Test Certificate Chain

This script creates a root CA, an intermediate CA signed by the root, and a
signing certificate signed by the intermediate. The signing certificate
carries a UnionPay-style CN so that the signer accepts it as a network
certificate.

Usage:
    python scripts/gen_chain.py --output certs
    python scripts/gen_chain.py --identity "00040000:SIGN" --days 30
"""

import argparse
import os
from datetime import datetime, timedelta, timezone
from cryptography import x509
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from unionpay.common.protocol import UNIONPAY_CNNAME


def _name(common_name: str, organization: str = "China UnionPay") -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "CN"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])


def _ca_key_usage() -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True,
        key_cert_sign=True,
        crl_sign=True,
        key_encipherment=False,
        content_commitment=False,
        data_encipherment=False,
        key_agreement=False,
        encipher_only=False,
        decipher_only=False,
    )


def issue_certificate(
    subject: x509.Name,
    issuer_name: x509.Name,
    issuer_key,
    validity_days: int,
    is_ca: bool,
    path_length=None,
):
    """
    Generate a key pair and issue a certificate for it.
    
    Args:
        subject: Subject name
        issuer_name: Issuer name (equal to subject for a self-signed root)
        issuer_key: Issuer private key, or None for a self-signed root
        validity_days: Certificate validity period in days
        is_ca: Whether the certificate may sign other certificates
        path_length: Basic constraints path length for CA certificates
    
    Returns:
        Tuple of (private_key, certificate)
    """
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    now = datetime.now(timezone.utc)
    
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(
            x509.BasicConstraints(ca=is_ca, path_length=path_length if is_ca else None),
            critical=True,
        )
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
            critical=False,
        )
    )
    
    if is_ca:
        builder = builder.add_extension(_ca_key_usage(), critical=True)
    
    cert = builder.sign(issuer_key or private_key, hashes.SHA256())
    
    print(f"[+] Issued: {subject.rfc4514_string()}")
    print(f"    Valid until: {cert.not_valid_after_utc}")
    print(f"    Serial: {cert.serial_number}")
    
    return private_key, cert


def save_certificate_and_key(private_key, cert, output_prefix: str):
    """Save PKCS#8 private key and certificate to PEM files."""
    
    key_path = f"{output_prefix}_key.pem"
    with open(key_path, "wb") as f:
        f.write(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
    
    cert_path = f"{output_prefix}_cert.pem"
    with open(cert_path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))
    print(f"[+] Saved: {cert_path}, {key_path}")


def generate_chain(identity: str, validity_days: int, output_dir: str):
    """Issue root, intermediate and signing certificates into output_dir."""
    
    os.makedirs(output_dir, exist_ok=True)
    
    print("[*] Generating root CA...")
    root_name = _name("CFCA TEST CS CA")
    root_key, root_cert = issue_certificate(
        root_name, root_name, None, validity_days * 10, is_ca=True
    )
    
    print("[*] Generating intermediate CA...")
    middle_name = _name("CFCA TEST OCA1")
    middle_key, middle_cert = issue_certificate(
        middle_name, root_name, root_key, validity_days * 5, is_ca=True, path_length=0
    )
    
    print("[*] Generating signing certificate...")
    sign_name = _name(f"041@Z12@{identity}@00000001", organization="UnionPay")
    sign_key, sign_cert = issue_certificate(
        sign_name, middle_name, middle_key, validity_days, is_ca=False
    )
    
    save_certificate_and_key(root_key, root_cert, os.path.join(output_dir, "root"))
    save_certificate_and_key(middle_key, middle_cert, os.path.join(output_dir, "middle"))
    save_certificate_and_key(sign_key, sign_cert, os.path.join(output_dir, "sign"))
    
    print(f"\n[✓] Chain created successfully! Suggested .env entries:")
    print(f"    UNIONPAY_ROOT_CERT_PATH={os.path.join(output_dir, 'root_cert.pem')}")
    print(f"    UNIONPAY_MIDDLE_CERT_PATH={os.path.join(output_dir, 'middle_cert.pem')}")
    print(f"    UNIONPAY_SIGN_KEY_PATH={os.path.join(output_dir, 'sign_key.pem')}")
    print(f"    UNIONPAY_SIGN_CERT_ID={sign_cert.serial_number}")


def main():
    parser = argparse.ArgumentParser(
        description="Generate a root/intermediate/signing test certificate chain"
    )
    parser.add_argument(
        "--identity",
        default=UNIONPAY_CNNAME,
        help="Identity placed in the signing certificate CN"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=365,
        help="Validity period of the signing certificate in days (default: 365)"
    )
    parser.add_argument(
        "--output",
        default="certs",
        help="Output directory for certificates (default: certs)"
    )
    
    args = parser.parse_args()
    
    generate_chain(
        identity=args.identity,
        validity_days=args.days,
        output_dir=args.output
    )


if __name__ == "__main__":
    main()
