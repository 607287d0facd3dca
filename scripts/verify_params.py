#!/usr/bin/env python3
"""
Offline UnionPay Response Verification Tool

This script verifies a signed UnionPay parameter set saved as a JSON object
of string keys and values:
1. Validating the embedded signing certificate against the root and
   intermediate certificates
2. Checking the signer identity
3. Verifying the signature over the canonical parameter string

Usage:
    python scripts/verify_params.py --params response.json --root certs/root_cert.pem --middle certs/middle_cert.pem
"""

import argparse
import json
import sys

from unionpay import SignerIdentity, TrustAnchors, V510Signer, VerifyOutcome
from unionpay.config import load_certificate_file
from unionpay.common.exceptions import CertificateParseError
from unionpay.common.protocol import VAR_SIGN_PUBLIC_KEY_CERT, VAR_SIGNATURE
from unionpay.crypto.canonical import build_kv_pair_str
from unionpay.crypto.pki import get_certificate_info, load_certificate


class PrintSink:
    """Prints each verify outcome."""

    def __init__(self, verbose: bool = False):
        self.outcome = None
        self.verbose = verbose

    def debug(self, detail: str) -> None:
        if self.verbose:
            print(f"        {detail}")

    def report(self, outcome: VerifyOutcome, detail: str) -> None:
        self.outcome = outcome
        mark = "✓" if outcome is VerifyOutcome.ACCEPTED else "✗"
        print(f"    [{mark}] {outcome.value}: {detail}")


def verify_file(
    params_path: str,
    root_path: str,
    middle_path: str,
    strict: bool,
    charset: str,
    verbose: bool = False,
) -> bool:
    """
    Verify the parameter set stored in params_path.
    
    Args:
        params_path: Path to JSON parameter file
        root_path: Path to root certificate
        middle_path: Path to intermediate certificate
        strict: Accept only the primary network identity
        charset: Charset used for the digest
        verbose: Print each verification step
    
    Returns:
        True if the parameters verify, False otherwise
    """
    print("\n" + "="*70)
    print("  UNIONPAY RESPONSE VERIFICATION")
    print("="*70)
    
    print(f"\n[1] Loading trust anchors")
    anchors = TrustAnchors(
        root_cert=load_certificate_file(root_path),
        intermediate_cert=load_certificate_file(middle_path),
    )
    print(f"    Root: {anchors.root_cert.subject.rfc4514_string()}")
    print(f"    Intermediate: {anchors.intermediate_cert.subject.rfc4514_string()}")
    
    print(f"\n[2] Loading parameters: {params_path}")
    with open(params_path, 'r', encoding='utf-8') as f:
        params = json.load(f)
    
    if not isinstance(params, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in params.items()
    ):
        print("    [✗] Parameter file must hold a JSON object of string keys and values")
        return False
    
    covered = {k: v for k, v in params.items() if k != VAR_SIGNATURE}
    print(f"    Fields: {len(params)}")
    print(f"    Canonical string: {build_kv_pair_str(covered)[:120]}")
    
    sign_cert_text = params.get(VAR_SIGN_PUBLIC_KEY_CERT)
    if sign_cert_text:
        try:
            info = get_certificate_info(load_certificate(sign_cert_text, charset))
        except CertificateParseError as e:
            print(f"    [!] Signing certificate unreadable: {e}")
        else:
            print(f"\n    Signing certificate:")
            for key, value in info.items():
                print(f"    {key}: {value}")
    
    print(f"\n[3] Verifying...")
    # Verification only needs the trust anchors; no signing key is used.
    identity = SignerIdentity(private_key="-", cert_id="", verify_strict_identity=strict)
    signer = V510Signer(identity, anchors, sink=PrintSink(verbose))
    
    return signer.verify(params, charset)


def main():
    parser = argparse.ArgumentParser(
        description="Verify a signed UnionPay parameter set"
    )
    parser.add_argument("--params", required=True, help="JSON file with the parameter set")
    parser.add_argument("--root", required=True, help="Root certificate (PEM or DER)")
    parser.add_argument("--middle", required=True, help="Intermediate certificate (PEM or DER)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Accept only the primary UnionPay identity"
    )
    parser.add_argument("--charset", default="UTF-8", help="Digest charset (default: UTF-8)")
    parser.add_argument("--verbose", action="store_true", help="Print each verification step")
    
    args = parser.parse_args()
    
    is_valid = verify_file(
        args.params, args.root, args.middle, args.strict, args.charset, args.verbose
    )
    
    print()
    if is_valid:
        print("[✓] Parameters are AUTHENTIC")
    else:
        print("[✗] Parameters FAILED verification")
    
    sys.exit(0 if is_valid else 1)


if __name__ == "__main__":
    main()
