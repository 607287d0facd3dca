"""
Canonical key-value encoding

Serializes a parameter mapping into the exact string UnionPay digests:
entries sorted by key, written as key=value and joined with '&'.
Empty values are kept ("key="), nothing is URL-encoded and there is no
trailing separator.
"""

from typing import Mapping


def build_kv_pair_str(params: Mapping[str, str]) -> str:
    """
    Build the canonical key-value string for a parameter mapping.

    Args:
        params: Parameter mapping (string keys and values)

    Returns:
        Canonical string, e.g. "a=1&b=&c=3"

    Raises:
        TypeError: A key or value is not a string
    """
    pairs = []
    for key in sorted(params):
        value = params[key]
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(f"Parameter {key!r} must map a str to a str")
        pairs.append(f"{key}={value}")
    return "&".join(pairs)


# Test function for development
if __name__ == "__main__":
    print("[*] Testing canonical encoding")

    params = {"txnAmt": "100", "accessType": "0", "reserved": ""}
    print(f"\n[1] Params: {params}")
    print(f"    Canonical: {build_kv_pair_str(params)}")

    reordered = dict(reversed(list(params.items())))
    assert build_kv_pair_str(params) == build_kv_pair_str(reordered), "Order must not matter!"

    print("\n[✓] Canonical encoding test passed!")
