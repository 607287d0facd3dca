"""
Canonical Encoding Tests
Tests for unionpay/crypto/canonical.py
"""
import pytest

from unionpay.crypto.canonical import build_kv_pair_str


class TestBuildKvPairStr:
    """Tests for build_kv_pair_str()."""

    def test_sorted_by_key(self):
        params = {"b": "2", "a": "1", "c": "3"}

        assert build_kv_pair_str(params) == "a=1&b=2&c=3"

    def test_insertion_order_does_not_matter(self):
        first = {"txnAmt": "100", "accessType": "0", "merId": "777290058110048"}
        second = {"merId": "777290058110048", "txnAmt": "100", "accessType": "0"}

        assert build_kv_pair_str(first) == build_kv_pair_str(second)

    def test_empty_values_kept(self):
        assert build_kv_pair_str({"a": "", "b": "2"}) == "a=&b=2"

    def test_no_trailing_separator(self):
        result = build_kv_pair_str({"only": "x"})

        assert result == "only=x"
        assert not result.endswith("&")

    def test_empty_mapping(self):
        assert build_kv_pair_str({}) == ""

    def test_values_not_url_encoded(self):
        params = {"backUrl": "http://example.com/notify?a=1&b=2", "memo": "中文 text"}

        assert build_kv_pair_str(params) == "backUrl=http://example.com/notify?a=1&b=2&memo=中文 text"

    def test_code_point_ordering(self):
        # Uppercase sorts before lowercase
        assert build_kv_pair_str({"a": "1", "B": "2"}) == "B=2&a=1"

    def test_does_not_modify_input(self):
        params = {"b": "2", "a": "1"}
        build_kv_pair_str(params)

        assert list(params) == ["b", "a"]

    def test_non_string_value_rejected(self):
        with pytest.raises(TypeError):
            build_kv_pair_str({"a": 1})
