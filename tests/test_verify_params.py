"""
Offline Verification Tool Tests
Tests for scripts/verify_params.py
"""
import importlib.util
import json
from pathlib import Path

import pytest

from conftest import cert_pem, sign_response

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "verify_params.py"


@pytest.fixture(scope="module")
def verify_params():
    spec = importlib.util.spec_from_file_location("verify_params", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def anchor_files(chain, tmp_path):
    root = tmp_path / "root_cert.pem"
    root.write_text(cert_pem(chain.root_cert))
    middle = tmp_path / "middle_cert.pem"
    middle.write_text(cert_pem(chain.middle_cert))
    return str(root), str(middle)


def write_params(tmp_path, content) -> str:
    path = tmp_path / "response.json"
    path.write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")
    return str(path)


class TestVerifyFile:
    """Tests for verify_file()."""

    def test_authentic_parameters(self, verify_params, chain, anchor_files, tmp_path, capsys):
        params = sign_response({"a": "1", "b": "2"}, chain.leaf_cert, chain.leaf_key)

        assert verify_params.verify_file(write_params(tmp_path, params), *anchor_files, False, "UTF-8")
        assert "identity" in capsys.readouterr().out

    def test_tampered_parameters(self, verify_params, chain, anchor_files, tmp_path):
        params = sign_response({"a": "1", "b": "2"}, chain.leaf_cert, chain.leaf_key)
        params["b"] = "3"

        assert not verify_params.verify_file(write_params(tmp_path, params), *anchor_files, False, "UTF-8")

    @pytest.mark.parametrize("content", [["a", "1"], "text", {"a": 1}, {"a": None}])
    def test_malformed_file_rejected(self, verify_params, anchor_files, tmp_path, capsys, content):
        path = write_params(tmp_path, content)

        assert verify_params.verify_file(path, *anchor_files, False, "UTF-8") is False
        assert "[✗]" in capsys.readouterr().out

    def test_verbose_prints_steps(self, verify_params, chain, anchor_files, tmp_path, capsys):
        params = sign_response({"a": "1"}, chain.leaf_cert, chain.leaf_key)

        verify_params.verify_file(write_params(tmp_path, params), *anchor_files, False, "UTF-8", True)

        assert "[a]<=====>[1]" in capsys.readouterr().out
