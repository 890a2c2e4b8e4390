from __future__ import annotations

import json
import os
import sys

from app.signing import generate_signature


SCRIPT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "scripts"))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from sign_params import main  # noqa: E402


SECRET = "cli-secret"
PARAMS = {"app_id": "A1", "amount": 39.99, "email": "", "extra": {"source": "web", "order_id": "O1"}}


def _write(tmp_path, payload) -> str:
    path = tmp_path / "params.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_sign_prints_signature(tmp_path, capsys):
    path = _write(tmp_path, PARAMS)
    assert main(["--secret", SECRET, "sign", path]) == 0
    out = capsys.readouterr().out.strip().splitlines()
    assert out[-1] == generate_signature(PARAMS, SECRET)


def test_sign_show_canonical(tmp_path, capsys):
    path = _write(tmp_path, {"app_id": "A1", "amount": 39.99})
    assert main(["--secret", SECRET, "sign", path, "--show-canonical"]) == 0
    out = capsys.readouterr().out
    assert "canonical: amount=39.99&app_id=A1" in out


def test_verify_uses_signature_field(tmp_path, capsys):
    body = {**PARAMS, "signature": generate_signature(PARAMS, SECRET)}
    path = _write(tmp_path, body)
    assert main(["--secret", SECRET, "verify", path]) == 0
    assert capsys.readouterr().out.strip() == "valid"


def test_verify_reports_reason(tmp_path, capsys):
    path = _write(tmp_path, PARAMS)
    assert main(["--secret", SECRET, "verify", path, "--signature", "0" * 64]) == 1
    assert "reason=INVALID_SIGNATURE" in capsys.readouterr().out


def test_secret_from_env(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("PAY302_SECRET", SECRET)
    path = _write(tmp_path, PARAMS)
    assert main(["sign", path]) == 0
    assert capsys.readouterr().out.strip() == generate_signature(PARAMS, SECRET)


def test_empty_secret_exits_2(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("PAY302_SECRET", "")
    path = _write(tmp_path, PARAMS)
    assert main(["sign", path]) == 2
    assert "error:" in capsys.readouterr().err
