from __future__ import annotations

import argparse
import json
import os
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.signing import Signer, SigningConfigError, Validator  # noqa: E402


def _load_params(path: str) -> dict:
    raw = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    # Decimal keeps the sender's number text (e.g. 39.99) exactly
    params = json.loads(raw, parse_float=Decimal)
    if not isinstance(params, dict):
        raise SystemExit("params file must contain a JSON object")
    return params


def _resolve_secret(value: str | None) -> str:
    return value if value is not None else os.getenv("PAY302_SECRET", "")


def cmd_sign(args: argparse.Namespace) -> int:
    signer = Signer(_resolve_secret(args.secret))
    params = _load_params(args.params)
    if args.show_canonical:
        print("canonical:", signer.canonicalize(params, timestamp=args.timestamp))
    print(signer.generate_signature(params, timestamp=args.timestamp))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    validator = Validator(_resolve_secret(args.secret))
    params = _load_params(args.params)
    signature = args.signature if args.signature is not None else params.get("signature")
    ok, reason = validator.check(params, signature, timestamp_tolerance=args.tolerance)
    print("valid" if ok else f"invalid reason={reason}")
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sign or verify a Pay302 parameter set.")
    parser.add_argument("--secret", default=None, help="shared secret (default: $PAY302_SECRET)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_sign = sub.add_parser("sign", help="print the signature for a JSON params file")
    p_sign.add_argument("params", help="path to a JSON object, or - for stdin")
    p_sign.add_argument("--timestamp", type=int, default=None)
    p_sign.add_argument("--show-canonical", action="store_true")
    p_sign.set_defaults(func=cmd_sign)

    p_verify = sub.add_parser("verify", help="check a signed JSON params file")
    p_verify.add_argument("params", help="path to a JSON object, or - for stdin")
    p_verify.add_argument("--signature", default=None, help="defaults to the file's signature field")
    p_verify.add_argument("--tolerance", type=int, default=None, help="replay window in seconds")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except SigningConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
