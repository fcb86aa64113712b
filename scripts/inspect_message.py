#!/usr/bin/env python3
"""Decode and check a VDA 5050 message stored as a JSON file.

Prints the canonical wire form, or the decode/graph error and exits
non-zero.  With ``--prior`` an order is checked as an update of an
earlier order, and a state for progress against an earlier state.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyvda5050 import MessageKind, Order, State, VdaError, decode_message  # noqa: E402
from pyvda5050.validation import validate_order, validate_progress, validate_state  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decode and check a VDA 5050 message file.")
    parser.add_argument("kind", choices=[kind.value for kind in MessageKind], help="Message kind (topic name).")
    parser.add_argument("path", type=Path, help="JSON file holding one message.")
    parser.add_argument("--prior", type=Path, help="Earlier message of the same kind to check against.")
    parser.add_argument("--compact", action="store_true", help="Print the wire form on one line.")
    return parser.parse_args()


def _main() -> int:
    args = _parse_args()
    try:
        message = decode_message(args.kind, args.path.read_bytes())
        prior = decode_message(args.kind, args.prior.read_bytes()) if args.prior else None

        if isinstance(message, Order):
            validate_order(message, prior if isinstance(prior, Order) else None)
        elif isinstance(message, State):
            validate_state(message)
            if isinstance(prior, State):
                validate_progress(prior, message)
    except VdaError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Cannot read input: {exc}", file=sys.stderr)
        return 2

    indent = None if args.compact else 2
    print(json.dumps(message.to_wire(), indent=indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
