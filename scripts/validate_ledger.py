#!/usr/bin/env python3
"""Check that a ledger parses and replays without errors."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_tree import config
from budget_tree.account import new_root
from budget_tree.actions import apply_all
from budget_tree.errors import ParseError
from budget_tree.parser import parse


def validate_ledger(path: Path) -> List[str]:
    """Every parse or apply error in ``path``, as messages."""
    try:
        actions = parse(path.read_text(encoding="utf-8"))
    except ParseError as exc:
        return exc.errors
    errors = apply_all(new_root(), actions, fail_fast=False)
    return [str(exc) for exc in errors]


def main(path: Path) -> int:
    if not path.exists():
        print(f"Ledger not found: {path}")
        return 1

    issues = validate_ledger(path)
    if issues:
        print("Ledger validation failed:")
        for message in issues:
            print(f"  - {message}")
        return 1

    print("Ledger validated successfully.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Validate a budget ledger.")
    parser.add_argument("ledger", nargs="?", type=Path, default=config.LEDGER_PATH, help="Ledger file to check")
    args = parser.parse_args()
    raise SystemExit(main(args.ledger))
