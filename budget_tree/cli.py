"""Command line entry point: replay a ledger and print the tree."""

from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import config
from .account import Account, new_root
from .actions import actions_as_of, apply_all
from .diff import diff
from .errors import BudgetError, ParseError
from .frames import tree_to_frame
from .parser import parse
from .rendering import render_tree
from .storage import save_tree

logger = logging.getLogger(__name__)


def _date_arg(value: str) -> dt.date:
    try:
        return dt.datetime.strptime(value, config.DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected month/day/year, got {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='budget_tree',
        description='Manage your money through space and time.',
    )
    parser.add_argument('file', nargs='?', type=Path, default=None,
                        help=f'Ledger to read (default: {config.LEDGER_PATH})')
    parser.add_argument('--as-of', type=_date_arg, default=None,
                        help='Only apply actions up to this date (M/D/Y)')
    parser.add_argument('--since', type=_date_arg, default=None,
                        help='Show the net change since this date instead of balances')
    parser.add_argument('--save', type=Path, default=None,
                        help='Write the resulting tree to this JSON file')
    parser.add_argument('--table', action='store_true',
                        help='Print a flat table instead of the indented tree')
    parser.add_argument('--keep-going', action='store_true',
                        help='Skip failing actions instead of stopping at the first one')
    parser.add_argument('--log-level', default=config.LOG_LEVEL, type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: %(default)s)')
    return parser


def _build(actions, as_of: Optional[dt.date], fail_fast: bool) -> Tuple[Account, List[BudgetError]]:
    tree = new_root()
    errors = apply_all(tree, actions_as_of(actions, as_of), fail_fast=fail_fast)
    return tree, errors


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format='%(levelname)s %(name)s: %(message)s')

    path = args.file or config.LEDGER_PATH
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:
        print(f"Could not read ledger {path}: {exc}", file=sys.stderr)
        return 1

    try:
        actions = parse(text)
    except ParseError as exc:
        for message in exc.errors:
            print(message, file=sys.stderr)
        return 1
    logger.info("Read %d action(s) from %s", len(actions), path)

    fail_fast = not args.keep_going
    try:
        tree, errors = _build(actions, args.as_of, fail_fast)
        shown = tree
        if args.since is not None:
            start, start_errors = _build(actions, args.since, fail_fast)
            errors = start_errors + errors
            shown = diff(start, tree)
    except BudgetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.table:
        print(tree_to_frame(shown).to_string(index=False))
    else:
        print(render_tree(shown))

    if args.save is not None:
        save_tree(tree, args.save)

    for exc in errors:
        print(f"Error: {exc}", file=sys.stderr)
    return 1 if errors else 0
