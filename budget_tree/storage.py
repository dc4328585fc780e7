"""JSON persistence for account trees.

Amounts are written as exact fraction strings (``"25/2"``) so a saved
tree loads back without rounding.
"""

from __future__ import annotations

import json
import logging
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, Optional

from .account import Account, Branch, BranchEntry, Inflow, Leaf, new_root
from .config import TREE_PATH
from .errors import StorageError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def tree_to_dict(account: Account) -> Dict[str, Any]:
    if isinstance(account.data, Leaf):
        return {
            'name': account.name,
            'kind': 'leaf',
            'balance': _amount_text(account.data.balance),
            'maximum': _amount_text(account.data.maximum),
        }
    return {
        'name': account.name,
        'kind': 'branch',
        'children': [
            {
                'account': tree_to_dict(entry.account),
                'inflow': {'kind': entry.inflow.kind, 'value': _amount_text(entry.inflow.value)},
                'max': _amount_text(entry.max_override),
            }
            for entry in account.data.children
        ],
    }


def tree_from_dict(data: Dict[str, Any]) -> Account:
    if not isinstance(data, dict):
        raise StorageError(f"Expected an account object, found {type(data).__name__}")
    try:
        name = data['name']
        kind = data['kind']
        if kind == 'leaf':
            return Account(name, Leaf(_parse_amount(data['balance']), _parse_optional(data.get('maximum'))))
        if kind != 'branch':
            raise StorageError(f"Unknown account kind {kind!r} for '{name}'")
        account = Account(name, Branch())
        for child in data.get('children') or []:
            inflow = child['inflow']
            if inflow['kind'] not in ('fixed', 'flex'):
                raise StorageError(f"Unknown inflow kind {inflow['kind']!r} under '{name}'")
            account.data.children.append(BranchEntry(
                tree_from_dict(child['account']),
                Inflow(inflow['kind'], _parse_amount(inflow['value'])),
                _parse_optional(child.get('max')),
            ))
        return account
    except (KeyError, TypeError) as exc:
        raise StorageError(f"Malformed account data: {exc}") from exc


def load_tree(path: Path | None = None) -> Account:
    """Load a saved tree; a missing file yields a fresh root."""
    target = path or TREE_PATH
    if not target.exists():
        return new_root()
    try:
        with target.open('r', encoding='utf-8') as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise StorageError(f"Could not read tree from {target}: {exc}") from exc
    if not isinstance(payload, dict) or 'tree' not in payload:
        raise StorageError(f"No tree found in {target}")
    return tree_from_dict(payload['tree'])


def save_tree(tree: Account, path: Path | None = None) -> Path:
    target = path or TREE_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        'version': FORMAT_VERSION,
        'tree': tree_to_dict(tree),
    }
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2)
    logger.info("Saved tree '%s' to %s", tree.name, target)
    return target


def _amount_text(value: Optional[Fraction]) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _parse_amount(value: Any) -> Fraction:
    try:
        return Fraction(value)
    except (ValueError, TypeError, ZeroDivisionError) as exc:
        raise StorageError(f"Invalid amount {value!r}") from exc


def _parse_optional(value: Any) -> Optional[Fraction]:
    if value is None:
        return None
    return _parse_amount(value)
