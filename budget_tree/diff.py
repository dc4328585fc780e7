"""Net change between two snapshots of the same tree.

Both trees are expected to come from the same ledger at different dates.
Nodes are paired by name within each level.  Children that only exist in
the newer tree appear with their full balance.  Children that only exist
in the older tree are left out entirely, so a removal does not show up as
a negative change.
"""

from __future__ import annotations

from typing import Dict

from .account import Account, Branch, BranchEntry, Leaf
from .errors import TypeMismatch


def diff(older: Account, newer: Account) -> Account:
    """Return a new tree holding ``newer - older`` for every leaf.

    Caps, inflows and ordering come from ``newer``.  Neither input is
    modified.
    """
    if isinstance(newer.data, Leaf):
        if not isinstance(older.data, Leaf):
            raise TypeMismatch(newer.name)
        return Account(newer.name, Leaf(newer.data.balance - older.data.balance, newer.data.maximum))

    if not isinstance(older.data, Branch):
        raise TypeMismatch(newer.name)

    previous: Dict[str, Account] = {}
    for entry in older.data.children:
        previous.setdefault(entry.account.name, entry.account)

    result = Account(newer.name, Branch())
    for entry in newer.data.children:
        match = previous.get(entry.account.name)
        account = entry.account.clone() if match is None else diff(match, entry.account)
        result.data.children.append(BranchEntry(account, entry.inflow, entry.max_override))
    return result
