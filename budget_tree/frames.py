"""Tabular views of an account tree for reports and the dashboard."""

from __future__ import annotations

from typing import Any, Dict, List

import numpy as np
import pandas as pd

from .account import Account
from .allocation import account_cap, at_cap, effective_cap

FRAME_COLUMNS = ['Path', 'Parent', 'Account', 'Depth', 'Kind', 'Inflow', 'Weight', 'Cap', 'Balance', 'At Cap']


def tree_to_frame(account: Account) -> pd.DataFrame:
    """Flatten ``account`` into one row per node, depth-first.

    ``Cap`` is NaN for unbounded accounts and ``Inflow``/``Weight`` are
    empty for the starting account, which has no owning entry.
    """
    rows: List[Dict[str, Any]] = []
    paths: List[str] = []
    for depth, entry, node in account.walk():
        del paths[depth:]
        parent = paths[-1] if paths else ''
        path = f"{parent}/{node.name}" if parent else node.name
        paths.append(path)
        cap = effective_cap(entry) if entry is not None else account_cap(node)
        rows.append({
            'Path': path,
            'Parent': parent.rsplit('/', 1)[-1] if parent else '',
            'Account': node.name,
            'Depth': depth,
            'Kind': 'leaf' if node.is_leaf else 'branch',
            'Inflow': entry.inflow.kind if entry is not None else '',
            'Weight': float(entry.inflow.value) if entry is not None else np.nan,
            'Cap': float(cap) if cap is not None else np.nan,
            'Balance': float(node.balance()),
            'At Cap': bool(at_cap(entry)) if entry is not None else False,
        })
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def leaf_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Only the leaf rows, with headroom to their caps."""
    leaves = frame[frame['Kind'] == 'leaf'].copy()
    leaves['Headroom'] = np.where(leaves['Cap'].notna(), leaves['Cap'] - leaves['Balance'], np.inf)
    return leaves.reset_index(drop=True)
