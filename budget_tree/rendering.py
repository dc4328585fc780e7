"""Plain-text rendering of an account tree."""

from __future__ import annotations

import math
from typing import List, Optional

from .account import Account, Inflow

ROOT_INFLOW = Inflow.flex(1)


def truncate_cents(amount) -> float:
    """Drop anything below a cent, rounding toward zero."""
    return math.trunc(amount * 100) / 100


def render_line(account: Account, inflow: Inflow, level: int = 0) -> str:
    indent = '\t' * level
    return f"{indent}{account.name}:\t{truncate_cents(account.balance())}\t{inflow.label()}"


def render_tree(account: Account, inflow: Optional[Inflow] = None) -> str:
    """One line per account, indented one tab per level."""
    lines: List[str] = []
    for depth, entry, node in account.walk():
        rule = entry.inflow if entry is not None else (inflow or ROOT_INFLOW)
        lines.append(render_line(node, rule, depth))
    return '\n'.join(lines)
