"""Deposit allocation and withdrawals.

A deposit into a branch is split in three passes over a running
remainder:

1. fixed children take their flat amount, limited by their cap headroom;
2. flex children share what is left in proportion to their weights.
   A child that saturates mid-pass frees its share for the others, so
   the pass is repeated until nothing eligible is left or the remainder
   is negligible;
3. anything still left is split evenly across the children without
   looking at caps, so money is never dropped.

Each child receives its portion through the same function, so the split
repeats at every level of the tree.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Optional

from . import config
from .account import Account, Amount, Branch, BranchEntry, Leaf
from .errors import EmptyBranch, InvalidWithdrawTarget


def account_cap(account: Account) -> Optional[Amount]:
    """Cap of an account on its own; ``None`` means unbounded."""
    if isinstance(account.data, Leaf):
        return account.data.maximum
    total = Fraction(0)
    for entry in account.data.children:
        cap = effective_cap(entry)
        if cap is None:
            return None
        total += cap
    return total


def effective_cap(entry: BranchEntry) -> Optional[Amount]:
    if entry.max_override is not None:
        return entry.max_override
    return account_cap(entry.account)


def headroom(entry: BranchEntry) -> Optional[Amount]:
    cap = effective_cap(entry)
    if cap is None:
        return None
    return cap - entry.account.balance()


def at_cap(entry: BranchEntry) -> bool:
    """Whether allocation treats ``entry`` as saturated.

    Without any cap a leaf is never saturated, and a branch is saturated
    only when every child is.
    """
    cap = effective_cap(entry)
    if cap is not None:
        return entry.account.balance() >= cap
    if isinstance(entry.account.data, Leaf):
        return False
    return all(at_cap(child) for child in entry.account.data.children)


def can_hold(account: Account) -> bool:
    """A leaf, or a branch with a leaf somewhere below it."""
    if isinstance(account.data, Leaf):
        return True
    return any(can_hold(entry.account) for entry in account.data.children)


def deposit(account: Account, amount, epsilon: Optional[Amount] = None) -> None:
    """Add ``amount`` to ``account``, splitting it below a branch.

    A leaf takes the whole amount with no cap check; caps are enforced
    by the parent branch when it decides each child's portion.
    """
    amount = Fraction(amount)
    epsilon = config.EPSILON if epsilon is None else epsilon

    if isinstance(account.data, Leaf):
        account.data.balance += amount
        return

    if not can_hold(account):
        raise EmptyBranch(account.name)

    children = account.data.children
    remaining = _fixed_pass(children, amount, epsilon)
    remaining = _flex_passes(children, remaining, epsilon)

    if abs(remaining) > epsilon:
        receivers = [entry for entry in children if can_hold(entry.account)]
        share = remaining / len(receivers)
        for entry in receivers:
            deposit(entry.account, share, epsilon)


def withdraw(account: Account, amount) -> None:
    """Take ``amount`` out of a leaf.  Balances may go negative."""
    if isinstance(account.data, Branch):
        raise InvalidWithdrawTarget(account.name)
    account.data.balance -= Fraction(amount)


def _fixed_pass(children, remaining: Amount, epsilon: Amount) -> Amount:
    for entry in children:
        if not entry.inflow.is_fixed or _saturated(entry):
            continue
        take = _limit(entry.inflow.value, entry, remaining)
        deposit(entry.account, take, epsilon)
        remaining -= take
    return remaining


def _flex_passes(children, remaining: Amount, epsilon: Amount) -> Amount:
    flex_children = [entry for entry in children if entry.inflow.is_flex]
    # each pass either places everything or saturates at least one child
    for iteration in range(len(flex_children)):
        if iteration and abs(remaining) <= epsilon:
            break
        eligible = [entry for entry in flex_children if not _saturated(entry)]
        total_flex = sum((entry.inflow.flex_weight for entry in eligible), Fraction(0))
        if total_flex == 0:
            break
        per_flex = remaining / total_flex
        placed = Fraction(0)
        for entry in eligible:
            take = _limit(per_flex * entry.inflow.flex_weight, entry, remaining)
            deposit(entry.account, take, epsilon)
            remaining -= take
            placed += take
        if placed == 0:
            break
    return remaining


def _saturated(entry: BranchEntry) -> bool:
    return not can_hold(entry.account) or at_cap(entry)


def _limit(wanted: Amount, entry: BranchEntry, remaining: Amount) -> Amount:
    take = min(wanted, remaining)
    room = headroom(entry)
    if room is not None:
        take = min(take, room)
    return take
