"""Typed ledger actions and the function that applies them to a tree.

Actions are applied one at a time, in ledger order.  Each either
completes or raises a :class:`~budget_tree.errors.BudgetError`.  Edit and
Transfer are built from two smaller steps and are not atomic: if the
second step fails the first one stays applied.
"""

from __future__ import annotations

import copy
import datetime as dt
import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, List, Optional, Union

from .account import Account, Amount, Branch, Inflow, Leaf, new_root
from .allocation import deposit, withdraw
from .errors import BudgetError, NotABranch, ParentNotFound

logger = logging.getLogger(__name__)


@dataclass
class New:
    name: str
    parent: str
    inflow: Inflow
    data: Union[Leaf, Branch]
    max_override: Optional[Amount] = None
    date: Optional[dt.date] = None
    line: Optional[int] = None


@dataclass
class Remove:
    name: str
    date: Optional[dt.date] = None
    line: Optional[int] = None


@dataclass
class Edit:
    name: str
    inflow: Inflow
    max: Optional[Amount] = None
    date: Optional[dt.date] = None
    line: Optional[int] = None


@dataclass
class Withdraw:
    account: str
    amount: Amount
    date: Optional[dt.date] = None
    line: Optional[int] = None


@dataclass
class Deposit:
    amount: Amount
    account: Optional[str] = None
    date: Optional[dt.date] = None
    line: Optional[int] = None


@dataclass
class Transfer:
    source: str
    amount: Amount
    destination: Optional[str] = None
    date: Optional[dt.date] = None
    line: Optional[int] = None


Action = Union[New, Remove, Edit, Withdraw, Deposit, Transfer]


def apply(tree: Account, action: Action) -> None:
    """Apply a single action to ``tree`` in place."""
    logger.debug("Applying %s", action)
    try:
        _dispatch(tree, action)
    except BudgetError as exc:
        raise exc.with_line(action.line)


def apply_all(tree: Account, actions: Iterable[Action], fail_fast: bool = True) -> List[BudgetError]:
    """Fold ``actions`` through :func:`apply`.

    With ``fail_fast`` the first error propagates.  Otherwise failing
    actions are skipped and their errors returned in ledger order.
    """
    errors: List[BudgetError] = []
    for action in actions:
        try:
            apply(tree, action)
        except BudgetError as exc:
            if fail_fast:
                raise
            logger.warning("Skipping action: %s", exc)
            errors.append(exc)
    return errors


def replay(
    actions: Iterable[Action],
    as_of: Optional[dt.date] = None,
    fail_fast: bool = True,
    tree: Optional[Account] = None,
) -> Account:
    """Build the tree as it stood on ``as_of``.

    Actions after ``as_of`` are skipped (see :func:`actions_as_of`).
    Without ``as_of`` every action applies.
    """
    tree = tree if tree is not None else new_root()
    selected = actions_as_of(actions, as_of)
    errors = apply_all(tree, selected, fail_fast=fail_fast)
    logger.info(
        "Replayed %d action(s) as of %s with %d error(s)",
        len(selected), as_of or 'end of ledger', len(errors),
    )
    return tree


def actions_as_of(actions: Iterable[Action], as_of: Optional[dt.date]) -> List[Action]:
    """The actions that had happened by ``as_of``.

    An undated action (a structure change) counts as happening on the
    date of the last dated action before it, so one at the top of the
    ledger always applies.
    """
    selected: List[Action] = []
    last_date: Optional[dt.date] = None
    for action in actions:
        if action.date is not None:
            last_date = action.date
        if as_of is None or last_date is None or last_date <= as_of:
            selected.append(action)
    return selected


def _dispatch(tree: Account, action: Action) -> None:
    if isinstance(action, New):
        _apply_new(tree, action)
    elif isinstance(action, Remove):
        tree.remove(action.name)
    elif isinstance(action, Edit):
        _apply_edit(tree, action)
    elif isinstance(action, Withdraw):
        _apply_withdraw(tree, action.account, action.amount)
    elif isinstance(action, Deposit):
        _apply_deposit(tree, action.account, action.amount)
    elif isinstance(action, Transfer):
        _apply_transfer(tree, action)
    else:
        raise TypeError(f"Unknown action {action!r}")


def _apply_new(tree: Account, action: New) -> None:
    parent = tree.find(action.parent)
    if parent is None:
        raise ParentNotFound(action.parent)
    if parent.is_leaf:
        raise NotABranch(parent.name)
    parent.add_child(Account(action.name, copy.deepcopy(action.data)), action.inflow, action.max_override)


def _apply_edit(tree: Account, action: Edit) -> None:
    parent_name, entry = tree.detach(action.name)
    data = entry.account.data
    if isinstance(data, Leaf):
        data = Leaf(data.balance, action.max)
    try:
        _apply_new(tree, New(
            name=action.name,
            parent=parent_name,
            inflow=action.inflow,
            data=data,
            max_override=action.max,
        ))
    except BudgetError:
        logger.warning(
            "Edit of '%s' removed it but could not reinsert it under '%s'",
            action.name, parent_name,
        )
        raise


def _apply_withdraw(tree: Account, name: str, amount: Amount) -> None:
    account = tree.find(name)
    if account is None:
        raise ParentNotFound(name, role='account to withdraw from')
    withdraw(account, amount)


def _apply_deposit(tree: Account, name: Optional[str], amount: Amount) -> None:
    if name is None:
        deposit(tree, amount)
        return
    account = tree.find(name)
    if account is None:
        raise ParentNotFound(name, role='account to deposit into')
    deposit(account, amount)


def _apply_transfer(tree: Account, action: Transfer) -> None:
    _apply_withdraw(tree, action.source, action.amount)
    try:
        _apply_deposit(tree, action.destination, action.amount)
    except BudgetError:
        logger.warning(
            "Transfer of %s left '%s' debited; deposit into '%s' failed",
            float(Fraction(action.amount)), action.source, action.destination or 'root',
        )
        raise
