"""Parser for the line-oriented budget ledger.

One command per line; ``#`` starts a comment and blank lines are
ignored::

    add root > savings 1 flex
    add savings > emergency 200 fixed with 0 max 5000
    add root > fun 1 flex with 0
    edit fun 2 flex max 300
    + 2500 on 1/15/2024
    + 40 to fun on 1/20/2024
    - 12.50 from fun on 1/21/2024
    transfer 100 from emergency to fun on 2/1/2024
    remove fun

Every line is parsed before failing, so one :class:`ParseError` reports
all bad lines at once.
"""

from __future__ import annotations

import datetime as dt
import re
from fractions import Fraction
from typing import Iterator, List, Optional, Tuple

from .account import Amount, Branch, Inflow, Leaf
from .actions import Action, Deposit, Edit, New, Remove, Transfer, Withdraw
from .config import DATE_FORMAT
from .errors import ParseError

_COMMENT = re.compile(r'#.*$')


class _Tokens:
    """Whitespace-separated tokens of one ledger line."""

    def __init__(self, line_number: int, text: str) -> None:
        self.line_number = line_number
        self._tokens: Iterator[str] = iter(text.split())

    def next(self) -> str:
        token = next(self._tokens, None)
        if token is None:
            raise ValueError(f"Unexpected end of command at line {self.line_number}")
        return token

    def optional(self) -> Optional[str]:
        return next(self._tokens, None)

    def expect(self, expected: str) -> None:
        token = self.next()
        if token != expected:
            raise ValueError(f"Expected token {expected} at line {self.line_number}, found {token}")

    def amount(self) -> Amount:
        token = self.next()
        try:
            return Fraction(token)
        except (ValueError, ZeroDivisionError):
            raise ValueError(f"Expected a number at line {self.line_number}, found {token}") from None

    def date(self) -> dt.date:
        token = self.next()
        try:
            return dt.datetime.strptime(token, DATE_FORMAT).date()
        except ValueError:
            raise ValueError(f"Expected a month/day/year date at line {self.line_number}, found {token}") from None

    def inflow(self) -> Inflow:
        amount = self.amount()
        kind = self.next()
        if kind == 'flex':
            return Inflow.flex(amount)
        if kind == 'fixed':
            return Inflow.fixed(amount)
        raise ValueError(f"Expected either 'flex' or 'fixed', found {kind} at line {self.line_number}")

    def max(self, token: Optional[str] = None) -> Optional[Amount]:
        """An optional trailing ``max <amount>``."""
        token = self.optional() if token is None else token
        if token is None:
            return None
        if token != 'max':
            raise ValueError(
                f"Expected either 'max value' or end-of-line, found {token} at line {self.line_number}"
            )
        value = self.amount()
        self.end()
        return value

    def end(self) -> None:
        extra = self.optional()
        if extra is not None:
            raise ValueError(f"Unexpected token {extra} at line {self.line_number}")


def parse(text: str) -> List[Action]:
    """Parse a whole ledger into actions, in file order."""
    actions: List[Action] = []
    errors: List[str] = []
    for number, line in _lines(text):
        try:
            actions.append(parse_line(number, line))
        except ValueError as exc:
            errors.append(str(exc))
    if errors:
        raise ParseError(errors)
    return actions


def parse_line(number: int, line: str) -> Action:
    tokens = _Tokens(number, line)
    command = tokens.next()
    handler = _COMMANDS.get(command)
    if handler is None:
        raise ValueError(f"Failed to parse command at line {number}: unexpected command {command}")
    return handler(tokens)


def _lines(text: str) -> Iterator[Tuple[int, str]]:
    for number, raw in enumerate(text.splitlines(), start=1):
        line = _COMMENT.sub('', raw).strip()
        if line:
            yield number, line


def _parse_new(tokens: _Tokens) -> New:
    parent = tokens.next()
    tokens.expect('>')
    name = tokens.next()
    inflow = tokens.inflow()
    token = tokens.optional()
    if token == 'with':
        balance = tokens.amount()
        data = Leaf(balance, tokens.max())
        max_override = None
    else:
        data = Branch()
        max_override = tokens.max(token)
    return New(name=name, parent=parent, inflow=inflow, data=data, max_override=max_override, line=tokens.line_number)


def _parse_remove(tokens: _Tokens) -> Remove:
    name = tokens.next()
    tokens.end()
    return Remove(name=name, line=tokens.line_number)


def _parse_edit(tokens: _Tokens) -> Edit:
    name = tokens.next()
    inflow = tokens.inflow()
    return Edit(name=name, inflow=inflow, max=tokens.max(), line=tokens.line_number)


def _parse_withdraw(tokens: _Tokens) -> Withdraw:
    amount = tokens.amount()
    tokens.expect('from')
    account = tokens.next()
    tokens.expect('on')
    date = tokens.date()
    tokens.end()
    return Withdraw(account=account, amount=amount, date=date, line=tokens.line_number)


def _parse_deposit(tokens: _Tokens) -> Deposit:
    amount = tokens.amount()
    account, date = _destination_and_date(tokens)
    return Deposit(amount=amount, account=account, date=date, line=tokens.line_number)


def _parse_transfer(tokens: _Tokens) -> Transfer:
    amount = tokens.amount()
    tokens.expect('from')
    source = tokens.next()
    destination, date = _destination_and_date(tokens)
    return Transfer(source=source, amount=amount, destination=destination, date=date, line=tokens.line_number)


def _destination_and_date(tokens: _Tokens) -> Tuple[Optional[str], dt.date]:
    token = tokens.next()
    if token == 'to':
        account = tokens.next()
        tokens.expect('on')
    elif token == 'on':
        account = None
    else:
        raise ValueError(f"Expected either 'to' or 'on', found {token} at line {tokens.line_number}")
    date = tokens.date()
    tokens.end()
    return account, date


_COMMANDS = {
    'add': _parse_new,
    'remove': _parse_remove,
    'edit': _parse_edit,
    '-': _parse_withdraw,
    '+': _parse_deposit,
    'transfer': _parse_transfer,
}
