"""The account tree.

An :class:`Account` is either a :class:`Leaf`, which holds a balance
directly, or a :class:`Branch`, whose balance is always the sum of its
children.  A branch owns an ordered list of :class:`BranchEntry` values,
each pairing a child account with the :class:`Inflow` rule that decides
how much of a deposit it receives and an optional cap override.

Lookup is by name.  Names need not be unique: the first match of a
depth-first walk (self first, then each child subtree in sibling order)
wins.  Handles into the tree are index paths resolved from the root, so
a handle never outlives a mutation by accident.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Iterator, List, Optional, Tuple, Union

from .config import ROOT_NAME
from .errors import AccountNotFound, NotABranch

Amount = Fraction
Path = Tuple[int, ...]

FIXED = 'fixed'
FLEX = 'flex'


@dataclass(frozen=True)
class Inflow:
    """How a branch hands a deposit to one child.

    ``fixed`` takes a flat amount first; ``flex`` takes a share of what
    remains, proportional to its weight.
    """

    kind: str
    value: Amount

    @classmethod
    def fixed(cls, amount) -> 'Inflow':
        return cls(FIXED, Fraction(amount))

    @classmethod
    def flex(cls, weight) -> 'Inflow':
        return cls(FLEX, Fraction(weight))

    @property
    def is_fixed(self) -> bool:
        return self.kind == FIXED

    @property
    def is_flex(self) -> bool:
        return self.kind == FLEX

    @property
    def flex_weight(self) -> Amount:
        return self.value if self.is_flex else Fraction(0)

    def label(self) -> str:
        return f"{self.kind.capitalize()}({_plain(self.value)})"


@dataclass
class Leaf:
    balance: Amount = Fraction(0)
    maximum: Optional[Amount] = None


@dataclass
class Branch:
    children: List['BranchEntry'] = field(default_factory=list)


@dataclass
class Account:
    name: str
    data: Union[Leaf, Branch]

    @classmethod
    def leaf(cls, name: str, balance=0, maximum=None) -> 'Account':
        return cls(name, Leaf(Fraction(balance), _optional_amount(maximum)))

    @classmethod
    def branch(cls, name: str) -> 'Account':
        return cls(name, Branch())

    @property
    def is_leaf(self) -> bool:
        return isinstance(self.data, Leaf)

    def entries(self) -> List['BranchEntry']:
        """Child entries of a branch; a leaf has none."""
        if isinstance(self.data, Branch):
            return self.data.children
        return []

    def balance(self) -> Amount:
        if isinstance(self.data, Leaf):
            return self.data.balance
        return sum((entry.account.balance() for entry in self.data.children), Fraction(0))

    # Lookup ---------------------------------------------------------------

    def find_path(self, name: str) -> Optional[Path]:
        """Index path to the first account called ``name``, or ``None``.

        The empty path means this account itself matched.
        """
        if self.name == name:
            return ()
        for index, entry in enumerate(self.entries()):
            sub_path = entry.account.find_path(name)
            if sub_path is not None:
                return (index,) + sub_path
        return None

    def resolve(self, path: Path) -> 'Account':
        node = self
        for index in path:
            node = node.entries()[index].account
        return node

    def find(self, name: str) -> Optional['Account']:
        path = self.find_path(name)
        if path is None:
            return None
        return self.resolve(path)

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, Optional['BranchEntry'], 'Account']]:
        """Yield ``(depth, entry, account)`` depth-first; the start has no entry."""
        yield depth, None, self
        for entry in self.entries():
            yield from entry._walk(depth + 1)

    def _descendant_paths(self, prefix: Path = ()) -> Iterator[Path]:
        for index, entry in enumerate(self.entries()):
            path = prefix + (index,)
            yield path
            yield from entry.account._descendant_paths(path)

    # Mutation ---------------------------------------------------------------

    def add_child(self, account: 'Account', inflow: Inflow, max_override=None) -> 'BranchEntry':
        if not isinstance(self.data, Branch):
            raise NotABranch(self.name)
        entry = BranchEntry(account, inflow, _optional_amount(max_override))
        self.data.children.append(entry)
        return entry

    def remove(self, name: str) -> str:
        """Detach the first account called ``name`` below this one.

        Returns the name of the branch it was removed from.  This account
        itself is never a candidate.
        """
        parent_name, _ = self.detach(name)
        return parent_name

    def detach(self, name: str) -> Tuple[str, 'BranchEntry']:
        """Like :meth:`remove`, but also hand back the removed entry."""
        for path in self._descendant_paths():
            if self.resolve(path).name == name:
                parent = self.resolve(path[:-1])
                entry = parent.entries().pop(path[-1])
                return parent.name, entry
        raise AccountNotFound(name)

    def clone(self) -> 'Account':
        return copy.deepcopy(self)


@dataclass
class BranchEntry:
    account: Account
    inflow: Inflow
    max_override: Optional[Amount] = None

    def _walk(self, depth: int) -> Iterator[Tuple[int, Optional['BranchEntry'], Account]]:
        yield depth, self, self.account
        for child in self.account.entries():
            yield from child._walk(depth + 1)


def new_root() -> Account:
    return Account.branch(ROOT_NAME)


def _optional_amount(value) -> Optional[Amount]:
    if value is None:
        return None
    return Fraction(value)


def _plain(value: Amount) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return f"{float(value):g}"
