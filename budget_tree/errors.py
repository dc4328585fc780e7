"""Error kinds raised by the account tree and its collaborators."""

from __future__ import annotations

from typing import List, Optional


class BudgetError(Exception):
    """Base class for structural failures.

    ``name`` is the account the failure is about and ``line`` the ledger
    line of the action that triggered it, when known.
    """

    def __init__(self, message: str, name: Optional[str] = None, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.line = line

    def with_line(self, line: Optional[int]) -> 'BudgetError':
        if line is not None and self.line is None:
            self.line = line
        return self

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.message} (line {self.line})"
        return self.message


class AccountNotFound(BudgetError, LookupError):
    def __init__(self, name: str, role: str = 'account', line: Optional[int] = None) -> None:
        super().__init__(f"Could not find {role} '{name}'", name=name, line=line)
        self.role = role


class ParentNotFound(AccountNotFound):
    def __init__(self, name: str, role: str = 'parent account', line: Optional[int] = None) -> None:
        super().__init__(name, role=role, line=line)


class NotABranch(BudgetError, ValueError):
    def __init__(self, name: str, line: Optional[int] = None) -> None:
        super().__init__(f"Leaf account '{name}' can't have children", name=name, line=line)


class InvalidWithdrawTarget(BudgetError, ValueError):
    def __init__(self, name: str, line: Optional[int] = None) -> None:
        super().__init__(f"Can't withdraw from non-leaf account '{name}'", name=name, line=line)


class EmptyBranch(BudgetError, ValueError):
    def __init__(self, name: str, line: Optional[int] = None) -> None:
        super().__init__(f"Branch '{name}' has no leaf accounts to hold a deposit", name=name, line=line)


class TypeMismatch(BudgetError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Account '{name}' is a leaf in one tree and a branch in the other", name=name)


class ParseError(ValueError):
    """Every line-level failure found while parsing a ledger."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("\n".join(errors))
        self.errors = list(errors)


class StorageError(ValueError):
    pass
