"""Top-level package for budget_tree.

Money deposited into a tree of accounts is split among branches by
fixed and flex rules, each capped by an optional maximum.  The primary
modules are:

* ``account`` – the tree, lookup and mutation
* ``allocation`` – deposits, withdrawals and cap handling
* ``actions`` – typed ledger actions and how they apply to a tree
* ``diff`` – net change between two snapshots
* ``parser`` / ``storage`` / ``rendering`` – ledger text, JSON and text output
* ``frames`` / ``visualization`` / ``dashboard`` – pandas, Plotly and Streamlit views

To print a ledger from the command line you can execute:

```bash
python -m budget_tree data/budget.txt --as-of 3/31/2024
```
"""

from .account import Account, Branch, BranchEntry, Inflow, Leaf, new_root  # noqa: F401
from .actions import Deposit, Edit, New, Remove, Transfer, Withdraw, apply, apply_all, replay  # noqa: F401
from .allocation import at_cap, deposit, effective_cap, withdraw  # noqa: F401
from .diff import diff  # noqa: F401
from .errors import (  # noqa: F401
    AccountNotFound,
    BudgetError,
    EmptyBranch,
    InvalidWithdrawTarget,
    NotABranch,
    ParentNotFound,
    ParseError,
    StorageError,
    TypeMismatch,
)

__all__ = [
    'Account', 'Branch', 'BranchEntry', 'Inflow', 'Leaf', 'new_root',
    'Deposit', 'Edit', 'New', 'Remove', 'Transfer', 'Withdraw', 'apply', 'apply_all', 'replay',
    'at_cap', 'deposit', 'effective_cap', 'withdraw',
    'diff',
    'AccountNotFound', 'BudgetError', 'EmptyBranch', 'InvalidWithdrawTarget', 'NotABranch',
    'ParentNotFound', 'ParseError', 'StorageError', 'TypeMismatch',
]
