"""Configuration for budget_tree.

Paths and numeric settings live here, each with an environment variable
override.
"""

from __future__ import annotations

import os
from fractions import Fraction
from pathlib import Path

# Base project root - assumes this file is in budget_tree/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("BUDGET_TREE_DATA_DIR", _PROJECT_ROOT / "data"))

# Ledger of actions and the serialized tree
LEDGER_PATH = Path(
    os.getenv("BUDGET_TREE_LEDGER", DATA_DIR / "budget.txt")
).resolve()
TREE_PATH = Path(
    os.getenv("BUDGET_TREE_TREE_PATH", DATA_DIR / "tree.json")
).resolve()

# Remainders at or below this are treated as fully allocated (0.01 of a cent)
EPSILON = Fraction(os.getenv("BUDGET_TREE_EPSILON", "0.0001"))

LOG_LEVEL = os.getenv("BUDGET_TREE_LOG_LEVEL", "WARNING").upper()

# Ledger dates are month/day/year
DATE_FORMAT = "%m/%d/%Y"

ROOT_NAME = "root"


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
