"""Streamlit app for browsing a budget ledger.

Pick a ledger file, a date to view the tree as of, and optionally the
start of a period to see the net change over it.  To run the dashboard
from the command line::

    streamlit run budget_tree/dashboard.py

or use ``run_dashboard.py`` in the project root.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import streamlit as st

# Support both ``streamlit run budget_tree/dashboard.py`` and package imports.
if __package__:
    from . import config
    from . import visualization as viz
    from .account import Account, new_root
    from .actions import Action, actions_as_of, apply_all, replay
    from .diff import diff
    from .errors import BudgetError, ParseError
    from .frames import leaf_frame, tree_to_frame
    from .parser import parse
    from .rendering import render_tree
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from budget_tree import config  # type: ignore
    from budget_tree import visualization as viz  # type: ignore
    from budget_tree.account import Account, new_root  # type: ignore
    from budget_tree.actions import Action, actions_as_of, apply_all, replay  # type: ignore
    from budget_tree.diff import diff  # type: ignore
    from budget_tree.errors import BudgetError, ParseError  # type: ignore
    from budget_tree.frames import leaf_frame, tree_to_frame  # type: ignore
    from budget_tree.parser import parse  # type: ignore
    from budget_tree.rendering import render_tree  # type: ignore

logger = logging.getLogger(__name__)


def ledger_dates(actions: List[Action]) -> Tuple[Optional[dt.date], Optional[dt.date]]:
    """First and last dated action in the ledger."""
    dates = [action.date for action in actions if action.date is not None]
    if not dates:
        return None, None
    return min(dates), max(dates)


def build_views(
    actions: List[Action],
    as_of: Optional[dt.date],
    since: Optional[dt.date] = None,
) -> Tuple[Account, Optional[Account], List[BudgetError]]:
    """Replay the ledger as of ``as_of`` and, with ``since``, the change over the period.

    Failing actions are skipped and returned so the page can list them.
    When the two trees cannot be compared the change is ``None`` and the
    reason is the last error.
    """
    tree = new_root()
    errors = apply_all(tree, actions_as_of(actions, as_of), fail_fast=False)
    change = None
    if since is not None:
        start = replay(actions, as_of=since, fail_fast=False)
        try:
            change = diff(start, tree)
        except BudgetError as exc:
            logger.warning("Could not compare %s with %s: %s", since, as_of, exc)
            errors.append(exc)
    return tree, change, errors


def load_actions(path: Path) -> List[Action]:
    """Read and parse a ledger, reporting failures on the page."""
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:  # pragma: no cover - UI display only
        st.error(f"Failed to read ledger: {exc}")
        return []
    try:
        return parse(text)
    except ParseError as exc:
        st.error("The ledger has errors:\n\n" + "\n\n".join(exc.errors))
        return []


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Budget Tree", layout="wide", initial_sidebar_state="expanded")
    st.title("Budget Tree")

    st.sidebar.header("Ledger")
    ledger_path = Path(st.sidebar.text_input("Ledger file", value=str(config.LEDGER_PATH)))
    if not ledger_path.exists():
        st.info(f"No ledger found at {ledger_path}.")
        st.stop()

    actions = load_actions(ledger_path)
    if not actions:
        st.warning("The ledger contains no actions.")
        st.stop()

    first, last = ledger_dates(actions)
    as_of = last
    since = None
    if last is not None:
        as_of = st.sidebar.date_input("As of", value=last, min_value=first, max_value=last)
        if st.sidebar.checkbox("Show change over a period"):
            since = st.sidebar.date_input("Period start", value=first, min_value=first, max_value=as_of)

    tree, change, errors = build_views(actions, as_of, since)
    for exc in errors:
        st.warning(str(exc))

    frame = tree_to_frame(tree)
    st.metric("Total balance", f"${float(tree.balance()):,.2f}")

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(viz.balance_sunburst(frame), use_container_width=True)
    with col2:
        st.plotly_chart(viz.balance_bar_chart(frame), use_container_width=True)

    st.subheader("Accounts")
    st.dataframe(frame, use_container_width=True)

    with st.expander("Leaf headroom"):
        st.dataframe(leaf_frame(frame), use_container_width=True)

    with st.expander("Tree"):
        st.code(render_tree(tree), language=None)

    if change is not None:
        st.subheader(f"Change from {since:%m/%d/%Y} to {as_of:%m/%d/%Y}")
        change_frame = tree_to_frame(change)
        st.dataframe(change_frame[['Path', 'Kind', 'Balance']], use_container_width=True)
        st.caption("Accounts removed during the period are not listed.")
    elif since is not None:
        st.error(f"Cannot show the change from {since:%m/%d/%Y}: {errors[-1]}")


if __name__ == "__main__":
    main()
