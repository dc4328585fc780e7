"""Plotly figures for account trees.

Each function takes the DataFrame produced by
:func:`budget_tree.frames.tree_to_frame` and returns a
``plotly.graph_objects.Figure`` that Streamlit can render with
``st.plotly_chart``.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def balance_sunburst(frame: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Sunburst of leaf balances nested by branch.

    Negative balances cannot be drawn as wedges, so only positive leaves
    are shown.
    """
    leaves = frame[(frame['Kind'] == 'leaf') & (frame['Balance'] > 0)]
    if leaves.empty:
        return _empty_figure()
    fig = go.Figure(go.Sunburst(
        ids=frame['Path'],
        labels=frame['Account'],
        parents=[path.rsplit('/', 1)[0] if '/' in path else '' for path in frame['Path']],
        values=frame['Balance'].clip(lower=0).where(frame['Kind'] == 'leaf', 0),
        branchvalues='remainder',
    ))
    fig.update_layout(title=title or "Balances by account", margin=dict(t=40, l=0, r=0, b=0))
    return fig


def balance_bar_chart(frame: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal bars of leaf balances, with caps overlaid where set."""
    leaves = frame[frame['Kind'] == 'leaf']
    if leaves.empty:
        return _empty_figure()
    fig = px.bar(leaves, x='Balance', y='Path', orientation='h', color='At Cap')
    capped = leaves[leaves['Cap'].notna()]
    if not capped.empty:
        fig.add_trace(go.Scatter(
            x=capped['Cap'],
            y=capped['Path'],
            mode='markers',
            marker=dict(symbol='line-ns-open', size=18),
            name='Cap',
        ))
    fig.update_layout(
        title=title or "Leaf balances",
        xaxis_title="Balance",
        yaxis_title="Account",
    )
    return fig
