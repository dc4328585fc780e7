from fractions import Fraction

import numpy as np
import pandas as pd

from budget_tree import visualization as viz
from budget_tree.account import Account, Inflow, new_root
from budget_tree.allocation import deposit
from budget_tree.frames import FRAME_COLUMNS, leaf_frame, tree_to_frame
from budget_tree.rendering import render_tree, truncate_cents


def _tree():
    root = new_root()
    group = Account.branch('group')
    group.add_child(Account.leaf('capped', maximum=10), Inflow.flex(1))
    root.add_child(Account.leaf('A'), Inflow.fixed(10))
    root.add_child(group, Inflow.flex(1))
    root.add_child(Account.leaf('B'), Inflow.flex(Fraction(1, 2)))
    deposit(root, 40)
    return root


def test_render_tree_indents_by_level():
    root = new_root()
    root.add_child(Account.leaf('A'), Inflow.fixed(10))
    root.add_child(Account.leaf('B'), Inflow.flex(1))
    deposit(root, 30)

    assert render_tree(root) == "root:\t30.0\tFlex(1)\n\tA:\t10.0\tFixed(10)\n\tB:\t20.0\tFlex(1)"


def test_render_nested_tree():
    lines = render_tree(_tree()).split('\n')
    assert lines[2] == "\tgroup:\t10.0\tFlex(1)"
    assert lines[3] == "\t\tcapped:\t10.0\tFlex(1)"
    assert lines[4] == "\tB:\t20.0\tFlex(0.5)"


def test_truncate_cents_rounds_toward_zero():
    assert truncate_cents(Fraction(10, 3)) == 3.33
    assert truncate_cents(Fraction(-10, 3)) == -3.33
    assert truncate_cents(Fraction('2.999')) == 2.99


def test_tree_to_frame():
    frame = tree_to_frame(_tree())

    assert list(frame.columns) == FRAME_COLUMNS
    assert list(frame['Path']) == ['root', 'root/A', 'root/group', 'root/group/capped', 'root/B']
    assert list(frame['Parent']) == ['', 'root', 'root', 'group', 'root']
    assert list(frame['Depth']) == [0, 1, 1, 2, 1]
    assert frame.loc[0, 'Balance'] == 40.0

    group = frame[frame['Account'] == 'group'].iloc[0]
    assert group['Kind'] == 'branch'
    assert group['Cap'] == 10.0
    assert bool(group['At Cap'])

    b_row = frame[frame['Account'] == 'B'].iloc[0]
    assert b_row['Inflow'] == 'flex'
    assert b_row['Weight'] == 0.5
    assert np.isnan(b_row['Cap'])
    assert b_row['Balance'] == 20.0


def test_leaf_frame_headroom():
    leaves = leaf_frame(tree_to_frame(_tree()))
    assert list(leaves['Account']) == ['A', 'capped', 'B']
    headroom = dict(zip(leaves['Account'], leaves['Headroom']))
    assert headroom['capped'] == 0.0
    assert np.isinf(headroom['A'])


def test_figures_render_for_tree_and_empty_frame():
    frame = tree_to_frame(_tree())
    sunburst = viz.balance_sunburst(frame)
    bars = viz.balance_bar_chart(frame)
    assert len(sunburst.data) == 1
    assert len(bars.data) >= 2

    empty = tree_to_frame(new_root())
    assert viz.balance_sunburst(empty).layout.title.text == "No data to display"
    assert viz.balance_bar_chart(pd.DataFrame(columns=FRAME_COLUMNS)).layout.title.text == "No data to display"
