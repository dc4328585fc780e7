import datetime as dt
from fractions import Fraction

import pytest

from budget_tree.account import Account, Branch, Inflow, Leaf, new_root
from budget_tree.actions import (
    Deposit,
    Edit,
    New,
    Remove,
    Transfer,
    Withdraw,
    actions_as_of,
    apply,
    apply_all,
    replay,
)
from budget_tree.errors import (
    AccountNotFound,
    EmptyBranch,
    InvalidWithdrawTarget,
    NotABranch,
    ParentNotFound,
)


def _tree():
    root = new_root()
    for action in (
        New('spending', 'root', Inflow.flex(1), Branch()),
        New('food', 'spending', Inflow.fixed(20), Leaf(Fraction(0))),
        New('fun', 'spending', Inflow.flex(1), Leaf(Fraction(0))),
        New('savings', 'root', Inflow.flex(1), Leaf(Fraction(100))),
    ):
        apply(root, action)
    return root


def test_new_appends_under_parent():
    root = _tree()
    spending = root.find('spending')
    assert [entry.account.name for entry in spending.entries()] == ['food', 'fun']
    assert spending.entries()[0].inflow == Inflow.fixed(20)


def test_new_with_missing_parent_fails():
    root = _tree()
    with pytest.raises(ParentNotFound) as excinfo:
        apply(root, New('x', 'nowhere', Inflow.flex(1), Branch(), line=7))
    assert excinfo.value.name == 'nowhere'
    assert excinfo.value.line == 7
    assert 'line 7' in str(excinfo.value)


def test_new_under_leaf_fails():
    with pytest.raises(NotABranch):
        apply(_tree(), New('x', 'food', Inflow.flex(1), Branch()))


def test_new_does_not_share_payload_between_trees():
    action = New('a', 'root', Inflow.flex(1), Leaf(Fraction(0)))
    first, second = new_root(), new_root()
    apply(first, action)
    apply(second, action)
    apply(first, Deposit(Fraction(10)))
    assert second.balance() == 0


def test_remove_missing_account_fails_and_leaves_tree_unchanged():
    root = _tree()
    before = root.clone()
    with pytest.raises(AccountNotFound):
        apply(root, Remove('A'))
    assert root == before


def test_remove_detaches_subtree():
    root = _tree()
    apply(root, Remove('spending'))
    assert root.find('food') is None
    assert root.balance() == 100


def test_edit_keeps_balance_and_moves_to_end():
    root = _tree()
    apply(root, Deposit(Fraction(60), account='spending'))
    apply(root, Edit('food', Inflow.flex(2), max=Fraction(50)))

    spending = root.find('spending')
    assert [entry.account.name for entry in spending.entries()] == ['fun', 'food']
    food_entry = spending.entries()[1]
    assert food_entry.account.balance() == 20
    assert food_entry.inflow == Inflow.flex(2)
    assert food_entry.max_override == 50
    assert food_entry.account.data.maximum == 50


def test_edit_branch_keeps_children():
    root = _tree()
    apply(root, Deposit(Fraction(60), account='spending'))
    apply(root, Edit('spending', Inflow.fixed(5)))
    assert root.entries()[-1].account.name == 'spending'
    assert root.find('spending').balance() == 60
    assert root.find('fun').balance() == 40


def test_edit_missing_account_fails():
    with pytest.raises(AccountNotFound):
        apply(_tree(), Edit('nothing', Inflow.flex(1)))


def test_edit_is_not_atomic_when_reinsertion_fails():
    # the former parent's name first resolves to an earlier leaf
    root = new_root()
    apply(root, New('dup', 'root', Inflow.flex(1), Leaf(Fraction(0))))
    apply(root, New('other', 'root', Inflow.flex(1), Branch()))
    other = root.find('other')
    inner = other.add_child(Account.branch('dup'), Inflow.flex(1)).account
    inner.add_child(Account.leaf('target', 5), Inflow.flex(1))

    with pytest.raises(NotABranch):
        apply(root, Edit('target', Inflow.flex(1)))
    assert root.find('target') is None


def test_withdraw_from_leaf():
    root = _tree()
    apply(root, Withdraw('savings', Fraction(130)))
    assert root.find('savings').balance() == -30


def test_withdraw_missing_account_fails():
    with pytest.raises(ParentNotFound) as excinfo:
        apply(_tree(), Withdraw('nowhere', Fraction(1)))
    assert excinfo.value.role == 'account to withdraw from'


def test_withdraw_from_branch_fails():
    root = _tree()
    before = root.clone()
    with pytest.raises(InvalidWithdrawTarget):
        apply(root, Withdraw('spending', Fraction(1)))
    assert root == before


def test_deposit_without_account_goes_to_root():
    root = _tree()
    apply(root, Deposit(Fraction(100)))
    assert root.find('food').balance() == 20
    assert root.find('fun').balance() == 30
    assert root.find('savings').balance() == 150


def test_deposit_into_named_subtree():
    root = _tree()
    apply(root, Deposit(Fraction(50), account='spending'))
    assert root.find('food').balance() == 20
    assert root.find('fun').balance() == 30
    assert root.find('savings').balance() == 100


def test_deposit_into_missing_account_fails():
    with pytest.raises(AccountNotFound):
        apply(_tree(), Deposit(Fraction(5), account='nowhere'))


def test_transfer_moves_money_without_changing_total():
    root = _tree()
    total = root.balance()
    apply(root, Transfer('savings', Fraction(30), destination='fun'))
    assert root.find('savings').balance() == 70
    assert root.find('fun').balance() == 30
    assert root.balance() == total


def test_transfer_to_root_redistributes():
    root = _tree()
    total = root.balance()
    apply(root, Transfer('savings', Fraction(40)))
    assert root.balance() == total
    assert root.find('food').balance() == 20


def test_transfer_is_not_atomic_when_deposit_fails():
    root = _tree()
    apply(root, New('empty', 'root', Inflow.flex(1), Branch()))
    with pytest.raises(EmptyBranch):
        apply(root, Transfer('savings', Fraction(30), destination='empty'))
    assert root.find('savings').balance() == 70


def test_apply_all_fail_fast_stops_at_first_error():
    root = _tree()
    actions = [
        Deposit(Fraction(10), account='savings'),
        Withdraw('nowhere', Fraction(1), line=2),
        Deposit(Fraction(10), account='savings'),
    ]
    with pytest.raises(ParentNotFound):
        apply_all(root, actions)
    assert root.find('savings').balance() == 110


def test_apply_all_can_collect_errors():
    root = _tree()
    actions = [
        Withdraw('nowhere', Fraction(1), line=2),
        Deposit(Fraction(10), account='savings'),
        Remove('ghost', line=4),
    ]
    errors = apply_all(root, actions, fail_fast=False)
    assert [exc.line for exc in errors] == [2, 4]
    assert root.find('savings').balance() == 110


def test_replay_as_of_date():
    actions = [
        New('a', 'root', Inflow.fixed(10), Leaf(Fraction(0))),
        New('b', 'root', Inflow.flex(1), Leaf(Fraction(0))),
        Deposit(Fraction(30), date=dt.date(2024, 1, 1)),
        Deposit(Fraction(30), date=dt.date(2024, 2, 1)),
    ]
    early = replay(actions, as_of=dt.date(2024, 1, 15))
    late = replay(actions)
    assert early.find('a').balance() == 10
    assert early.find('b').balance() == 20
    assert late.find('a').balance() == 20
    assert late.find('b').balance() == 40


def test_undated_actions_follow_the_previous_date():
    actions = [
        New('a', 'root', Inflow.flex(1), Leaf(Fraction(0))),
        Deposit(Fraction(30), date=dt.date(2024, 1, 1)),
        New('b', 'root', Inflow.flex(1), Leaf(Fraction(0))),
        Deposit(Fraction(30), date=dt.date(2024, 2, 1)),
        Remove('a'),
    ]
    assert len(actions_as_of(actions, dt.date(2023, 12, 31))) == 1
    assert len(actions_as_of(actions, dt.date(2024, 1, 1))) == 3
    assert len(actions_as_of(actions, None)) == 5
    assert replay(actions, as_of=dt.date(2024, 1, 15)).find('a') is not None
