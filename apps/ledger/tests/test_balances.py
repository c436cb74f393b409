"""
Balance calculator tests.

Everything here is pure: unsaved Transaction instances, no database.
"""

import copy
from decimal import Decimal

from apps.ledger.models import TransactionType
from apps.ledger.services import (
    Person,
    compute_balances,
    expand_common_expense,
    summarize_balances,
)

from .factories import entry


PAYMENT = TransactionType.PAYMENT


class TestComputeBalances:

    def test_personal_common_and_total(self, alice_and_bob):
        txns = [
            entry('Alice', '20.00'),
            entry('Alice', '15.50', is_common_split=True),
            entry('Bob', '7.25'),
        ]

        alice, bob = compute_balances(alice_and_bob, txns)

        assert alice.personal_expenses == Decimal('20.00')
        assert alice.common_expenses == Decimal('15.50')
        assert alice.total_owed == Decimal('35.50')
        assert bob.total_owed == Decimal('7.25')

    def test_payments_are_shown_but_not_netted(self, alice_and_bob):
        txns = [entry('Bob', '40.00'), entry('Bob', '25.00', transaction_type=PAYMENT)]

        _, bob = compute_balances(alice_and_bob, txns)

        assert bob.payments == Decimal('25.00')
        assert bob.total_owed == Decimal('40.00')

    def test_attribution_is_by_exact_name(self):
        people = [Person.owner('u1', 'Sam'), Person.guest('guest-1', 'Samantha')]

        owner, guest = compute_balances(people, [entry('Sam', '10.00'), entry('sam', '3.00')])

        assert owner.total_owed == Decimal('10.00')
        assert guest.total_owed == Decimal('0.00')

    def test_order_follows_people(self, alice_and_bob):
        balances = compute_balances(list(reversed(alice_and_bob)), [])
        assert [b.person.name for b in balances] == ['Bob', 'Alice']

    def test_pure_and_repeatable(self, alice_and_bob):
        txns = [entry('Alice', '1.10'), entry('Bob', '2.20', is_common_split=True)]
        people_before = copy.deepcopy(alice_and_bob)
        txn_state_before = [(t.spent_by, t.amount, t.is_common_split) for t in txns]

        first = compute_balances(alice_and_bob, txns)
        second = compute_balances(alice_and_bob, txns)

        assert first == second
        assert alice_and_bob == people_before
        assert [(t.spent_by, t.amount, t.is_common_split) for t in txns] == txn_state_before


class TestSummarizeBalances:

    def test_additivity_and_unmatched(self, alice_and_bob):
        txns = [
            entry('Alice', '10.00'),
            entry('Bob', '5.00', is_common_split=True),
            entry('Carol', '99.00'),
            entry('Alice', '3.00', transaction_type=PAYMENT),
        ]

        summary = summarize_balances(alice_and_bob, txns)

        for balance in summary.balances:
            assert balance.personal_expenses + balance.common_expenses == balance.total_owed

        matched_expenses = sum(
            t.amount for t in txns
            if t.transaction_type == TransactionType.EXPENSE and t.spent_by in ('Alice', 'Bob')
        )
        assert sum(b.total_owed for b in summary.balances) == matched_expenses
        assert summary.total_owed == matched_expenses
        assert summary.payments == Decimal('3.00')
        assert summary.transaction_count == 4
        assert [t.spent_by for t in summary.unmatched] == ['Carol']

    def test_totals_are_the_sum_of_the_rows(self):
        people = [Person.owner('u1', 'Sam'), Person.member('u2', 'Sam')]
        txns = [
            entry('Sam', '10.00'),
            entry('Sam', '4.00', is_common_split=True),
            entry('Sam', '2.00', transaction_type=PAYMENT),
        ]

        summary = summarize_balances(people, txns)

        assert summary.personal_expenses == sum(b.personal_expenses for b in summary.balances)
        assert summary.common_expenses == sum(b.common_expenses for b in summary.balances)
        assert summary.total_owed == sum(b.total_owed for b in summary.balances)
        assert summary.payments == sum(b.payments for b in summary.balances)
        assert summary.total_owed == Decimal('28.00')

    def test_empty_period(self, alice_and_bob):
        summary = summarize_balances(alice_and_bob, [])

        assert summary.total_owed == Decimal('0.00')
        assert summary.transaction_count == 0
        assert [b.total_owed for b in summary.balances] == [Decimal('0.00'), Decimal('0.00')]


class TestEndToEndScenario:

    def test_common_expense_of_100_between_alice_and_bob(self, alice_and_bob):
        leaves = expand_common_expense(
            total_amount=Decimal('100'),
            description='Dinner',
            day=5,
            participant_ids=['u1', 'u2'],
            people=alice_and_bob,
        )

        assert [(leaf.spent_by, leaf.amount, leaf.is_common_split) for leaf in leaves] == [
            ('Alice', Decimal('50.00'), True),
            ('Bob', Decimal('50.00'), True),
        ]

        txns = [entry(leaf.spent_by, leaf.amount, is_common_split=True) for leaf in leaves]
        summary = summarize_balances(alice_and_bob, txns)
        alice, bob = summary.balances

        assert (alice.personal_expenses, alice.common_expenses, alice.total_owed) == (
            Decimal('0'), Decimal('50.00'), Decimal('50.00')
        )
        assert (bob.personal_expenses, bob.common_expenses, bob.total_owed) == (
            Decimal('0'), Decimal('50.00'), Decimal('50.00')
        )
        assert summary.total_owed == Decimal('100.00')
