import random

from models import Balance
from settlement import (
    calculate_balances,
    calculate_settlement,
    calculate_totals,
    resolve_payments,
    summary_lines,
)


def balances_of(*amounts):
    return [Balance(contributor=i, amount=a) for i, a in enumerate(amounts)]


def pairs(payments):
    return [(p.payer, p.receiver, p.amount) for p in payments]


def test_two_people_one_item(make_bill):
    bill = make_bill(["Alice", "Bob"], [(1000, 0, [1, 1])])
    settlement = calculate_settlement(bill)

    assert settlement.totals.total_paid == {0: 1000}
    assert settlement.totals.total_owing == {0: 500, 1: 500}
    assert settlement.totals.total_cost == 1000
    assert [b.amount for b in settlement.balances] == [500, -500]
    assert pairs(settlement.payments) == [(1, 0, 500)]
    assert settlement.unaccounted == []


def test_remainder_is_never_lost_or_invented(make_bill):
    bill = make_bill(["Alice", "Bob"], [(1001, 0, [1, 1])])
    totals = calculate_totals(bill)

    assert totals.item_owing[0] == {0: 501, 1: 500}
    assert sum(totals.total_owing.values()) == 1001


def test_remainder_alternates_between_items(make_bill):
    bill = make_bill(["Alice", "Bob"], [(1001, 0, [1, 1]), (1001, 1, [1, 1])])
    totals = calculate_totals(bill)

    assert totals.item_owing[0] == {0: 501, 1: 500}
    assert totals.item_owing[1] == {0: 500, 1: 501}
    assert totals.total_owing == {0: 1001, 1: 1001}


def test_voided_item_is_excluded(make_bill):
    bill = make_bill(["Alice", "Bob"], [
        (1001, 0, [1, 1]),
        (5000, 1, [0, 0]),
        (1001, 0, [1, 1]),
    ])
    totals = calculate_totals(bill)

    assert totals.voided == [1]
    assert totals.total_cost == 2002
    assert totals.total_paid == {0: 2002}
    assert 1 not in totals.item_owing
    # the voided item does not count towards alternation
    assert totals.item_owing[2] == {0: 500, 1: 501}


def test_zero_cost_item_with_split_is_counted(make_bill):
    bill = make_bill(["Alice", "Bob"], [(0, 1, [1, 1])])
    totals = calculate_totals(bill)

    assert totals.voided == []
    assert totals.total_paid == {1: 0}
    assert totals.item_owing[0] == {0: 0, 1: 0}


def test_balances_cover_every_contributor(make_bill):
    bill = make_bill(["Alice", "Bob", "Carol"], [(900, 0, [1, 1, 0])])
    balances = calculate_balances(bill)

    assert [(b.contributor, b.amount) for b in balances] == [(0, 450), (1, -450), (2, 0)]


def test_largest_debtor_pays_first():
    payments, unaccounted = resolve_payments(balances_of(600, -100, -500))

    assert pairs(payments) == [(2, 0, 500), (1, 0, 100)]
    assert unaccounted == []


def test_ties_resolved_by_contributor_order():
    payments, _ = resolve_payments(balances_of(100, -50, -50))
    assert pairs(payments) == [(2, 0, 50), (1, 0, 50)]


def test_creditors_served_largest_first():
    payments, _ = resolve_payments(balances_of(300, -400, 100))
    assert pairs(payments) == [(1, 0, 300), (1, 2, 100)]


def test_creditor_shortfall_is_unaccounted():
    payments, unaccounted = resolve_payments(balances_of(100, -60))

    assert pairs(payments) == [(1, 0, 60)]
    assert [(u.contributor, u.amount) for u in unaccounted] == [(0, 40)]


def test_leftover_debt_is_unaccounted():
    payments, unaccounted = resolve_payments(balances_of(10, -30))

    assert pairs(payments) == [(1, 0, 10)]
    assert [(u.contributor, u.amount) for u in unaccounted] == [(1, -20)]


def test_input_balances_untouched():
    balances = balances_of(600, -100, -500)
    resolve_payments(balances)
    assert [b.amount for b in balances] == [600, -100, -500]


def test_random_bills_settle_to_zero(make_bill):
    rng = random.Random(42)
    for _ in range(200):
        count = rng.randint(1, 6)
        items = [
            (rng.randint(0, 50000), rng.randrange(count), [rng.randint(0, 4) for _ in range(count)])
            for _ in range(rng.randint(0, 10))
        ]
        bill = make_bill([f"p{i}" for i in range(count)], items)
        settlement = calculate_settlement(bill)
        totals = settlement.totals

        assert sum(totals.total_owing.values()) == totals.total_cost
        assert sum(totals.total_paid.values()) == totals.total_cost
        assert settlement.unaccounted == []
        assert len(settlement.payments) <= max(0, count - 1)

        remaining = {b.contributor: b.amount for b in settlement.balances}
        for payment in settlement.payments:
            assert payment.amount > 0
            remaining[payment.payer] += payment.amount
            remaining[payment.receiver] -= payment.amount
        assert all(amount == 0 for amount in remaining.values())

        assert calculate_settlement(bill).model_dump() == settlement.model_dump()


def test_calculation_does_not_mutate_bill(make_bill):
    bill = make_bill(["Alice", "Bob"], [(1001, 0, [1, 1]), (1001, 0, [2, 1])])
    snapshot = bill.model_dump()
    calculate_settlement(bill)
    assert bill.model_dump() == snapshot


def test_summary_lines(make_bill, cad):
    bill = make_bill(["Alice", "Bob"], [(1000, 0, [1, 1])])
    settlement = calculate_settlement(bill)

    assert summary_lines(bill, settlement, "en-CA", cad) == ["Bob pays Alice $5.00"]


def test_summary_lines_report_unaccounted(make_bill, cad):
    bill = make_bill(["Alice", "Bob"], [])
    settlement = calculate_settlement(bill)
    payments, unaccounted = resolve_payments(balances_of(100, -60))
    settlement.payments = payments
    settlement.unaccounted = unaccounted

    assert summary_lines(bill, settlement, "en-CA", cad) == [
        "Bob pays Alice $0.60",
        "Alice has $0.40 unaccounted for",
    ]
