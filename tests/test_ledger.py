from datetime import date

import pytest

from ledger import (
    admits,
    bank_balances,
    budget_usage,
    category_distribution,
    month_expenses,
    month_savings,
    monthly_income,
    remaining_budget,
    summarize,
    window_start,
)
from schemas import Expense, Income, Saving

TODAY = date(2026, 10, 19)
LAST_MONTH = date(2026, 9, 30)


def expense(amount, category="food", day=TODAY):
    return Expense(type="expense", amount=amount, category=category, date=day)


def saving(amount, operation, account="SIB", day=TODAY):
    return Saving(type="saving", amount=amount, category=account, operation=operation, date=day)


def income(amount, day=TODAY):
    return Income(type="income", amount=amount, category="salary", date=day)


def test_balances_are_adds_minus_deducts_per_account():
    entries = [
        saving(5000, "add", "SIB"),
        saving(2000, "deduct", "SIB"),
        saving(300, "add", "KSFE", day=LAST_MONTH),
        expense(999),
    ]
    assert bank_balances(entries) == {"SIB": 3000, "KSFE": 300}


def test_untouched_accounts_report_zero():
    assert bank_balances([expense(10)]) == {"SIB": 0, "KSFE": 0}


def test_balances_may_go_negative():
    assert bank_balances([saving(500, "deduct", "KSFE")])["KSFE"] == -500


def test_balances_track_accounts_outside_configured_set():
    assert bank_balances([saving(10, "add", "SIB")], accounts=("KSFE",)) == {"KSFE": 0, "SIB": 10}


def test_monthly_income_takes_first_match_only():
    entries = [income(1000), income(2000)]
    assert monthly_income(entries, TODAY) == 1000


def test_monthly_income_ignores_other_months():
    assert monthly_income([income(4000, day=LAST_MONTH)], TODAY) == 0
    assert monthly_income([income(4000, day=date(2025, 10, 1))], TODAY) == 0


def test_month_totals_only_count_current_month():
    entries = [
        expense(100),
        expense(40, day=LAST_MONTH),
        saving(500, "add"),
        saving(200, "deduct"),
        saving(70, "add", day=LAST_MONTH),
    ]
    assert month_expenses(entries, TODAY) == 100
    assert month_savings(entries, TODAY) == 500


def test_remaining_budget_can_be_negative():
    assert remaining_budget(1000, 800, 400) == -200


def test_budget_usage():
    assert budget_usage(0, 100) is None
    assert budget_usage(200, 50) == 25


def test_distribution_buckets_in_first_seen_order():
    entries = [
        expense(100, "rent"),
        saving(500, "add", "SIB"),
        expense(20, "food"),
        saving(50, "deduct", "SIB"),
        income(9000),
        expense(30, "rent"),
        saving(25, "add", "SIB"),
    ]
    slices = category_distribution(entries)
    assert [(s.name, s.value, s.type) for s in slices] == [
        ("rent", 130, "expense"),
        ("SIB (Saving)", 525, "saving"),
        ("food", 20, "expense"),
    ]


def test_budget_scenario():
    summary = summarize([income(50000), expense(10000)], today=TODAY)
    assert summary.remaining_budget == 40000

    assert not admits(expense(45000), summary)
    assert admits(expense(40000), summary)


def test_savings_scenario():
    summary = summarize([saving(5000, "add", "SIB"), saving(2000, "deduct", "SIB")], today=TODAY)
    assert summary.balances["SIB"] == 3000
    assert summary.current_month_savings == 5000


def test_two_incomes_report_the_first():
    summary = summarize([income(1000), income(2000)], today=TODAY)
    assert summary.monthly_income == 1000


def test_summary_remaining_budget_identity():
    entries = [income(1000), expense(700), saving(600, "add"), saving(100, "deduct")]
    summary = summarize(entries, today=TODAY)
    assert summary.remaining_budget == summary.monthly_income - (
        summary.current_month_expenses + summary.current_month_savings
    )
    assert summary.remaining_budget == -300
    assert summary.over_budget_warning is True


def test_admission_exempts_income_and_withdrawals():
    summary = summarize([], today=TODAY)
    assert summary.remaining_budget == 0

    assert admits(income(100000), summary)
    assert admits(saving(5000, "deduct"), summary)
    assert not admits(saving(5000, "add"), summary)
    assert not admits(expense(1), summary)


@pytest.mark.parametrize(
    "today, months, expected",
    [
        (date(2026, 10, 19), 6, date(2026, 4, 19)),
        (date(2026, 3, 15), 6, date(2025, 9, 15)),
        (date(2026, 8, 31), 6, date(2026, 2, 28)),
        (date(2024, 8, 31), 6, date(2024, 2, 29)),
        (date(2026, 1, 1), 1, date(2025, 12, 1)),
    ],
)
def test_window_start(today, months, expected):
    assert window_start(today, months) == expected
