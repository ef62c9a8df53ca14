"""
Ledger reconciliation.

Pure derivations over a list of transactions: savings balances per account,
this month's income, spend and savings, the remaining budget and the category
split used by the distribution chart. Nothing here touches the database; every
figure is recomputed from the entries it is given.
"""

import calendar
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from config import LEDGER_WINDOW_MONTHS, SAVING_ACCOUNTS
from schemas import CategorySlice, LedgerEntry, LedgerSummary

# Budget usage above this percentage is flagged on the dashboard
BUDGET_WARNING_PERCENT = 90.0


def window_start(today: date, months: int = LEDGER_WINDOW_MONTHS) -> date:
    """Same day ``months`` calendar months before ``today``, clamped to month end."""
    index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def in_month(day: date, today: date) -> bool:
    return day.year == today.year and day.month == today.month


def bank_balances(entries: Iterable[LedgerEntry], accounts: Sequence[str] = SAVING_ACCOUNTS) -> Dict[str, float]:
    """Running balance per savings account. Balances may go negative."""
    balances = {account: 0.0 for account in accounts}
    for entry in entries:
        if entry.type != "saving":
            continue
        amount = -entry.amount if entry.operation == "deduct" else entry.amount
        balances[entry.category] = balances.get(entry.category, 0.0) + amount
    return balances


def monthly_income(entries: Iterable[LedgerEntry], today: date) -> float:
    # first income entry of the month wins; later ones are not added
    for entry in entries:
        if entry.type == "income" and in_month(entry.date, today):
            return entry.amount
    return 0.0


def month_expenses(entries: Iterable[LedgerEntry], today: date) -> float:
    return sum(e.amount for e in entries if e.type == "expense" and in_month(e.date, today))


def month_savings(entries: Iterable[LedgerEntry], today: date) -> float:
    return sum(
        e.amount for e in entries
        if e.type == "saving" and e.operation == "add" and in_month(e.date, today)
    )


def remaining_budget(income: float, expenses: float, savings: float) -> float:
    return income - (expenses + savings)


def budget_usage(income: float, spent: float) -> Optional[float]:
    """Percentage of income already spent, or None when there is no income."""
    if income <= 0:
        return None
    return spent * 100 / income


def category_distribution(entries: Iterable[LedgerEntry]) -> List[CategorySlice]:
    """
    Sum amounts per chart bucket, keeping first-seen order.

    Expenses bucket by category; savings deposits bucket as
    "<account> (Saving)". Withdrawals and income are not charted.
    """
    buckets: Dict[str, CategorySlice] = {}
    for entry in entries:
        if entry.type == "expense":
            name = entry.category
        elif entry.type == "saving" and entry.operation == "add":
            name = f"{entry.category} (Saving)"
        else:
            continue
        bucket = buckets.get(name)
        if bucket is None:
            buckets[name] = CategorySlice(name=name, value=entry.amount, type=entry.type)
        else:
            bucket.value += entry.amount
    return list(buckets.values())


def summarize(
    entries: Iterable[LedgerEntry],
    today: Optional[date] = None,
    accounts: Sequence[str] = SAVING_ACCOUNTS,
) -> LedgerSummary:
    today = today or date.today()
    entries = list(entries)

    income = monthly_income(entries, today)
    expenses = month_expenses(entries, today)
    savings = month_savings(entries, today)
    usage = budget_usage(income, expenses + savings)

    return LedgerSummary(
        balances=bank_balances(entries, accounts),
        monthly_income=income,
        current_month_expenses=expenses,
        current_month_savings=savings,
        remaining_budget=remaining_budget(income, expenses, savings),
        budget_usage=usage,
        over_budget_warning=usage is not None and usage > BUDGET_WARNING_PERCENT,
        distribution=category_distribution(entries),
    )


def admits(entry: LedgerEntry, summary: LedgerSummary) -> bool:
    """
    Advisory budget check run before a transaction is submitted.

    Income is always admitted, as are savings withdrawals since they return
    money saved earlier. Anything else must fit in the remaining budget.
    The store itself accepts over-budget transactions.
    """
    if entry.type == "income":
        return True
    if entry.type == "saving" and entry.operation == "deduct":
        return True
    return entry.amount <= summary.remaining_budget
