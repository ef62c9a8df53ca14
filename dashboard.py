"""
Dashboard client for the ledger API.

Mirrors what the browser dashboard does: fetch the windowed transaction list
and the monthly stats, derive balances and budget figures locally, check new
transactions against the remaining budget before posting them, and re-fetch
after every change. Request failures are logged and otherwise ignored, so the
dashboard keeps showing the last figures it managed to load.
"""

from datetime import date
from typing import List, Optional, Sequence, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from config import API_URL, SAVING_ACCOUNTS
from ledger import admits, summarize
from logger import get_logger
from schemas import Expense, Income, LedgerSummary, Saving, StatsRow, TransactionOut, draft_adapter

log = get_logger("dashboard")

_transactions = TypeAdapter(List[TransactionOut])
_stats = TypeAdapter(List[StatsRow])


class Dashboard:
    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        accounts: Sequence[str] = SAVING_ACCOUNTS,
        today: Optional[date] = None,
    ):
        self.http = http or httpx.Client(base_url=API_URL, timeout=10.0)
        self.accounts = tuple(accounts)
        self._today = today
        self.expenses: List[TransactionOut] = []
        self.stats: List[StatsRow] = []
        self.summary: LedgerSummary = summarize([], today=self.today, accounts=self.accounts)
        self.loaded = False

    @property
    def today(self) -> date:
        return self._today or date.today()

    def refresh(self) -> bool:
        """Reload transactions and stats; returns False if the list could not be fetched."""
        try:
            response = self.http.get("/api/expenses")
            response.raise_for_status()
            self.expenses = _transactions.validate_python(response.json())
        except (httpx.HTTPError, ValidationError) as e:
            log.error(f"Error fetching expenses: {e}")
            return False
        self.summary = summarize(self.expenses, today=self.today, accounts=self.accounts)
        self.loaded = True

        try:
            response = self.http.get("/api/expenses/stats")
            response.raise_for_status()
            self.stats = _stats.validate_python(response.json())
        except (httpx.HTTPError, ValidationError) as e:
            log.error(f"Error fetching stats: {e}")
        return True

    def add_transaction(self, draft: Union[Expense, Saving, Income, dict]) -> bool:
        """Post a new transaction unless it would overrun the monthly budget."""
        try:
            entry = draft_adapter.validate_python(draft) if isinstance(draft, dict) else draft
        except ValidationError as e:
            log.error(f"Invalid transaction: {e}")
            return False

        # the budget gate needs the server figures at least once
        if not self.loaded:
            self.refresh()
        if not admits(entry, self.summary):
            log.warning(
                f"Transaction amount {entry.amount} exceeds remaining monthly budget "
                f"{self.summary.remaining_budget}"
            )
            return False

        try:
            response = self.http.post(
                "/api/expenses",
                json=entry.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"Error adding expense: {e}")
            return False
        self.refresh()
        return True

    def delete_transaction(self, tx_id: str) -> bool:
        try:
            response = self.http.delete(f"/api/expenses/{tx_id}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"Error deleting expense: {e}")
            return False
        self.refresh()
        return True

    def categories(self) -> List[str]:
        return list(dict.fromkeys(e.category for e in self.expenses))

    def filter(self, type: Optional[str] = None, category: Optional[str] = None) -> List[TransactionOut]:
        return [
            e for e in self.expenses
            if (type is None or e.type == type) and (category is None or e.category == category)
        ]

    def close(self) -> None:
        self.http.close()
