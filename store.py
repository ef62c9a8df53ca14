"""
Ledger store: CRUD and the monthly grouped sum over the transactions table.

Every operation commits on its own. SQLAlchemy failures are logged and
surfaced as ``StoreFailure``; nothing is retried.
"""

from datetime import date
from typing import List, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import extract, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from database import TransactionModel, new_id
from errors import NotFound, StoreFailure, ValidationError, describe_validation_errors
from logger import get_logger
from schemas import Expense, Income, Saving, StatsKey, StatsRow, draft_adapter

log = get_logger("store")

Draft = Union[Expense, Saving, Income]


def as_draft(payload: Union[Draft, dict]) -> Draft:
    if isinstance(payload, (Expense, Saving, Income)):
        return payload
    try:
        return draft_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_errors(e.errors())) from e


def _columns(draft: Draft) -> dict:
    # every mutable column, so an update clears fields the new variant lacks
    return {
        "type": draft.type,
        "amount": draft.amount,
        "category": draft.category,
        "date": draft.date,
        "description": draft.description,
        "saving_category": draft.saving_category,
        "operation": draft.operation,
    }


class LedgerStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, since: date) -> List[TransactionModel]:
        query = (
            select(TransactionModel)
            .where(TransactionModel.date >= since)
            .order_by(TransactionModel.date.desc(), TransactionModel.created_at.desc())
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            log.exception(f"Listing transactions since {since} failed")
            raise StoreFailure(str(e)) from e
        items = result.scalars().all()
        log.debug(f"Listed {len(items)} transactions since {since}")
        return items

    async def create(self, payload: Union[Draft, dict]) -> TransactionModel:
        draft = as_draft(payload)
        tx = TransactionModel(id=new_id(), **_columns(draft))
        self.db.add(tx)
        await self._commit("create")
        await self.db.refresh(tx)
        log.info(f"Created {tx.type} id={tx.id} category={tx.category} amount={tx.amount}")
        return tx

    async def update(self, tx_id: str, payload: Union[Draft, dict]) -> TransactionModel:
        draft = as_draft(payload)
        tx = await self._get(tx_id)
        for field, value in _columns(draft).items():
            setattr(tx, field, value)
        await self._commit("update")
        await self.db.refresh(tx)
        log.info(f"Updated {tx.type} id={tx.id} category={tx.category} amount={tx.amount}")
        return tx

    async def delete(self, tx_id: str) -> None:
        tx = await self._get(tx_id)
        await self.db.delete(tx)
        await self._commit("delete")
        log.info(f"Deleted {tx.type} id={tx_id}")

    async def aggregate_monthly(self, since: date) -> List[StatsRow]:
        """
        Sum amounts per (type, category, month, year).

        Savings deposits and withdrawals land in the same bucket and both
        count positively.
        """
        month = extract("month", TransactionModel.date).label("month")
        year = extract("year", TransactionModel.date).label("year")
        query = (
            select(
                TransactionModel.type,
                TransactionModel.category,
                month,
                year,
                func.sum(TransactionModel.amount).label("total"),
            )
            .where(TransactionModel.date >= since)
            .group_by(TransactionModel.type, TransactionModel.category, month, year)
            .order_by(year, month, TransactionModel.type, TransactionModel.category)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            log.exception(f"Aggregating transactions since {since} failed")
            raise StoreFailure(str(e)) from e

        rows = result.fetchall()
        return [
            StatsRow(
                id=StatsKey(type=r.type, category=r.category, month=int(r.month), year=int(r.year)),
                total=float(r.total or 0),
            )
            for r in rows
        ]

    async def _get(self, tx_id: str) -> TransactionModel:
        try:
            tx = await self.db.get(TransactionModel, tx_id)
        except SQLAlchemyError as e:
            log.exception(f"Loading transaction id={tx_id} failed")
            raise StoreFailure(str(e)) from e
        if tx is None:
            raise NotFound("Expense not found")
        return tx

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.exception(f"Transaction {action} failed")
            raise StoreFailure(str(e)) from e
