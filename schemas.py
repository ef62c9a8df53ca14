"""
App Schemas

Every ledger entry lives in the "transactions" table. Incoming drafts are a
tagged union on ``type``, each variant carrying only its own fields:
- Expense -> "expense"
- Saving  -> "saving" (money moved into or out of a savings account)
- Income  -> "income"

Wire names are camelCase (``savingCategory``, ``createdAt``); snake_case is
accepted on input too.
"""

from datetime import date, datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, constr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config import SAVING_ACCOUNTS

TransactionType = Literal["expense", "saving", "income"]
Operation = Literal["add", "deduct"]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DraftBase(WireModel):
    # strict keeps booleans and numeric strings out; inf/nan are not amounts
    amount: float = Field(..., gt=0, allow_inf_nan=False, strict=True, description="Positive amount")
    date: date
    description: Optional[str] = None


class Expense(DraftBase):
    type: Literal["expense"]
    category: constr(strip_whitespace=True, min_length=1) = Field(..., description="Category such as rent, food")
    operation: None = None
    saving_category: None = None


class Saving(DraftBase):
    type: Literal["saving"]
    category: str = Field(..., description="Savings account the money moves into or out of")
    operation: Operation
    saving_category: Optional[str] = None

    @field_validator("category", "saving_category")
    @classmethod
    def _known_account(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if value not in SAVING_ACCOUNTS:
            raise ValueError(f"must be one of: {', '.join(SAVING_ACCOUNTS)}")
        return value

    @model_validator(mode="after")
    def _mirror_account(self) -> "Saving":
        if self.saving_category is None:
            self.saving_category = self.category
        elif self.saving_category != self.category:
            raise ValueError("savingCategory must match category")
        return self


class Income(DraftBase):
    type: Literal["income"]
    category: constr(strip_whitespace=True, min_length=1) = Field(..., description="Income source such as salary")
    operation: None = None
    saving_category: None = None


TransactionDraft = Annotated[Union[Expense, Saving, Income], Field(discriminator="type")]
draft_adapter = TypeAdapter(TransactionDraft)


class TransactionOut(WireModel):
    id: str
    type: TransactionType
    amount: float
    category: str
    date: date
    description: Optional[str] = None
    saving_category: Optional[str] = None
    operation: Optional[Operation] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Anything the reconciler can read: a validated draft or a stored record
LedgerEntry = Union[Expense, Saving, Income, TransactionOut]


class StatsKey(BaseModel):
    type: str
    category: str
    month: int
    year: int


class StatsRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: StatsKey = Field(..., alias="_id")
    total: float


class CategorySlice(WireModel):
    name: str
    value: float
    type: TransactionType


class LedgerSummary(WireModel):
    balances: Dict[str, float]
    monthly_income: float
    current_month_expenses: float
    current_month_savings: float
    remaining_budget: float
    budget_usage: Optional[float] = None
    over_budget_warning: bool = False
    distribution: List[CategorySlice] = []
