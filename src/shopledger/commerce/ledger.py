"""
shopledger.commerce.ledger

Transaction ledger records and aggregations.

Responsibilities:
- Validate new income/expense entries and assign ids.
- Keep the ledger newest-first.
- Dashboard projections: totals, spending by category, running balance.
"""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class TransactionType(enum.StrEnum):
    income = "income"
    expense = "expense"


class NewTransaction(BaseModel):
    type: TransactionType
    amount: Decimal = Field(ge=0)
    category: str = ""
    date: dt.date = Field(default_factory=dt.date.today)
    note: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Any:
        return Decimal(str(v)) if isinstance(v, float) else v


class Transaction(NewTransaction):
    model_config = ConfigDict(frozen=True)

    id: str


@dataclass(frozen=True, slots=True)
class LedgerSummary:
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass(frozen=True, slots=True)
class BalancePoint:
    date: dt.date
    balance: Decimal


def new_transaction(fields: NewTransaction | Mapping[str, Any]) -> Transaction:
    data = fields.model_dump() if isinstance(fields, NewTransaction) else dict(fields)
    data.pop("id", None)
    return Transaction.model_validate({**data, "id": uuid.uuid4().hex})


def prepend(ledger: list[Transaction], tx: Transaction) -> list[Transaction]:
    return [tx, *ledger]


def without(ledger: list[Transaction], tx_id: str) -> list[Transaction]:
    return [tx for tx in ledger if tx.id != tx_id]


def summarize(ledger: Iterable[Transaction]) -> LedgerSummary:
    income = Decimal("0")
    expenses = Decimal("0")
    for tx in ledger:
        if tx.type == TransactionType.income:
            income += tx.amount
        else:
            expenses += tx.amount
    return LedgerSummary(income=income, expenses=expenses, balance=income - expenses)


def spending_by_category(ledger: Iterable[Transaction]) -> dict[str, Decimal]:
    """Expense totals per category, in first-seen order."""

    totals: dict[str, Decimal] = {}
    for tx in ledger:
        if tx.type != TransactionType.expense:
            continue
        totals[tx.category] = totals.get(tx.category, Decimal("0")) + tx.amount
    return totals


def balance_over_time(ledger: Iterable[Transaction]) -> list[BalancePoint]:
    points: list[BalancePoint] = []
    balance = Decimal("0")
    for tx in sorted(ledger, key=lambda t: t.date):
        balance += tx.amount if tx.type == TransactionType.income else -tx.amount
        points.append(BalancePoint(date=tx.date, balance=balance))
    return points


def recent(ledger: list[Transaction], limit: int = 5) -> list[Transaction]:
    return ledger[:limit]


def dump_ledger(ledger: Iterable[Transaction]) -> list[dict[str, Any]]:
    return [tx.model_dump(mode="json") for tx in ledger]


def load_ledger(raw: Iterable[Any]) -> list[Transaction]:
    out: list[Transaction] = []
    seen: set[str] = set()
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            tx = Transaction.model_validate(entry)
        except ValidationError:
            continue
        if tx.id in seen:
            continue
        seen.add(tx.id)
        out.append(tx)
    return out


# --- Module Notes -----------------------------------------------------------
# Amounts are never negative; the transaction type carries the sign.
