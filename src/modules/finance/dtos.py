"""Finance DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.finance.constants import (
    EXPENSE_CATEGORIES,
    AccountType,
    PaymentTerms,
)

Period = Literal["today", "week", "month", "quarter", "year"]

CATEGORY_CODES = frozenset(code for code, *_ in EXPENSE_CATEGORIES)


class AccountDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    name_ar: str = ""
    type: AccountType
    balance: Decimal = Field(default=Decimal("0"), decimal_places=2)
    currency: str = Field(default="AED", min_length=3, max_length=3)
    bank_name: str = ""
    account_number: str = ""
    is_active: bool = True


class TransferDTO(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_account_id: UUID = Field(alias="from")
    to_account_id: UUID = Field(alias="to")
    amount: Decimal = Field(gt=0, decimal_places=2)
    notes: str = ""

    @model_validator(mode="after")
    def distinct_accounts(self) -> "TransferDTO":
        if self.from_account_id == self.to_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class ReconcileDTO(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    statement_balance: Decimal = Field(decimal_places=2)
    statement_date: Optional[date] = Field(default=None, alias="date")
    notes: str = ""


class ExpenseDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    category: str
    description: str = Field(min_length=1, max_length=255)
    vendor: str = ""
    gross_amount: Decimal = Field(gt=0, decimal_places=2)
    # Defaults to gross × the shop VAT rate when omitted.
    vat_amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    invoice_number: str = ""
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    account_id: Optional[UUID] = None
    notes: str = ""

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        if v not in CATEGORY_CODES:
            raise ValueError(f"Unknown expense category: {v}")
        return v


class RejectExpenseDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    reason: str = Field(min_length=1, max_length=255)


class PayExpenseDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: UUID


class ReportPeriodDTO(BaseModel):
    """``period`` or an explicit ``start_date``/``end_date`` pair."""

    model_config = ConfigDict(frozen=True)

    period: Optional[Period] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def complete_range(self) -> "ReportPeriodDTO":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.start_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class BalanceSheetDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    as_of_date: Optional[date] = None
