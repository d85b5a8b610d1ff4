"""Financial reports.

All aggregation happens in the database; figures are rounded to 2 dp.
Cost of sales is estimated as a fixed share of revenue (``COGS_RATIO``)
until per-product costs are tracked.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Count, DecimalField, F, Q, QuerySet, Sum, Value
from django.db.models.functions import Abs, Coalesce, TruncDate
from django.utils import timezone

from modules.catalog.models import Stock
from modules.core.money import ZERO, percentage, round2
from modules.finance.constants import (
    AGING_BUCKETS,
    CASH_ACCOUNT_TYPES,
    CLEARING_ACCOUNT_TYPES,
    COGS_RATIO,
    DEFAULT_PERIOD_DAYS,
    REPORTED_VAT_RATE,
    AccountType,
    ExpenseStatus,
    ReferenceType,
    TransactionType,
)
from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order
from modules.suppliers.constants import PurchaseOrderStatus
from modules.suppliers.models import PurchaseOrder
from modules.wallet.models import Wallet

UNPAID_EXPENSE_STATES = (ExpenseStatus.PENDING, ExpenseStatus.APPROVED, ExpenseStatus.OVERDUE)

MONEY = DecimalField(max_digits=14, decimal_places=2)


def _start_of(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def _end_of(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.max))


def _sum(field, **kwargs):
    return Coalesce(Sum(field, **kwargs), Value(ZERO), output_field=MONEY)


def _aging_bucket(days_overdue: int) -> str:
    for label, first, last in AGING_BUCKETS:
        if (first is None or days_overdue >= first) and (last is None or days_overdue <= last):
            return label
    return AGING_BUCKETS[-1][0]


@dataclass(frozen=True)
class ReportPeriod:
    label: str
    start: datetime
    end: datetime

    @classmethod
    def resolve(
        cls,
        period: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> "ReportPeriod":
        """Explicit dates win; otherwise a named period ending today."""
        if start_date and end_date:
            return cls(
                label="custom",
                start=_start_of(start_date),
                end=_end_of(end_date),
            )
        now = timezone.localtime(now or timezone.now())
        today = now.date()
        end = _end_of(today)

        if period == "today":
            start = _start_of(today)
        elif period == "week":
            start = now - timedelta(days=7)
        elif period == "month":
            start = _start_of(today.replace(day=1))
        elif period == "quarter":
            start = _start_of(today.replace(month=(today.month - 1) // 3 * 3 + 1, day=1))
        elif period == "year":
            start = _start_of(today.replace(month=1, day=1))
        else:
            start = now - timedelta(days=DEFAULT_PERIOD_DAYS)
        return cls(label=period or f"last_{DEFAULT_PERIOD_DAYS}_days", start=start, end=end)

    def as_dict(self) -> dict:
        return {"period": self.label, "start_date": self.start, "end_date": self.end}


class FinanceReportService:
    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _orders(period: ReportPeriod) -> QuerySet:
        return (
            Order.objects.alive()
            .filter(created_at__gte=period.start, created_at__lte=period.end)
            .exclude(status=OrderStatus.CANCELLED)
        )

    @staticmethod
    def _transactions(period: ReportPeriod) -> QuerySet:
        return FinanceTransaction.objects.filter(
            created_at__gte=period.start, created_at__lte=period.end
        )

    @staticmethod
    def _refunds(transactions: QuerySet) -> Decimal:
        return transactions.filter(type=TransactionType.REFUND).aggregate(
            total=_sum(Abs("amount"))
        )["total"]

    @staticmethod
    def _purchases(transactions: QuerySet) -> Decimal:
        return transactions.filter(type=TransactionType.PURCHASE).aggregate(
            total=_sum(Abs("amount"))
        )["total"]

    @staticmethod
    def _supplier_payments(transactions: QuerySet) -> Decimal:
        """Cash paid for stock: purchases paid on delivery plus later settlements."""
        return transactions.filter(
            Q(type=TransactionType.PURCHASE, account__isnull=False)
            | Q(type=TransactionType.PAYOUT, reference_type=ReferenceType.PURCHASE_ORDER)
        ).aggregate(total=_sum(Abs("amount")))["total"]

    @staticmethod
    def _balances() -> list[dict]:
        return [
            {
                "account_id": str(account.id),
                "account_name": account.name,
                "type": account.type,
                "balance": round2(account.balance),
            }
            for account in FinanceAccount.objects.order_by("name")
        ]

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def summary(self, period: ReportPeriod) -> dict:
        orders = self._orders(period).filter(
            payment_status__in=[PaymentStatus.CAPTURED, PaymentStatus.AUTHORIZED]
        )
        totals = orders.aggregate(revenue=_sum("total"), vat=_sum("vat_amount"))
        revenue, vat = totals["revenue"], totals["vat"]
        refunds = self._refunds(self._transactions(period))
        cogs = round2(revenue * COGS_RATIO)
        gross_profit = revenue - cogs

        expenses = FinanceExpense.objects.filter(
            created_at__gte=period.start, created_at__lte=period.end
        )
        total_expenses = expenses.aggregate(total=_sum("amount"))["total"]
        net_profit = gross_profit - total_expenses
        outflow = total_expenses + cogs + refunds

        return {
            **period.as_dict(),
            "total_revenue": round2(revenue),
            "total_cogs": cogs,
            "gross_profit": round2(gross_profit),
            "gross_profit_margin": percentage(gross_profit, revenue),
            "total_expenses": round2(total_expenses),
            "net_profit": round2(net_profit),
            "net_profit_margin": percentage(net_profit, revenue),
            "total_refunds": round2(refunds),
            "total_vat": round2(vat),
            "vat_collected": round2(vat),
            "vat_paid": ZERO,
            "vat_due": round2(vat),
            "cash_flow": {
                "inflow": round2(revenue),
                "outflow": round2(outflow),
                "net": round2(revenue - outflow),
            },
            "revenue_by_payment_method": [
                {"method": row["payment_method"], "amount": round2(row["amount"]), "count": row["count"]}
                for row in orders.order_by()
                .values("payment_method")
                .annotate(amount=_sum("total"), count=Count("id"))
                .order_by("payment_method")
            ],
            "expenses_by_category": [
                {"category": row["category"], "amount": round2(row["amount"]), "count": row["count"]}
                for row in expenses.order_by()
                .values("category")
                .annotate(amount=_sum("amount"), count=Count("id"))
                .order_by("category")
            ],
            "account_balances": self._balances(),
        }

    def profit_loss(self, period: ReportPeriod) -> dict:
        sales = self._orders(period).aggregate(total=_sum("total"))["total"]
        other_income = ZERO
        revenue = sales + other_income
        transactions = self._transactions(period)

        inventory_cost = round2(revenue * COGS_RATIO)
        supplier_purchases = self._purchases(transactions)
        gross_profit = revenue - inventory_cost

        paid = FinanceExpense.objects.filter(
            status=ExpenseStatus.PAID,
            created_at__gte=period.start,
            created_at__lte=period.end,
        )
        operating = [
            {"category": row["category"], "amount": round2(row["amount"])}
            for row in paid.order_by()
            .values("category")
            .annotate(amount=_sum("amount"))
            .order_by("category")
        ]
        total_operating = paid.aggregate(total=_sum("amount"))["total"]
        operating_profit = gross_profit - total_operating

        vat_paid = ZERO
        refunds = self._refunds(transactions)
        total_other = vat_paid + refunds
        net_profit = operating_profit - total_other

        return {
            **period.as_dict(),
            "revenue": {
                "sales": round2(sales),
                "other_income": other_income,
                "total_revenue": round2(revenue),
            },
            "cost_of_goods_sold": {
                "inventory_cost": inventory_cost,
                "supplier_purchases": round2(supplier_purchases),
                "total_cogs": inventory_cost,
            },
            "gross_profit": round2(gross_profit),
            "gross_profit_margin": percentage(gross_profit, revenue),
            "operating_expenses": operating,
            "total_operating_expenses": round2(total_operating),
            "operating_profit": round2(operating_profit),
            "other_expenses": {
                "vat_paid": vat_paid,
                "refunds": round2(refunds),
                "total_other": round2(total_other),
            },
            "net_profit": round2(net_profit),
            "net_profit_margin": percentage(net_profit, revenue),
        }

    def cash_flow(self, period: ReportPeriod) -> dict:
        transactions = self._transactions(period)
        closing = FinanceAccount.objects.aggregate(total=_sum("balance"))["total"]
        opening = closing - transactions.aggregate(total=_sum("amount"))["total"]

        by_method = {
            row["payment_method"]: row["amount"]
            for row in self._orders(period)
            .order_by()
            .values("payment_method")
            .annotate(amount=_sum("total"))
        }
        cash_from_sales = by_method.get(PaymentMethod.CARD, ZERO)
        cash_from_cod = by_method.get(PaymentMethod.COD, ZERO)
        cash_from_refunds = transactions.filter(type=TransactionType.REFUND).aggregate(
            total=_sum("amount")
        )["total"]
        cash_to_suppliers = self._supplier_payments(transactions)
        cash_to_expenses = FinanceExpense.objects.filter(
            status=ExpenseStatus.PAID, paid_at__gte=period.start, paid_at__lte=period.end
        ).aggregate(total=_sum("amount"))["total"]
        net_operating = (
            cash_from_sales + cash_from_cod + cash_from_refunds - cash_to_suppliers - cash_to_expenses
        )

        daily = {
            row["day"]: row
            for row in transactions.annotate(day=TruncDate("created_at"))
            .order_by()
            .values("day")
            .annotate(
                inflow=_sum("amount", filter=Q(amount__gt=0)),
                outflow=_sum(Abs("amount"), filter=Q(amount__lt=0)),
            )
        }
        daily_cash_flow = []
        running = opening
        day = timezone.localtime(period.start).date()
        last = timezone.localtime(period.end).date()
        while day <= last:
            row = daily.get(day, {})
            inflow, outflow = row.get("inflow", ZERO), row.get("outflow", ZERO)
            running += inflow - outflow
            daily_cash_flow.append(
                {
                    "date": day.isoformat(),
                    "inflow": round2(inflow),
                    "outflow": round2(outflow),
                    "net": round2(inflow - outflow),
                    "balance": round2(running),
                }
            )
            day += timedelta(days=1)

        return {
            **period.as_dict(),
            "opening_balance": round2(opening),
            "closing_balance": round2(closing),
            "operating_activities": {
                "cash_from_sales": round2(cash_from_sales),
                "cash_from_cod": round2(cash_from_cod),
                "cash_from_refunds": round2(cash_from_refunds),
                "cash_to_suppliers": round2(cash_to_suppliers),
                "cash_to_expenses": round2(cash_to_expenses),
                "net_operating": round2(net_operating),
            },
            "investing_activities": {"equipment_purchases": ZERO, "net_investing": ZERO},
            "financing_activities": {
                "owner_drawings": ZERO,
                "capital_injection": ZERO,
                "net_financing": ZERO,
            },
            "net_cash_flow": round2(closing - opening),
            "daily_cash_flow": daily_cash_flow,
        }

    def vat(self, period: ReportPeriod) -> dict:
        orders = self._orders(period)
        sales = orders.aggregate(total=_sum("total"), vat=_sum("vat_amount"))
        sales_vat = sales["vat"]
        sales_taxable = sales["total"] - sales_vat

        purchases = FinanceExpense.objects.filter(
            status=ExpenseStatus.PAID, paid_at__gte=period.start, paid_at__lte=period.end
        ).aggregate(taxable=_sum("gross_amount"), vat=_sum("vat_amount"))
        purchases_vat = purchases["vat"]

        vat_due = sales_vat - purchases_vat
        return {
            **period.as_dict(),
            "sales_vat": {
                "taxable_amount": round2(sales_taxable),
                "vat_amount": round2(sales_vat),
                "exempt_amount": ZERO,
            },
            "purchases_vat": {
                "taxable_amount": round2(purchases["taxable"]),
                "vat_amount": round2(purchases_vat),
            },
            "vat_due": round2(vat_due),
            "vat_refund": round2(-vat_due) if vat_due < 0 else ZERO,
            "net_vat": round2(vat_due) if vat_due > 0 else ZERO,
            "transaction_details": [
                {
                    "date": created_at,
                    "type": "sale",
                    "reference": order_number,
                    "taxable_amount": round2(total - vat_amount),
                    "vat_amount": round2(vat_amount),
                    "vat_rate": REPORTED_VAT_RATE,
                }
                for created_at, order_number, total, vat_amount in orders.order_by(
                    "created_at"
                ).values_list("created_at", "order_number", "total", "vat_amount")
            ],
        }

    # ------------------------------------------------------------------
    # Position reports
    # ------------------------------------------------------------------

    def expense_aging(self, today: Optional[date] = None) -> dict:
        """Unpaid expenses grouped by how long they are past due.

        An expense without a due date ages from the day it was entered.
        """
        today = today or timezone.localdate()
        summary = {label: {"count": 0, "amount": ZERO} for label, *_ in AGING_BUCKETS}
        vendors: dict[str, dict] = {}
        details = []

        unpaid = FinanceExpense.objects.filter(status__in=UNPAID_EXPENSE_STATES).order_by(
            "due_date", "created_at"
        )
        for expense in unpaid:
            due = expense.due_date or timezone.localtime(expense.created_at).date()
            days = (today - due).days
            bucket = _aging_bucket(days)
            summary[bucket]["count"] += 1
            summary[bucket]["amount"] = round2(summary[bucket]["amount"] + expense.amount)

            vendor = expense.vendor or "Unspecified"
            row = vendors.setdefault(
                vendor, {"vendor": vendor, "count": 0, "amount": ZERO, "oldest_days_overdue": 0}
            )
            row["count"] += 1
            row["amount"] = round2(row["amount"] + expense.amount)
            row["oldest_days_overdue"] = max(row["oldest_days_overdue"], days)

            details.append(
                {
                    "id": str(expense.id),
                    "expense_number": expense.expense_number,
                    "vendor": expense.vendor,
                    "category": expense.category,
                    "description": expense.description,
                    "amount": round2(expense.amount),
                    "status": expense.status,
                    "due_date": due,
                    "days_overdue": max(days, 0),
                    "bucket": bucket,
                }
            )

        total = sum((bucket["amount"] for bucket in summary.values()), ZERO)
        return {
            "as_of_date": today,
            "summary": summary,
            "total_outstanding": round2(total),
            "total_count": len(details),
            "by_vendor": sorted(vendors.values(), key=lambda row: row["amount"], reverse=True),
            "details": details,
        }

    def balance_sheet(self, as_of: Optional[date] = None) -> dict:
        """Financial position at the end of ``as_of`` (today by default).

        Account balances are wound back by the transactions posted after
        the cut-off.  Inventory is valued at current stock and cost price.
        Retained earnings is the balancing figure.
        """
        as_of = as_of or timezone.localdate()
        cutoff = _end_of(as_of)

        later = {
            row["account_id"]: row["total"]
            for row in FinanceTransaction.objects.filter(created_at__gt=cutoff, account__isnull=False)
            .order_by()
            .values("account_id")
            .annotate(total=_sum("amount"))
        }
        by_type: dict[str, Decimal] = {}
        for account in FinanceAccount.objects.filter(created_at__lte=cutoff):
            balance = account.balance - later.get(account.id, ZERO)
            by_type[account.type] = by_type.get(account.type, ZERO) + balance

        cash = sum((by_type.get(type, ZERO) for type in CASH_ACCOUNT_TYPES), ZERO)
        bank = by_type.get(AccountType.BANK, ZERO)
        clearing = sum((by_type.get(type, ZERO) for type in CLEARING_ACCOUNT_TYPES), ZERO)
        receivables = (
            Order.objects.alive()
            .filter(
                created_at__lte=cutoff,
                payment_status__in=[PaymentStatus.PENDING, PaymentStatus.AUTHORIZED],
            )
            .exclude(status__in=[OrderStatus.CANCELLED, OrderStatus.REFUNDED])
            .aggregate(total=_sum("total"))["total"]
        )
        inventory = Stock.objects.filter(
            product__deleted_at__isnull=True, product__cost_price__isnull=False
        ).aggregate(total=_sum(F("quantity") * F("product__cost_price"), output_field=MONEY))["total"]
        total_current = cash + bank + clearing + receivables + inventory

        expense_payables = FinanceExpense.objects.filter(
            status__in=UNPAID_EXPENSE_STATES, created_at__lte=cutoff
        ).aggregate(total=_sum("amount"))["total"]
        supplier_payables = PurchaseOrder.objects.filter(created_at__lte=cutoff).aggregate(
            total=_sum(F("received_amount") - F("paid_amount"), output_field=MONEY)
        )["total"]
        output_vat = (
            Order.objects.alive()
            .filter(created_at__lte=cutoff, payment_status=PaymentStatus.CAPTURED)
            .aggregate(total=_sum("vat_amount"))["total"]
        )
        input_vat = (
            FinanceExpense.objects.filter(status=ExpenseStatus.PAID, paid_at__lte=cutoff).aggregate(
                total=_sum("vat_amount")
            )["total"]
            + PurchaseOrder.objects.filter(
                status=PurchaseOrderStatus.RECEIVED, actual_delivery_date__lte=cutoff
            ).aggregate(total=_sum("tax_amount"))["total"]
        )
        vat_payable = output_vat - input_vat
        wallets = Wallet.objects.aggregate(total=_sum("balance"))["total"]
        total_liabilities = expense_payables + supplier_payables + vat_payable + wallets

        retained = total_current - total_liabilities
        return {
            "as_of_date": as_of,
            "assets": {
                "current_assets": {
                    "cash": round2(cash),
                    "bank": round2(bank),
                    "payments_clearing": round2(clearing),
                    "accounts_receivable": round2(receivables),
                    "inventory": round2(inventory),
                    "total_current_assets": round2(total_current),
                },
                "total_assets": round2(total_current),
            },
            "liabilities": {
                "current_liabilities": {
                    "accounts_payable": round2(expense_payables + supplier_payables),
                    "expenses_payable": round2(expense_payables),
                    "suppliers_payable": round2(supplier_payables),
                    "vat_payable": round2(vat_payable),
                    "customer_wallets": round2(wallets),
                    "total_current_liabilities": round2(total_liabilities),
                },
                "total_liabilities": round2(total_liabilities),
            },
            "equity": {
                "retained_earnings": round2(retained),
                "total_equity": round2(retained),
            },
            "total_liabilities_and_equity": round2(total_liabilities + retained),
            "balance_check": round2(total_current) == round2(total_liabilities) + round2(retained),
        }
