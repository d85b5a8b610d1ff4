from decimal import Decimal

from django.db import models

from modules.orders.constants import PaymentMethod


class AccountType(models.TextChoices):
    CASH = "cash", "Cash"
    BANK = "bank", "Bank"
    CARD_PAYMENTS = "card_payments", "Card payments"
    COD_COLLECTIONS = "cod_collections", "COD collections"
    PETTY_CASH = "petty_cash", "Petty cash"


class TransactionType(models.TextChoices):
    SALE = "sale", "Sale"
    REFUND = "refund", "Refund"
    EXPENSE = "expense", "Expense"
    PURCHASE = "purchase", "Purchase"
    ADJUSTMENT = "adjustment", "Adjustment"
    PAYOUT = "payout", "Payout"


class TransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"


class ExpenseStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    PAID = "paid", "Paid"
    OVERDUE = "overdue", "Overdue"
    CANCELLED = "cancelled", "Cancelled"
    REIMBURSED = "reimbursed", "Reimbursed"


class PaymentTerms(models.TextChoices):
    IMMEDIATE = "immediate", "Immediate"
    NET_7 = "net_7", "Net 7"
    NET_15 = "net_15", "Net 15"
    NET_30 = "net_30", "Net 30"
    NET_60 = "net_60", "Net 60"
    NET_90 = "net_90", "Net 90"


PAYMENT_TERM_DAYS = {
    PaymentTerms.IMMEDIATE: 0,
    PaymentTerms.NET_7: 7,
    PaymentTerms.NET_15: 15,
    PaymentTerms.NET_30: 30,
    PaymentTerms.NET_60: 60,
    PaymentTerms.NET_90: 90,
}

# IFRS expense classification: (code, name, name_ar, function, GL code)
EXPENSE_CATEGORIES = [
    ("inventory", "Inventory / Raw Materials", "المخزون", "cost_of_sales", "5100"),
    ("direct_labor", "Direct Labor", "العمالة المباشرة", "cost_of_sales", "5110"),
    ("freight_in", "Freight In", "الشحن الداخلي", "cost_of_sales", "5120"),
    ("marketing", "Marketing & Advertising", "التسويق والإعلان", "selling", "5200"),
    ("delivery", "Delivery & Shipping", "التوصيل والشحن", "selling", "5210"),
    ("sales_commission", "Sales Commission", "عمولة المبيعات", "selling", "5220"),
    ("salaries", "Salaries & Wages", "الرواتب والأجور", "administrative", "5300"),
    ("rent", "Rent", "الإيجار", "administrative", "5310"),
    ("utilities", "Utilities", "المرافق", "administrative", "5320"),
    ("office_supplies", "Office Supplies", "مستلزمات المكتب", "administrative", "5330"),
    ("insurance", "Insurance", "التأمين", "administrative", "5340"),
    ("professional_fees", "Professional Fees", "الرسوم المهنية", "administrative", "5350"),
    ("licenses_permits", "Licenses & Permits", "الرخص والتصاريح", "administrative", "5360"),
    ("bank_charges", "Bank Charges", "رسوم البنك", "administrative", "5370"),
    ("equipment", "Equipment", "المعدات", "administrative", "5400"),
    ("maintenance", "Repairs & Maintenance", "الصيانة والإصلاحات", "administrative", "5410"),
    ("depreciation", "Depreciation", "الإهلاك", "administrative", "5420"),
    ("amortization", "Amortization", "الإطفاء", "administrative", "5430"),
    ("interest_expense", "Interest Expense", "مصروفات الفوائد", "finance", "5500"),
    ("finance_charges", "Finance Charges", "الرسوم المالية", "finance", "5510"),
    ("taxes", "Taxes (Non-VAT)", "الضرائب", "other_operating", "5600"),
    ("government_fees", "Government Fees", "الرسوم الحكومية", "other_operating", "5610"),
    ("employee_benefits", "Employee Benefits", "مزايا الموظفين", "administrative", "5700"),
    ("training", "Training & Development", "التدريب والتطوير", "administrative", "5710"),
    ("travel", "Travel & Transportation", "السفر والمواصلات", "administrative", "5720"),
    ("meals_entertainment", "Meals & Entertainment", "الوجبات والترفيه", "administrative", "5730"),
    ("other", "Other Expenses", "مصروفات أخرى", "other_operating", "5900"),
]

EXPENSE_CATEGORY_CHOICES = [(code, name) for code, name, *_ in EXPENSE_CATEGORIES]

# Settlement account for each payment method.
METHOD_ACCOUNT_TYPE = {
    PaymentMethod.CARD: AccountType.CARD_PAYMENTS,
    PaymentMethod.COD: AccountType.COD_COLLECTIONS,
    PaymentMethod.BANK_TRANSFER: AccountType.BANK,
}


class ReferenceType(models.TextChoices):
    PAYMENT = "payment", "Payment"
    EXPENSE = "expense", "Expense"
    TRANSFER = "transfer", "Transfer"
    RECONCILIATION = "reconciliation", "Reconciliation"
    PURCHASE_ORDER = "purchase_order", "Purchase order"
    MANUAL = "manual", "Manual"


# No cost accounting per product yet; cost of sales is a fixed share of revenue.
COGS_RATIO = Decimal("0.60")
REPORTED_VAT_RATE = 5

DEFAULT_PERIOD_DAYS = 30

# Unpaid expense ageing: (label, first day overdue, last day overdue or None)
AGING_BUCKETS = (
    ("current", None, 0),
    ("1_30_days", 1, 30),
    ("31_60_days", 31, 60),
    ("61_90_days", 61, 90),
    ("over_90_days", 91, None),
)

# Balance sheet groupings: cash in hand, and takings not yet settled.
CASH_ACCOUNT_TYPES = (AccountType.CASH, AccountType.PETTY_CASH)
CLEARING_ACCOUNT_TYPES = (AccountType.CARD_PAYMENTS, AccountType.COD_COLLECTIONS)
