from celery import shared_task

from modules.finance.factories import build_finance_service


@shared_task(name="finance.mark_overdue_expenses")
def mark_overdue_expenses() -> int:
    return build_finance_service().mark_overdue()
