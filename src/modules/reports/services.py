"""Sales, customer, inventory and order reports for the back office.

Orders count from their creation date.  Cancelled orders are left out of
the sales figures but still appear in the order breakdowns.  Cost of
goods uses each product's ``cost_price``; products without one add no
cost.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from django.db.models import Count, DateField, F, Max, QuerySet, Sum, Value
from django.db.models.functions import Coalesce, TruncDate, TruncMonth, TruncWeek
from django.utils import timezone

from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.catalog.models import Product, StockMovement
from modules.core.money import ZERO, percentage, round2
from modules.finance.reports import MONEY, ReportPeriod, _sum
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order, OrderItem

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IStockRepository

TOP_LIMIT = 10
SLOW_MOVING_DAYS = 30

BUCKETS = {"day": TruncDate, "week": TruncWeek, "month": TruncMonth}


def _cost(items: QuerySet) -> Decimal:
    return items.filter(product__cost_price__isnull=False).aggregate(
        total=_sum(F("quantity") * F("product__cost_price"), output_field=MONEY)
    )["total"]


class SalesReportService:
    def __init__(self, stock_repository: IStockRepository) -> None:
        self._stock = stock_repository

    @staticmethod
    def _orders(period: ReportPeriod) -> QuerySet:
        return Order.objects.alive().filter(
            created_at__gte=period.start, created_at__lte=period.end
        )

    def _sales_orders(self, period: ReportPeriod) -> QuerySet:
        return self._orders(period).exclude(status=OrderStatus.CANCELLED)

    @staticmethod
    def _items(orders: QuerySet) -> QuerySet:
        return OrderItem.objects.filter(order__in=orders)

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def sales(self, period: ReportPeriod) -> dict:
        orders = self._sales_orders(period)
        totals = orders.aggregate(
            sales=_sum("total"),
            discount=_sum("discount"),
            vat=_sum("vat_amount"),
            delivery=_sum("delivery_fee"),
            count=Count("id"),
        )
        count = totals["count"]
        cost = _cost(self._items(orders))
        net_revenue = totals["sales"] - totals["vat"] - totals["delivery"]
        gross_profit = net_revenue - cost
        return {
            **period.as_dict(),
            "total_sales": round2(totals["sales"]),
            "total_orders": count,
            "average_order_value": round2(totals["sales"] / count) if count else ZERO,
            "total_discount": round2(totals["discount"]),
            "total_vat": round2(totals["vat"]),
            "total_delivery_fees": round2(totals["delivery"]),
            "net_revenue": round2(net_revenue),
            "cost_of_goods": round2(cost),
            "gross_profit": round2(gross_profit),
            "gross_profit_margin": percentage(gross_profit, net_revenue),
        }

    def sales_by_category(self, period: ReportPeriod) -> list[dict]:
        rows = list(
            self._items(self._sales_orders(period))
            .order_by()
            .values(category=Coalesce(F("product__category__name"), Value("Other")))
            .annotate(total_sales=_sum("total_price"), total_quantity=Sum("quantity"))
            .order_by("-total_sales", "category")
        )
        overall = sum((row["total_sales"] for row in rows), ZERO)
        return [
            {
                "category": row["category"],
                "total_sales": round2(row["total_sales"]),
                "total_quantity": row["total_quantity"],
                "percentage": percentage(row["total_sales"], overall),
            }
            for row in rows
        ]

    def sales_by_product(self, period: ReportPeriod, limit: int = 20) -> list[dict]:
        rows = (
            self._items(self._sales_orders(period))
            .order_by()
            .values("product_id")
            .annotate(
                product_name=Max("product_name"),
                total_sales=_sum("total_price"),
                total_quantity=Sum("quantity"),
            )
            .order_by("-total_sales", "product_name")[:limit]
        )
        return [
            {
                "product_id": str(row["product_id"]),
                "product_name": row["product_name"],
                "total_sales": round2(row["total_sales"]),
                "total_quantity": row["total_quantity"],
                "average_price": (
                    round2(row["total_sales"] / row["total_quantity"])
                    if row["total_quantity"]
                    else ZERO
                ),
            }
            for row in rows
        ]

    def sales_timeseries(self, period: ReportPeriod, group_by: str = "day") -> list[dict]:
        rows = (
            self._sales_orders(period)
            .annotate(bucket=BUCKETS[group_by]("created_at", output_field=DateField()))
            .order_by()
            .values("bucket")
            .annotate(
                sales=_sum("total"),
                orders=Count("id"),
                customers=Count("customer_id", distinct=True),
            )
            .order_by("bucket")
        )
        return [
            {
                "date": row["bucket"].isoformat(),
                "sales": round2(row["sales"]),
                "orders": row["orders"],
                "customers": row["customers"],
            }
            for row in rows
        ]

    def customers(self, period: ReportPeriod) -> dict:
        per_customer = (
            self._sales_orders(period)
            .order_by()
            .values("customer_id", "customer__first_name", "customer__family_name")
            .annotate(
                total_orders=Count("id"),
                total_spent=_sum("total"),
                last_order_at=Max("created_at"),
            )
        )
        ordering = sorted(per_customer, key=lambda row: row["total_spent"], reverse=True)
        top = [
            {
                "user_id": str(row["customer_id"]),
                "name": f"{row['customer__first_name']} {row['customer__family_name']}".strip(),
                "total_orders": row["total_orders"],
                "total_spent": round2(row["total_spent"]),
                "average_order_value": round2(row["total_spent"] / row["total_orders"]),
                "last_order_at": row["last_order_at"],
            }
            for row in ordering[:TOP_LIMIT]
        ]

        customers = User.objects.filter(role=UserRole.CUSTOMER)
        total_customers = customers.count()
        by_emirate = [
            {
                "emirate": row["emirate"] or "Unknown",
                "count": row["count"],
                "percentage": percentage(row["count"], total_customers),
            }
            for row in customers.order_by()
            .values("emirate")
            .annotate(count=Count("id"))
            .order_by("-count", "emirate")
        ]
        return {
            **period.as_dict(),
            "top_customers": top,
            "customers_by_emirate": by_emirate,
            "active_customers": len(ordering),
            "returning_customers": sum(1 for row in ordering if row["total_orders"] > 1),
        }

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    def inventory(self, today: Optional[date] = None) -> dict:
        """Current stock position; sales history counts every non-cancelled order."""
        today = today or timezone.localdate()
        stock = self._stock.list()
        stock_value = stock.filter(product__cost_price__isnull=False).aggregate(
            total=_sum(F("quantity") * F("product__cost_price"), output_field=MONEY)
        )["total"]

        low_stock = [
            {
                "product_id": str(row.product_id),
                "product_name": row.product.name,
                "current_quantity": row.available_quantity,
                "threshold": row.low_stock_threshold,
                "reorder_point": row.reorder_point,
                "suggested_reorder_quantity": row.reorder_quantity,
            }
            for row in self._stock.low_stock()
        ]

        sold = self._items(Order.objects.alive().exclude(status=OrderStatus.CANCELLED))
        top_selling = [
            {
                "product_id": str(row["product_id"]),
                "product_name": row["product_name"],
                "total_sales": round2(row["total_sales"]),
                "total_quantity": row["total_quantity"],
            }
            for row in sold.order_by()
            .values("product_id")
            .annotate(
                product_name=Max("product_name"),
                total_sales=_sum("total_price"),
                total_quantity=Sum("quantity"),
            )
            .order_by("-total_quantity", "product_name")[:TOP_LIMIT]
        ]

        last_sold = dict(
            sold.order_by().values("product_id").annotate(last=Max("order__created_at"))
            .values_list("product_id", "last")
        )
        cutoff = timezone.now() - timedelta(days=SLOW_MOVING_DAYS)
        slow_moving = []
        for row in stock.filter(product__is_active=True, quantity__gt=0):
            last = last_sold.get(row.product_id)
            if last is not None and last >= cutoff:
                continue
            slow_moving.append(
                {
                    "product_id": str(row.product_id),
                    "product_name": row.product.name,
                    "days_since_last_sale": (
                        (today - timezone.localtime(last).date()).days if last else None
                    ),
                    "current_stock": row.quantity,
                    "stock_value": round2(row.quantity * (row.product.cost_price or ZERO)),
                }
            )
        slow_moving.sort(key=lambda item: item["stock_value"], reverse=True)

        movements = [
            {"type": row["type"], "count": row["count"], "total_quantity": row["quantity"]}
            for row in StockMovement.objects.order_by()
            .values("type")
            .annotate(count=Count("id"), quantity=Sum("quantity"))
            .order_by("type")
        ]
        return {
            "total_products": Product.objects.alive().count(),
            "total_stock_value": round2(stock_value),
            "low_stock_items": low_stock,
            "top_selling_products": top_selling,
            "slow_moving_products": slow_moving[:TOP_LIMIT],
            "stock_movement_summary": movements,
        }

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def orders(self, period: ReportPeriod) -> dict:
        orders = self._orders(period)
        total = orders.count()
        by_status = dict(orders.order_by().values_list("status").annotate(count=Count("id")))
        by_method = dict(
            orders.order_by().values_list("payment_method").annotate(count=Count("id"))
        )
        by_payment = dict(
            orders.order_by().values_list("payment_status").annotate(count=Count("id"))
        )

        delivered = orders.filter(
            status=OrderStatus.DELIVERED,
            actual_delivery_at__isnull=False,
            estimated_delivery_at__isnull=False,
        ).values_list("created_at", "estimated_delivery_at", "actual_delivery_at")
        on_time = 0
        minutes = 0.0
        for created_at, estimated_at, delivered_at in delivered:
            if delivered_at <= estimated_at:
                on_time += 1
            minutes += (delivered_at - created_at).total_seconds() / 60
        delivered_count = len(delivered)

        cancelled = by_status.get(OrderStatus.CANCELLED, 0)
        return {
            **period.as_dict(),
            "total_orders": total,
            "status_breakdown": {status: by_status.get(status, 0) for status in OrderStatus.values},
            "payment_breakdown": {
                method: by_method.get(method, 0) for method in PaymentMethod.values
            },
            "payment_status_breakdown": {
                status: by_payment.get(status, 0) for status in PaymentStatus.values
            },
            "delivery_performance": {
                "total_delivered": delivered_count,
                "on_time_deliveries": on_time,
                "on_time_delivery_rate": percentage(on_time, delivered_count),
                "average_delivery_minutes": (
                    round(minutes / delivered_count) if delivered_count else 0
                ),
            },
            "cancellation_rate": percentage(cancelled, total),
        }
