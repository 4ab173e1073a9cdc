"""
Order aggregation for the daily order book.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from inventory_sync.core.models import OrderRecord

TRAILING_DAYS = 30
COMPLETED_PAYMENT = "completed"


class GroupTotals(BaseModel):
    key: str
    count: int = 0
    revenue: float = 0.0


class DailyTotals(BaseModel):
    day: date
    count: int = 0
    revenue: float = 0.0


class CustomerSummary(BaseModel):
    """Per-customer rollup, keyed by email."""

    email: str
    name: str = ""
    phone: str = ""
    city: str = ""
    state: str = ""
    order_count: int = 0
    total_spent: float = 0.0
    last_order_at: datetime | None = None

    @property
    def average_order_value(self) -> float:
        return self.total_spent / self.order_count if self.order_count else 0.0


class OrderAggregates(BaseModel):
    """
    Everything the Analytics and Customers sheets need.

    Attributes:
        daily: One entry per local calendar day of the trailing window
            ending at ``as_of``, newest first (days without orders included)
        by_status: Order status totals, largest count first
        by_region: Shipping state totals, largest count first
        customers: Customer rollups, highest spend first
    """

    as_of: date
    total_orders: int = 0
    total_revenue: float = 0.0
    completed_payments: int = 0
    daily: list[DailyTotals] = Field(default_factory=list)
    by_status: list[GroupTotals] = Field(default_factory=list)
    by_region: list[GroupTotals] = Field(default_factory=list)
    customers: list[CustomerSummary] = Field(default_factory=list)

    @property
    def average_order_value(self) -> float:
        return self.total_revenue / self.total_orders if self.total_orders else 0.0


def _ranked(groups: dict[str, GroupTotals]) -> list[GroupTotals]:
    return sorted(groups.values(), key=lambda g: (-g.count, g.key))


class OrderAggregator:
    """
    Groups orders by local day, status, region and customer.

    Args:
        timezone: IANA zone used to assign orders to calendar days
        trailing_days: Length of the daily series
    """

    def __init__(self, timezone: str = "Asia/Kolkata", trailing_days: int = TRAILING_DAYS):
        self.tz = ZoneInfo(timezone)
        self.trailing_days = trailing_days

    def local_date(self, moment: datetime) -> date:
        return moment.astimezone(self.tz).date()

    def aggregate(self, orders: list[OrderRecord], as_of: date) -> OrderAggregates:
        result = OrderAggregates(as_of=as_of)
        window_start = as_of - timedelta(days=self.trailing_days - 1)
        daily = {
            as_of - timedelta(days=offset): DailyTotals(day=as_of - timedelta(days=offset))
            for offset in range(self.trailing_days)
        }
        statuses: dict[str, GroupTotals] = {}
        regions: dict[str, GroupTotals] = {}
        customers: dict[str, CustomerSummary] = {}

        for order in orders:
            amount = order.total_amount
            result.total_orders += 1
            result.total_revenue += amount
            if order.payment_status == COMPLETED_PAYMENT:
                result.completed_payments += 1

            placed_at = order.placed_at
            if placed_at is not None:
                day = self.local_date(placed_at)
                if window_start <= day <= as_of:
                    daily[day].count += 1
                    daily[day].revenue += amount

            status = statuses.setdefault(order.order_status, GroupTotals(key=order.order_status))
            status.count += 1
            status.revenue += amount

            region = regions.setdefault(order.region, GroupTotals(key=order.region))
            region.count += 1
            region.revenue += amount

            if order.customer_email:
                self._add_customer(customers, order)

        result.daily = sorted(daily.values(), key=lambda d: d.day, reverse=True)
        result.by_status = _ranked(statuses)
        result.by_region = _ranked(regions)
        result.customers = sorted(customers.values(), key=lambda c: (-c.total_spent, c.email))
        return result

    @staticmethod
    def _add_customer(customers: dict[str, CustomerSummary], order: OrderRecord) -> None:
        email = order.customer_email
        summary = customers.get(email)
        if summary is None:
            summary = customers[email] = CustomerSummary(email=email)

        summary.order_count += 1
        summary.total_spent += order.total_amount

        placed_at = order.placed_at
        is_latest = summary.last_order_at is None or (placed_at is not None and placed_at > summary.last_order_at)
        if is_latest:
            # Contact details follow the customer's most recent order
            summary.last_order_at = placed_at or summary.last_order_at
            summary.name = order.customer_name or summary.name
            summary.phone = order.customer_phone or summary.phone
            summary.city = order.city or summary.city
            summary.state = order.shipping_address.state if order.shipping_address else summary.state
