"""Historical trend aggregation: monthly revenue, maintenance and net income.

Turns raw payment and maintenance records into an ordered monthly series
plus the averages and compounded growth rate the forecast projector uses.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

import numpy as np
import pandas as pd

from models.entities import MaintenanceTicket, Payment, add_months, month_key

logger = logging.getLogger(__name__)

MIN_LOOKBACK_MONTHS = 1
MAX_LOOKBACK_MONTHS = 36


@dataclass(frozen=True)
class MonthlyRecord:
    month: str  # YYYY-MM
    revenue: float
    maintenance_cost: float
    net_income: float
    payment_success_rate: float

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "revenue": round(self.revenue, 2),
            "maintenanceCosts": round(self.maintenance_cost, 2),
            "netIncome": round(self.net_income, 2),
            "paymentSuccessRate": round(self.payment_success_rate, 1),
        }


@dataclass(frozen=True)
class HistoricalTrendSeries:
    monthly_trends: tuple = field(default_factory=tuple)
    average_monthly_revenue: float = 0.0
    average_monthly_maintenance: float = 0.0
    revenue_growth_rate: float = 0.0  # percent per month

    @property
    def total_months(self) -> int:
        return len(self.monthly_trends)

    def to_dict(self) -> dict:
        return {
            "monthlyTrends": [m.to_dict() for m in self.monthly_trends],
            "totalMonths": self.total_months,
            "averageMonthlyRevenue": round(self.average_monthly_revenue, 2),
            "averageMonthlyMaintenance": round(self.average_monthly_maintenance, 2),
            "revenueGrowthRate": round(self.revenue_growth_rate, 4),
        }


def month_ordinal(key: str) -> int:
    """Months since year 0 for a YYYY-MM key."""
    year, month = key.split("-")
    return int(year) * 12 + int(month) - 1


def calc_growth_rate(values: list[float], month_indexes: list[int] = None) -> float:
    """Monthly compounded growth (percent) between the first and last non-zero values.

    `month_indexes` places each value on the calendar so gaps between the two
    endpoints count as periods; consecutive months are assumed when omitted.
    Fewer than two non-zero values means no measurable growth.
    """
    if month_indexes is None:
        month_indexes = list(range(len(values)))
    points = [(m, v) for m, v in zip(month_indexes, values) if v > 0]
    if len(points) < 2:
        return 0.0
    (first_month, first), (last_month, last) = points[0], points[-1]
    periods = last_month - first_month
    if periods <= 0:
        return 0.0
    return float((np.power(last / first, 1.0 / periods) - 1) * 100)


def build_trend_series(payments: list[Payment], tickets: list[MaintenanceTicket],
                       as_of: date, months: int) -> HistoricalTrendSeries:
    """Aggregate payments and ticket costs into a monthly series.

    Args:
        payments: Payments for the scope (landlord or property), any status.
        tickets: Maintenance tickets for the same scope.
        as_of: Reference date; the window is the `months` before it.
        months: Lookback window, 1-36.

    Returns:
        HistoricalTrendSeries ordered by month with no duplicate keys.
    """
    if not MIN_LOOKBACK_MONTHS <= months <= MAX_LOOKBACK_MONTHS:
        raise ValueError(f"Lookback must be between {MIN_LOOKBACK_MONTHS} and {MAX_LOOKBACK_MONTHS} months")

    start = add_months(as_of, -months)

    pay_df = pd.DataFrame(
        [{
            "month": month_key(p.due_date),
            "amount": p.amount,
            "paid": p.status == "PAID",
            "on_time": p.is_on_time,
        } for p in payments if p.due_date >= start],
        columns=["month", "amount", "paid", "on_time"],
    )
    # Only tickets with a recorded actual cost count toward history
    ticket_df = pd.DataFrame(
        [{
            "month": month_key(t.created_at),
            "cost": float(t.actual_cost),
        } for t in tickets if t.created_at >= start and t.actual_cost is not None],
        columns=["month", "cost"],
    )

    paid = pay_df[pay_df["paid"].astype(bool)]
    revenue = paid.groupby("month")["amount"].sum()
    paid_count = paid.groupby("month").size()
    on_time = paid.groupby("month")["on_time"].sum()
    maintenance = ticket_df.groupby("month")["cost"].sum()

    month_keys = sorted(set(pay_df["month"]) | set(ticket_df["month"]))

    records = []
    for key in month_keys:
        rev = float(revenue.get(key, 0.0))
        cost = float(maintenance.get(key, 0.0))
        count = int(paid_count.get(key, 0))
        success = float(on_time.get(key, 0)) / count * 100 if count > 0 else 100.0
        records.append(MonthlyRecord(
            month=key,
            revenue=rev,
            maintenance_cost=cost,
            net_income=rev - cost,
            payment_success_rate=success,
        ))

    revenues = [r.revenue for r in records]
    costs = [r.maintenance_cost for r in records]
    logger.debug(f"Aggregated {len(records)} months of history from {len(pay_df)} payments, {len(ticket_df)} tickets")

    return HistoricalTrendSeries(
        monthly_trends=tuple(records),
        average_monthly_revenue=float(np.mean(revenues)) if revenues else 0.0,
        average_monthly_maintenance=float(np.mean(costs)) if costs else 0.0,
        revenue_growth_rate=calc_growth_rate(revenues, [month_ordinal(r.month) for r in records]),
    )


def calc_maintenance_trend(records) -> str:
    """Compare second-half vs first-half average maintenance spend."""
    if len(records) < 2:
        return "stable"
    half = len(records) // 2
    first_avg = float(np.mean([r.maintenance_cost for r in records[:half]]))
    second_avg = float(np.mean([r.maintenance_cost for r in records[half:]]))
    change = (second_avg - first_avg) / first_avg * 100 if first_avg > 0 else 0.0
    if change > 15:
        return "increasing"
    if change < -15:
        return "decreasing"
    return "stable"


def classify_revenue_trend(growth_rate: float) -> str:
    if growth_rate > 2:
        return "increasing"
    if growth_rate < -2:
        return "decreasing"
    return "stable"
