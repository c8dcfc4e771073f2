"""Base forecast projector: monthly revenue / maintenance / net income curve."""

from dataclasses import dataclass, field
from datetime import date

from models.assumptions import ForecastPolicy
from models.entities import add_months
from models.historical_trends import HistoricalTrendSeries
from models.portfolio import PortfolioSnapshot

MIN_HORIZON_MONTHS = 1
MAX_HORIZON_MONTHS = 36


@dataclass(frozen=True)
class ForecastMonth:
    month_index: int
    date: date
    projected_revenue: int
    projected_maintenance: int
    projected_net_income: int
    occupancy_rate: int
    confidence: float

    def to_dict(self) -> dict:
        return {
            "month": self.month_index,
            "date": self.date.isoformat(),
            "projectedRevenue": self.projected_revenue,
            "projectedMaintenance": self.projected_maintenance,
            "projectedNetIncome": self.projected_net_income,
            "occupancyRate": self.occupancy_rate,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ForecastSummary:
    total_projected_revenue: int
    total_projected_maintenance: int
    total_projected_net_income: int
    average_monthly_net_income: int
    projected_roi: float
    baseline_revenue: float = 0.0  # current monthly revenue x horizon

    def to_dict(self) -> dict:
        return {
            "totalProjectedRevenue": self.total_projected_revenue,
            "totalProjectedMaintenance": self.total_projected_maintenance,
            "totalProjectedNetIncome": self.total_projected_net_income,
            "averageMonthlyNetIncome": self.average_monthly_net_income,
            "projectedROI": round(self.projected_roi, 2),
        }


@dataclass(frozen=True)
class ForecastResult:
    monthly_forecasts: tuple = field(default_factory=tuple)
    summary: ForecastSummary | None = None

    def to_dict(self) -> dict:
        return {
            "monthlyForecasts": [m.to_dict() for m in self.monthly_forecasts],
            "summary": self.summary.to_dict() if self.summary else {},
        }


def get_seasonality_factor(calendar_month: int, policy: ForecastPolicy) -> float:
    return policy.seasonality.get(calendar_month, 1.0)


def calc_occupancy_adjustment(snapshot: PortfolioSnapshot, forecast_date: date,
                              policy: ForecastPolicy) -> float:
    """Revenue multiplier for leases expected to roll off by `forecast_date`.

    Non-renewed leases erode revenue by `revenue_impact_per_lost_share` per
    100% of the occupied base, bounded to [occupancy_floor, occupancy_cap].
    """
    occupied = snapshot.occupied_count
    if occupied == 0:
        return 1.0
    expiring = sum(1 for l in snapshot.active_leases() if l.end_date <= forecast_date)
    lost_share = expiring * (1 - policy.renewal_rate) / occupied
    adjustment = 1 - lost_share * policy.revenue_impact_per_lost_share
    return max(policy.occupancy_floor, min(policy.occupancy_cap, adjustment))


def calc_confidence(forecast_month: int, historical_months: int, policy: ForecastPolicy) -> float:
    """Confidence drops with horizon and with history short of the baseline."""
    confidence = policy.base_confidence - (forecast_month - 1) * policy.confidence_step
    if historical_months < policy.history_baseline_months:
        confidence -= (policy.history_baseline_months - historical_months) * policy.missing_history_penalty
    return max(policy.confidence_floor, min(policy.confidence_cap, confidence))


def calc_roi(total_net_income: float, baseline_revenue: float) -> float:
    if baseline_revenue <= 0:
        return 0.0
    return (total_net_income - baseline_revenue) / baseline_revenue * 100


def summarize(months: list[ForecastMonth], baseline_revenue: float) -> ForecastSummary:
    total_revenue = sum(m.projected_revenue for m in months)
    total_maintenance = sum(m.projected_maintenance for m in months)
    total_net = total_revenue - total_maintenance
    return ForecastSummary(
        total_projected_revenue=total_revenue,
        total_projected_maintenance=total_maintenance,
        total_projected_net_income=total_net,
        average_monthly_net_income=round(total_net / len(months)) if months else 0,
        projected_roi=calc_roi(total_net, baseline_revenue),
        baseline_revenue=baseline_revenue,
    )


def build_base_forecast(snapshot: PortfolioSnapshot, history: HistoricalTrendSeries,
                        horizon_months: int, as_of: date,
                        policy: ForecastPolicy | None = None) -> ForecastResult:
    """Project the portfolio forward month by month.

    Revenue compounds at the historical growth rate and is corrected for
    expected non-renewals; maintenance compounds at the policy inflation
    rate and is scaled by calendar-month seasonality.
    """
    if not MIN_HORIZON_MONTHS <= horizon_months <= MAX_HORIZON_MONTHS:
        raise ValueError(f"Horizon must be between {MIN_HORIZON_MONTHS} and {MAX_HORIZON_MONTHS} months")
    policy = policy or ForecastPolicy()

    revenue = snapshot.total_monthly_revenue
    maintenance = snapshot.average_monthly_maintenance_cost
    revenue_growth = history.revenue_growth_rate / 100

    months = []
    for month in range(1, horizon_months + 1):
        forecast_date = add_months(as_of, month)

        revenue *= (1 + revenue_growth)
        maintenance *= (1 + policy.monthly_maintenance_inflation)

        adjusted_maintenance = maintenance * get_seasonality_factor(forecast_date.month, policy)
        occupancy_adj = calc_occupancy_adjustment(snapshot, forecast_date, policy)
        adjusted_revenue = revenue * occupancy_adj

        months.append(ForecastMonth(
            month_index=month,
            date=forecast_date,
            projected_revenue=round(adjusted_revenue),
            projected_maintenance=round(adjusted_maintenance),
            projected_net_income=round(adjusted_revenue - adjusted_maintenance),
            occupancy_rate=round(snapshot.occupancy_rate * occupancy_adj),
            confidence=calc_confidence(month, history.total_months, policy),
        ))

    baseline = snapshot.total_monthly_revenue * horizon_months
    return ForecastResult(monthly_forecasts=tuple(months), summary=summarize(months, baseline))


