"""Scenario synthesis: sensitivity bands around a base forecast.

Multipliers apply to the already-projected base curve; growth,
seasonality and occupancy erosion are not re-run per scenario.
"""

from dataclasses import dataclass, field, replace

from models.assumptions import SCENARIO_OCCUPANCY_BOUNDS, SCENARIO_SPECS, ScenarioSpec
from models.forecast import ForecastResult, ForecastSummary, summarize


@dataclass(frozen=True)
class Scenario:
    key: str
    name: str
    description: str
    monthly_forecasts: tuple = field(default_factory=tuple)
    summary: ForecastSummary | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "monthlyForecasts": [m.to_dict() for m in self.monthly_forecasts],
            "summary": self.summary.to_dict() if self.summary else {},
        }


def adjust_forecast_scenario(base: ForecastResult, spec: ScenarioSpec) -> Scenario:
    low, high = SCENARIO_OCCUPANCY_BOUNDS
    months = []
    for month in base.monthly_forecasts:
        revenue = month.projected_revenue * spec.revenue_multiplier
        maintenance = month.projected_maintenance * spec.maintenance_multiplier
        occupancy = max(low, min(high, month.occupancy_rate + spec.occupancy_shift))
        months.append(replace(
            month,
            projected_revenue=round(revenue),
            projected_maintenance=round(maintenance),
            projected_net_income=round(revenue - maintenance),
            occupancy_rate=round(occupancy),
        ))

    baseline = base.summary.baseline_revenue if base.summary else 0.0
    return Scenario(
        key=spec.key,
        name=spec.name,
        description=spec.description,
        monthly_forecasts=tuple(months),
        summary=summarize(months, baseline),
    )


def build_growth_scenarios(base: ForecastResult, specs=SCENARIO_SPECS) -> dict[str, Scenario]:
    """Optimistic / conservative / pessimistic variants keyed by scenario key."""
    return {spec.key: adjust_forecast_scenario(base, spec) for spec in specs}


def compare_scenarios(base: ForecastResult, scenarios: dict[str, Scenario]) -> dict:
    """Revenue and net-income deltas of each scenario against the base case."""
    comparison = {}
    base_revenue = base.summary.total_projected_revenue
    base_net = base.summary.total_projected_net_income
    for key, scenario in scenarios.items():
        revenue = scenario.summary.total_projected_revenue
        comparison[key] = {
            "revenueDifference": revenue - base_revenue,
            "revenueDifferencePercent": round((revenue - base_revenue) / base_revenue * 100, 2) if base_revenue > 0 else 0,
            "netIncomeDifference": scenario.summary.total_projected_net_income - base_net,
        }
    return comparison
