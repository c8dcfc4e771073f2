"""Portfolio and property financial forecasting.

Thin orchestration over the pure models: each call pulls a fresh snapshot
from the repository, projects it, and maps the result to recommendations.
"""

import logging
from datetime import date, datetime, timedelta

from models.assumptions import ForecastPolicy, policy_from_config
from models.entities import ACTIVE, add_months
from models.forecast import MAX_HORIZON_MONTHS, MIN_HORIZON_MONTHS, build_base_forecast
from models.historical_trends import (
    MAX_LOOKBACK_MONTHS, MIN_LOOKBACK_MONTHS,
    build_trend_series, calc_maintenance_trend, classify_revenue_trend,
)
from models.portfolio import build_portfolio_snapshot, build_single_property_snapshot
from models.recommendations import (
    forecast_recommendations, property_insights, scenario_recommendations,
    summary_recommendations, trend_insights,
)
from models.scenarios import build_growth_scenarios, compare_scenarios
from services.errors import NotFoundError, ValidationError
from services.market_insights import get_market_insights
from models.reasoning import ReasoningOk

logger = logging.getLogger(__name__)

MAX_PROPERTY_HORIZON_MONTHS = 24
SCENARIO_HISTORY_MONTHS = 12
PROPERTY_HISTORY_MONTHS = 12
PROPERTY_MAINTENANCE_MONTHS = 24
SUMMARY_EXPIRY_DAYS = 180
SUMMARY_MAINTENANCE_MONTHS = 3

INSIGHTS_SYSTEM_PROMPT = (
    "You are a real estate financial analyst providing insights on property portfolio "
    "forecasts. Analyze the provided data and generate actionable insights. "
    "Respond only with a JSON object."
)
INSIGHT_CONFIDENCE_LEVELS = ("high", "medium", "low")


def _bounded_int(value, low: int, high: int, label: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number")
    if isinstance(value, bool) or not low <= number <= high:
        raise ValidationError(f"{label} must be between {low} and {high} months")
    return number


def _require_id(value, label: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value)


class ForecastingService:
    """Forecast operations over an injected portfolio repository.

    Args:
        repository: PortfolioRepository implementation.
        reasoning_client: Optional ReasoningClient for narrative insights;
            without one the deterministic insights are used.
        policy: ForecastPolicy; built from config when omitted.
        today: Callable returning the reference date.
    """

    def __init__(self, repository, reasoning_client=None, policy: ForecastPolicy = None,
                 today=date.today):
        self.repository = repository
        self.reasoning_client = reasoning_client
        self.policy = policy or policy_from_config()
        self.today = today

    # ------------------------------------------------------------------
    # Data assembly
    # ------------------------------------------------------------------

    def _portfolio_snapshot(self, landlord_id: str, as_of: date):
        properties = self.repository.list_properties(landlord_id)
        leases = self.repository.list_leases(landlord_id=landlord_id, statuses=(ACTIVE,))
        tickets = self.repository.list_maintenance_tickets(
            landlord_id=landlord_id, since=add_months(as_of, -12),
        )
        return build_portfolio_snapshot(properties, leases, tickets, as_of)

    def _trend_series(self, as_of: date, months: int, landlord_id: str = None, property_id: str = None):
        since = add_months(as_of, -months)
        payments = self.repository.list_payments(landlord_id=landlord_id, property_id=property_id, since=since)
        tickets = self.repository.list_maintenance_tickets(
            landlord_id=landlord_id, property_id=property_id, since=since,
        )
        return build_trend_series(payments, tickets, as_of, months)

    # ------------------------------------------------------------------
    # Portfolio forecast
    # ------------------------------------------------------------------

    def forecast_portfolio(self, landlord_id: str, horizon_months: int = 12,
                           include_scenarios: bool = True, include_market_factors: bool = True) -> dict:
        landlord_id = _require_id(landlord_id, "Landlord ID")
        horizon = _bounded_int(horizon_months, MIN_HORIZON_MONTHS, MAX_HORIZON_MONTHS, "Forecast period")
        as_of = self.today()

        logger.info(f"Building {horizon}-month forecast for landlord {landlord_id}")
        snapshot = self._portfolio_snapshot(landlord_id, as_of)
        if snapshot.property_count == 0:
            return {"error": "No properties found for forecast", "summary": {"totalProperties": 0}}

        history = self._trend_series(as_of, self.policy.history_months, landlord_id=landlord_id)
        base = build_base_forecast(snapshot, history, horizon, as_of, self.policy)
        scenarios = build_growth_scenarios(base) if include_scenarios else {}

        market = {}
        if include_market_factors:
            market = get_market_insights(self.repository, [s.prop for s in snapshot.properties], as_of)

        insights = self.forecast_insights(snapshot, history, base, scenarios, market)

        return {
            "summary": {
                "landlordId": landlord_id,
                "totalProperties": snapshot.property_count,
                "forecastPeriodMonths": horizon,
                "currentMonthlyRevenue": round(snapshot.total_monthly_revenue, 2),
                "generatedAt": datetime.now().isoformat(),
            },
            "baseForecast": base.to_dict(),
            "scenarios": {key: s.to_dict() for key, s in scenarios.items()},
            "marketInsights": market,
            "aiInsights": insights,
            "recommendations": forecast_recommendations(base, scenarios, insights),
        }

    def forecast_insights(self, snapshot, history, base, scenarios: dict, market: dict) -> dict:
        """Narrative insights from the reasoning client, or deterministic ones."""
        if self.reasoning_client is None:
            return self._fallback_insights(snapshot, history, base)

        result = self.reasoning_client.request_json(
            INSIGHTS_SYSTEM_PROMPT, self._insights_prompt(snapshot, base, scenarios, market),
        )
        if not isinstance(result, ReasoningOk):
            logger.warning(f"Forecast insights falling back to heuristics: {type(result).__name__}")
            return self._fallback_insights(snapshot, history, base)

        data = result.data
        confidence = data.get("confidenceLevel")
        return {
            "keyInsights": data["keyInsights"] if isinstance(data.get("keyInsights"), list) else [],
            "opportunities": data["opportunities"] if isinstance(data.get("opportunities"), list) else [],
            "risks": data["risks"] if isinstance(data.get("risks"), list) else [],
            "marketOutlook": data.get("marketOutlook") or "Market conditions require further analysis.",
            "confidenceLevel": confidence if confidence in INSIGHT_CONFIDENCE_LEVELS else "medium",
        }

    def _insights_prompt(self, snapshot, base, scenarios: dict, market: dict) -> str:
        summary = base.summary

        def scenario_net(key):
            scenario = scenarios.get(key)
            return f"${scenario.summary.total_projected_net_income:,}" if scenario else "N/A"

        diversification = market.get("diversification", {})
        return "\n".join([
            "Portfolio Overview:",
            f"- Total Properties: {snapshot.property_count}",
            f"- Current Monthly Revenue: ${snapshot.total_monthly_revenue:,.0f}",
            f"- Current Occupancy Rate: {snapshot.occupancy_rate:.1f}%",
            f"- Average Monthly Maintenance: ${snapshot.average_monthly_maintenance_cost:,.0f}",
            "",
            f"Base Forecast Summary ({len(base.monthly_forecasts)} months):",
            f"- Projected Total Revenue: ${summary.total_projected_revenue:,}",
            f"- Projected Total Net Income: ${summary.total_projected_net_income:,}",
            f"- Projected ROI: {summary.projected_roi:.1f}%",
            "",
            "Scenario Comparison:",
            f"- Optimistic Net Income: {scenario_net('optimistic')}",
            f"- Conservative Net Income: {scenario_net('conservative')}",
            f"- Pessimistic Net Income: {scenario_net('pessimistic')}",
            "",
            "Market Context:",
            f"- Markets: {diversification.get('marketCount', 'Unknown')}",
            f"- Concentration Risk: {diversification.get('concentrationRisk', 'Unknown')}",
            "",
            "Provide analysis in JSON format with:",
            "- keyInsights: array of 3-4 key insights (strings)",
            "- opportunities: array of 2-3 growth opportunities (strings)",
            "- risks: array of 2-3 key risks (strings)",
            "- marketOutlook: string describing market conditions",
            '- confidenceLevel: "high", "medium", or "low"',
        ])

    def _fallback_insights(self, snapshot, history, base) -> dict:
        demand = "strong" if snapshot.occupancy_rate > 90 else "moderate"
        thin_history = history.total_months < self.policy.history_baseline_months
        return {
            "keyInsights": [
                f"Portfolio of {snapshot.property_count} properties generating "
                f"${snapshot.total_monthly_revenue:,.0f}/month",
                f"Base forecast projects ${base.summary.total_projected_net_income:,} net income "
                f"over {len(base.monthly_forecasts)} months",
                f"Current occupancy rate of {snapshot.occupancy_rate:.1f}% indicates {demand} demand",
            ],
            "opportunities": [
                "Optimize rent prices based on market analysis",
                "Improve operational efficiency to reduce maintenance costs",
            ],
            "risks": [
                "Market volatility could impact rental demand",
                "Rising maintenance costs may reduce profit margins",
            ],
            "marketOutlook": "Analysis based on historical trends and current portfolio performance.",
            "confidenceLevel": "low" if thin_history else "medium",
        }

    # ------------------------------------------------------------------
    # Property forecast
    # ------------------------------------------------------------------

    def forecast_property(self, property_id: str, horizon_months: int = 12) -> dict:
        property_id = _require_id(property_id, "Property ID")
        horizon = _bounded_int(horizon_months, MIN_HORIZON_MONTHS, MAX_PROPERTY_HORIZON_MONTHS, "Forecast period")
        as_of = self.today()

        prop = self.repository.get_property(property_id)
        if prop is None:
            raise NotFoundError("Property not found")

        logger.info(f"Building {horizon}-month forecast for property {property_id}")
        leases = self.repository.list_leases(property_id=property_id, statuses=(ACTIVE,))
        tickets = self.repository.list_maintenance_tickets(
            property_id=property_id, since=add_months(as_of, -PROPERTY_MAINTENANCE_MONTHS),
        )
        snapshot = build_single_property_snapshot(prop, leases, tickets, as_of)
        history = self._trend_series(as_of, PROPERTY_HISTORY_MONTHS, property_id=property_id)
        forecast = build_base_forecast(snapshot, history, horizon, as_of, self.policy)

        state = snapshot.properties[0]
        return {
            "property": {
                "id": prop.id,
                "title": prop.title,
                "currentRent": state.current_rent,
                "occupancyStatus": "occupied" if state.has_active_lease else "vacant",
            },
            "forecast": forecast.to_dict(),
            "insights": property_insights(state.has_active_lease, state.current_rent, forecast),
        }

    # ------------------------------------------------------------------
    # Trends, scenarios, summary
    # ------------------------------------------------------------------

    def get_historical_trends(self, landlord_id: str, months: int = 12) -> dict:
        landlord_id = _require_id(landlord_id, "Landlord ID")
        months = _bounded_int(months, MIN_LOOKBACK_MONTHS, MAX_LOOKBACK_MONTHS, "Months parameter")
        series = self._trend_series(self.today(), months, landlord_id=landlord_id)
        records = series.monthly_trends

        avg_revenue = series.average_monthly_revenue
        avg_net = avg_revenue - series.average_monthly_maintenance
        revenue_trend = classify_revenue_trend(series.revenue_growth_rate)
        maintenance_trend = calc_maintenance_trend(records)

        trends = {
            "revenue": {
                "monthlyTrends": [{"month": r.month, "amount": round(r.revenue, 2)} for r in records],
                "averageMonthly": round(avg_revenue),
                "growthRate": round(series.revenue_growth_rate, 2),
                "trend": revenue_trend,
            },
            "maintenance": {
                "monthlyTrends": [{"month": r.month, "amount": round(r.maintenance_cost, 2)} for r in records],
                "averageMonthly": round(series.average_monthly_maintenance),
                "trend": maintenance_trend,
            },
            "netIncome": {
                "monthlyTrends": [{"month": r.month, "amount": round(r.net_income, 2)} for r in records],
                "averageMonthly": round(avg_net),
            },
        }
        return {
            "period": f"{months} months",
            "trends": trends,
            "insights": trend_insights(revenue_trend, series.revenue_growth_rate, maintenance_trend,
                                       avg_revenue, avg_net),
            "dataQuality": {
                "monthsOfData": series.total_months,
                "completeness": "good" if series.total_months >= 12 else "limited",
            },
        }

    def generate_scenarios(self, landlord_id: str, scenario_names=None, horizon_months: int = 12) -> dict:
        landlord_id = _require_id(landlord_id, "Landlord ID")
        horizon = _bounded_int(horizon_months, MIN_HORIZON_MONTHS, MAX_HORIZON_MONTHS, "Forecast period")
        if scenario_names is None:
            scenario_names = ["optimistic", "conservative", "pessimistic"]
        if not isinstance(scenario_names, (list, tuple)) or not all(isinstance(n, str) for n in scenario_names):
            raise ValidationError("Scenarios must be a list of scenario names")
        as_of = self.today()

        snapshot = self._portfolio_snapshot(landlord_id, as_of)
        history = self._trend_series(as_of, SCENARIO_HISTORY_MONTHS, landlord_id=landlord_id)
        base = build_base_forecast(snapshot, history, horizon, as_of, self.policy)

        all_scenarios = build_growth_scenarios(base)
        requested = {name: all_scenarios[name] for name in scenario_names if name in all_scenarios}

        return {
            "baseForecast": base.summary.to_dict(),
            "scenarios": {key: s.to_dict() for key, s in requested.items()},
            "comparison": compare_scenarios(base, requested),
            "recommendations": scenario_recommendations(base, requested),
        }

    def portfolio_summary(self, landlord_id: str) -> dict:
        """Quick portfolio metrics without running a full forecast."""
        landlord_id = _require_id(landlord_id, "Landlord ID")
        as_of = self.today()

        properties = self.repository.list_properties(landlord_id)
        active_leases = self.repository.list_leases(landlord_id=landlord_id, statuses=(ACTIVE,))
        horizon = as_of + timedelta(days=SUMMARY_EXPIRY_DAYS)
        upcoming = sum(1 for l in active_leases if l.end_date <= horizon)

        occupied = {l.property_id for l in active_leases}
        occupancy = len(occupied) / len(properties) * 100 if properties else 0.0

        tickets = self.repository.list_maintenance_tickets(
            landlord_id=landlord_id, since=add_months(as_of, -SUMMARY_MAINTENANCE_MONTHS),
        )
        monthly_maintenance = sum(t.actual_cost for t in tickets if t.actual_cost) / SUMMARY_MAINTENANCE_MONTHS

        return {
            "portfolio": {
                "totalProperties": len(properties),
                "activeLeases": len(active_leases),
                "occupancyRate": round(occupancy),
                "totalMonthlyRevenue": round(sum(p.rent_amount or 0 for p in properties)),
                "avgMonthlyMaintenance": round(monthly_maintenance),
            },
            "riskFactors": {
                "upcomingExpirations": upcoming,
                "occupancyRisk": "medium" if occupancy < 85 else "low",
                "maintenanceCostTrend": "high" if monthly_maintenance > 500 else "normal",
            },
            "recommendations": summary_recommendations(upcoming, occupancy),
            "lastUpdated": datetime.now().isoformat(),
        }
