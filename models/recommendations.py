"""Recommendation engine: pure mappings from forecasts and risk analyses to actions."""

from models.assumptions import (
    CRITICAL_EXPIRY_DAYS, DOWNSIDE_NET_INCOME_PCT, MAINTENANCE_RATIO_PCT,
    RENEWAL_OUTREACH_DAYS, RENT_OVER_MARKET_PCT, SCENARIO_DOWNSIDE_DOLLARS,
    SCENARIO_UPSIDE_DOLLARS, SYSTEMIC_HIGH_RISK_PCT, UPSIDE_NET_INCOME_PCT,
)
from models.forecast import ForecastResult
from models.risk_factors import HIGH, MEDIUM, RiskFactor
from models.turnover import TurnoverPrediction


def _pct_change(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator > 0 else 0.0


# ---------------------------------------------------------------------------
# Forecast recommendations
# ---------------------------------------------------------------------------

def forecast_recommendations(base: ForecastResult, scenarios: dict, insights: dict) -> list[dict]:
    """Growth, downside, cost and planning actions for a portfolio forecast.

    Args:
        base: Base forecast.
        scenarios: Scenario objects keyed by scenario key (may be empty).
        insights: Forecast insights dict; a `confidenceLevel` of "low"
            adds a data-quality recommendation.
    """
    recommendations = []
    summary = base.summary
    base_net = summary.total_projected_net_income

    optimistic = scenarios.get("optimistic")
    upside = _pct_change(optimistic.summary.total_projected_net_income - base_net, base_net) if optimistic else 0.0
    if upside > UPSIDE_NET_INCOME_PCT:
        recommendations.append({
            "category": "Revenue Optimization",
            "priority": "high",
            "title": "Significant Growth Opportunity",
            "description": f"Optimistic scenario shows {upside:.1f}% net income potential. "
                           "Consider rent optimization and occupancy improvements.",
            "impact": "high",
            "timeline": "3-6 months",
        })

    pessimistic = scenarios.get("pessimistic")
    downside = _pct_change(base_net - pessimistic.summary.total_projected_net_income, base_net) if pessimistic else 0.0
    if downside > DOWNSIDE_NET_INCOME_PCT:
        recommendations.append({
            "category": "Risk Management",
            "priority": "high",
            "title": "Downside Risk Mitigation",
            "description": f"Pessimistic scenario shows {downside:.1f}% income risk. "
                           "Implement defensive strategies and cost controls.",
            "impact": "high",
            "timeline": "immediate",
        })

    maintenance_ratio = _pct_change(summary.total_projected_maintenance, summary.total_projected_revenue)
    if maintenance_ratio > MAINTENANCE_RATIO_PCT:
        recommendations.append({
            "category": "Cost Management",
            "priority": "medium",
            "title": "High Maintenance Costs",
            "description": f"Maintenance costs represent {maintenance_ratio:.1f}% of revenue. "
                           "Consider preventive maintenance programs.",
            "impact": "medium",
            "timeline": "1-3 months",
        })

    recommendations.append({
        "category": "Operational Planning",
        "priority": "low",
        "title": "Seasonal Maintenance Planning",
        "description": "Plan maintenance activities during low-cost seasons (April-May, "
                       "September-October) to optimize expenses.",
        "impact": "medium",
        "timeline": "ongoing",
    })

    if insights.get("confidenceLevel") == "low":
        recommendations.append({
            "category": "Data Management",
            "priority": "medium",
            "title": "Improve Data Quality",
            "description": "Limited historical data reduces forecast accuracy. "
                           "Implement better tracking of revenue and maintenance costs.",
            "impact": "medium",
            "timeline": "1-2 months",
        })

    return recommendations


def scenario_recommendations(base: ForecastResult, scenarios: dict) -> list[dict]:
    recommendations = []
    base_net = base.summary.total_projected_net_income

    if "optimistic" in scenarios:
        upside = scenarios["optimistic"].summary.total_projected_net_income - base_net
        if upside > SCENARIO_UPSIDE_DOLLARS:
            recommendations.append({
                "priority": "high",
                "scenario": "optimistic",
                "title": "Significant Growth Potential",
                "description": f"Optimistic scenario shows ${upside:,} additional net income potential",
                "action": "Implement aggressive growth strategies",
            })

    if "pessimistic" in scenarios:
        downside = base_net - scenarios["pessimistic"].summary.total_projected_net_income
        if downside > SCENARIO_DOWNSIDE_DOLLARS:
            recommendations.append({
                "priority": "high",
                "scenario": "pessimistic",
                "title": "Significant Downside Risk",
                "description": f"Pessimistic scenario shows ${downside:,} at-risk income",
                "action": "Implement risk mitigation strategies",
            })

    return recommendations


def trend_insights(revenue_trend: str, growth_rate: float, maintenance_trend: str,
                   avg_revenue: float, avg_net_income: float) -> list[str]:
    insights = []
    if revenue_trend == "increasing":
        insights.append(f"Revenue is trending upward with {growth_rate:.2f}% growth rate")
    elif revenue_trend == "decreasing":
        insights.append("Revenue is declining - consider rent optimization strategies")

    if maintenance_trend == "increasing":
        insights.append("Maintenance costs are rising - review preventive maintenance programs")

    margin = _pct_change(avg_net_income, avg_revenue)
    if margin > 70:
        insights.append("Strong profit margins indicate efficient operations")
    elif margin < 50:
        insights.append("Low profit margins - review cost structure and pricing")
    return insights


def property_insights(is_occupied: bool, monthly_revenue: float, forecast: ForecastResult) -> list[str]:
    insights = []
    if is_occupied:
        insights.append(f"Property is currently occupied generating ${monthly_revenue:,.0f}/month")
    else:
        insights.append("Property is currently vacant - find tenant to activate revenue")

    insights.append(f"Projected net income: ${forecast.summary.total_projected_net_income:,}")

    roi = forecast.summary.projected_roi
    if roi > 10:
        insights.append("Strong ROI projection indicates good investment performance")
    elif roi < 5:
        insights.append("Low ROI projection - consider rent optimization or cost reduction")
    return insights


def summary_recommendations(upcoming_expirations: int, occupancy_rate: float) -> list[dict]:
    """Quick actions for the portfolio summary card."""
    recommendations = [{
        "priority": "high",
        "title": "Generate Full Forecast",
        "description": "Run comprehensive forecast to plan for next 12 months",
        "action": "generate_forecast",
    }]
    if upcoming_expirations > 0:
        recommendations.append({
            "priority": "medium",
            "title": "Lease Renewals",
            "description": f"{upcoming_expirations} lease(s) expiring in next 6 months",
            "action": "plan_renewals",
        })
    if occupancy_rate < 85:
        recommendations.append({
            "priority": "medium",
            "title": "Improve Occupancy",
            "description": f"Occupancy at {round(occupancy_rate)}% - consider marketing improvements",
            "action": "boost_occupancy",
        })
    return recommendations


# ---------------------------------------------------------------------------
# Turnover interventions
# ---------------------------------------------------------------------------

def intervention_recommendations(factors: dict[str, RiskFactor], prediction: TurnoverPrediction) -> list[dict]:
    interventions = []

    payment = factors.get("payment_history")
    if payment and payment.risk_level in (HIGH, MEDIUM):
        interventions.append({
            "type": "payment",
            "priority": "high",
            "title": "Payment Plan Discussion",
            "description": "Schedule a meeting with tenant to discuss payment difficulties "
                           "and potential payment plan options.",
            "estimatedImpact": "high",
            "timeline": "immediate",
        })

    maintenance = factors.get("maintenance_issues")
    if maintenance and maintenance.risk_level == HIGH:
        open_tickets = maintenance.metrics.get("openTickets", 0)
        interventions.append({
            "type": "maintenance",
            "priority": "high",
            "title": "Expedite Open Maintenance Requests",
            "description": f"Address {open_tickets} open maintenance tickets immediately "
                           "to improve tenant satisfaction.",
            "estimatedImpact": "high",
            "timeline": "immediate",
        })

    rent = factors.get("rent_competitiveness")
    rent_diff = rent.metrics.get("rentDifference") if rent else None
    if rent_diff is not None and rent_diff > RENT_OVER_MARKET_PCT:
        interventions.append({
            "type": "pricing",
            "priority": "medium",
            "title": "Consider Rent Adjustment",
            "description": f"Rent is {rent_diff}% above market. Consider adjustment or justify with value-adds.",
            "estimatedImpact": "high",
            "timeline": "short",
        })

    term = factors.get("lease_term")
    days_left = term.metrics.get("daysUntilExpiry") if term else None
    if days_left is not None and days_left <= RENEWAL_OUTREACH_DAYS:
        interventions.append({
            "type": "renewal",
            "priority": "high",
            "title": "Proactive Lease Renewal Discussion",
            "description": f"Lease expires in {days_left} days. Initiate renewal conversation with incentives.",
            "estimatedImpact": "high",
            "timeline": "immediate",
        })

    if prediction.risk_level == HIGH:
        interventions.append({
            "type": "retention",
            "priority": "high",
            "title": "Tenant Satisfaction Survey",
            "description": "Conduct a satisfaction survey to identify specific concerns "
                           "and improvement opportunities.",
            "estimatedImpact": "medium",
            "timeline": "short",
        })

    return interventions


def retention_strategies(prediction: TurnoverPrediction) -> list[dict]:
    strategies = []
    if prediction.risk_level == HIGH:
        strategies.append({
            "category": "Financial Incentives",
            "strategies": [
                "Offer lease renewal bonus (1-month rent credit)",
                "Provide property upgrade allowance",
                "Consider temporary rent freeze",
            ],
        })
        strategies.append({
            "category": "Service Excellence",
            "strategies": [
                "Priority maintenance response",
                "Quarterly property inspections",
                "Direct landlord communication channel",
            ],
        })

    if prediction.risk_level in (MEDIUM, HIGH):
        strategies.append({
            "category": "Property Improvements",
            "strategies": [
                "Minor upgrades (new appliances, paint, flooring)",
                "Enhanced amenities (smart thermostats, security)",
                "Landscaping and common area improvements",
            ],
        })

    strategies.append({
        "category": "Communication & Engagement",
        "strategies": [
            "Regular check-ins and satisfaction surveys",
            "Holiday cards and appreciation gestures",
            "Quick response to tenant requests and concerns",
        ],
    })
    return strategies


# ---------------------------------------------------------------------------
# Portfolio aggregation
# ---------------------------------------------------------------------------

def _lease_refs(analyses: list[dict]) -> list[dict]:
    return [{"leaseId": a["leaseId"], "tenant": a.get("tenant"), "property": a.get("property")} for a in analyses]


def portfolio_priorities(analyses: list[dict]) -> list[dict]:
    """Critical / high / systemic actions from per-lease breakdown entries."""
    if not analyses:
        return []
    priorities = []
    high_risk = [a for a in analyses if a.get("riskLevel") == HIGH]

    critical, runway = [], []
    for a in high_risk:
        days_left = a.get("daysUntilExpiry")
        if days_left is not None and days_left <= CRITICAL_EXPIRY_DAYS:
            critical.append(a)
        else:
            runway.append(a)

    if critical:
        priorities.append({
            "priority": "critical",
            "type": "immediate_intervention",
            "title": "Critical Turnover Risk",
            "description": f"{len(critical)} lease(s) at high risk with expiration within {CRITICAL_EXPIRY_DAYS} days",
            "leases": _lease_refs(critical),
            "action": "Schedule immediate tenant meetings and renewal discussions",
        })

    if runway:
        priorities.append({
            "priority": "high",
            "type": "retention_strategy",
            "title": "High Turnover Risk",
            "description": f"{len(runway)} lease(s) at high risk of turnover",
            "leases": _lease_refs(runway),
            "action": "Implement retention strategies and address underlying issues",
        })

    high_share = len(high_risk) / len(analyses) * 100
    if high_share > SYSTEMIC_HIGH_RISK_PCT:
        priorities.append({
            "priority": "medium",
            "type": "portfolio_review",
            "title": "Portfolio Risk Assessment",
            "description": f"{high_share:.1f}% of leases are high-risk - consider systemic improvements",
            "action": "Review property management practices and market positioning",
        })

    return priorities


def portfolio_insights(risk_distribution: dict, timeframe_distribution: dict) -> list[str]:
    insights = []
    if risk_distribution.get("high", 0) > 30:
        insights.append("High-risk portfolio: Consider comprehensive retention strategy")
    if timeframe_distribution.get("immediate", 0) + timeframe_distribution.get("short", 0) > 5:
        insights.append("Multiple leases need immediate attention for renewals")
    if risk_distribution.get("low", 0) > 70:
        insights.append("Strong tenant retention - maintain current practices")
    return insights


def portfolio_trends(analyses: list[dict]) -> dict:
    total = len(analyses)
    risk_distribution = {
        level: (sum(1 for a in analyses if a.get("riskLevel") == level) / total * 100 if total else 0.0)
        for level in ("high", "medium", "low")
    }
    timeframe_distribution = {
        timeframe: sum(1 for a in analyses if a.get("timeframe") == timeframe)
        for timeframe in ("immediate", "short", "medium", "long")
    }
    return {
        "riskDistribution": [
            {"level": level, "percentage": round(pct)} for level, pct in risk_distribution.items()
        ],
        "timeframeDistribution": timeframe_distribution,
        "insights": portfolio_insights(risk_distribution, timeframe_distribution),
    }
