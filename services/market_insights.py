"""Market context for a portfolio: comparable rents, listing trends, concentration."""

import logging
from collections import defaultdict
from datetime import date

import numpy as np

from models.entities import Property, add_months

logger = logging.getLogger(__name__)

MARKET_COMPARABLES_LIMIT = 50
TREND_WINDOW_MONTHS = 6
TREND_THRESHOLD_PCT = 3.0


def group_by_market(properties: list[Property]) -> dict[str, list[Property]]:
    markets = defaultdict(list)
    for prop in properties:
        markets[prop.market].append(prop)
    return dict(markets)


def calc_concentration_risk(markets: dict[str, list]) -> str:
    """Risk from the largest single-market share of the portfolio."""
    total = sum(len(props) for props in markets.values())
    if total == 0:
        return "unknown"
    max_share = max(len(props) / total * 100 for props in markets.values())
    if max_share >= 75:
        return "high"
    if max_share >= 50:
        return "medium"
    return "low"


def calc_listing_trend(comparables: list[Property], as_of: date) -> str:
    """Recent listings vs older ones: >3% higher is increasing, <-3% decreasing."""
    cutoff = add_months(as_of, -TREND_WINDOW_MONTHS)
    recent = [p.rent_amount for p in comparables if p.created_at and p.created_at > cutoff]
    older = [p.rent_amount for p in comparables if p.created_at and p.created_at <= cutoff]
    if not recent or not older:
        return "stable"

    older_avg = float(np.mean(older))
    change = (float(np.mean(recent)) - older_avg) / older_avg * 100
    if change > TREND_THRESHOLD_PCT:
        return "increasing"
    if change < -TREND_THRESHOLD_PCT:
        return "decreasing"
    return "stable"


def analyze_market(repository, market_properties: list[Property], as_of: date) -> dict:
    sample = market_properties[0]
    comparables = repository.find_comparables(sample.city, sample.state, limit=MARKET_COMPARABLES_LIMIT)
    if not comparables:
        return {"averageRent": 0, "marketSize": 0, "trend": "unknown",
                "propertyCount": len(market_properties)}

    return {
        "averageRent": round(float(np.mean([p.rent_amount for p in comparables]))),
        "marketSize": len(comparables),
        "trend": calc_listing_trend(comparables, as_of),
        "propertyCount": len(market_properties),
    }


def get_market_insights(repository, properties: list[Property], as_of: date) -> dict:
    """Per-market comparables summary plus diversification.

    Lookup failures degrade to an empty result with `unknown` concentration risk.
    """
    try:
        markets = group_by_market(properties)
        insights = {name: analyze_market(repository, props, as_of) for name, props in markets.items()}
        logger.info(f"Market insights built for {len(markets)} markets")
        return {
            "markets": insights,
            "diversification": {
                "marketCount": len(markets),
                "concentrationRisk": calc_concentration_risk(markets),
            },
        }
    except Exception as e:
        logger.warning(f"Market insights unavailable: {e}")
        return {
            "markets": {},
            "diversification": {"marketCount": 0, "concentrationRisk": "unknown"},
        }
