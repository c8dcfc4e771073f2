from dataclasses import dataclass, field


# Maintenance seasonality by calendar month (1 = January).
# Heating drives the winter spike, cooling the summer one.
SEASONALITY_FACTORS = {
    1: 1.2,   # January - high heating/maintenance
    2: 1.1,
    3: 1.0,
    4: 0.9,
    5: 0.9,
    6: 1.1,   # June - AC season starts
    7: 1.2,   # July - peak AC
    8: 1.2,
    9: 1.0,
    10: 0.9,
    11: 1.0,
    12: 1.1,  # December - heating season
}


@dataclass
class ForecastPolicy:
    """Tunable assumptions behind the base forecast projector."""
    renewal_rate: float = 0.80
    # Revenue lost per 100% of leases lost to non-renewal
    revenue_impact_per_lost_share: float = 0.10
    occupancy_floor: float = 0.70
    occupancy_cap: float = 1.00
    monthly_maintenance_inflation: float = 0.002  # ~2.4%/yr
    seasonality: dict = field(default_factory=lambda: dict(SEASONALITY_FACTORS))
    # Confidence curve
    base_confidence: float = 90
    confidence_step: float = 3
    history_baseline_months: int = 12
    missing_history_penalty: float = 2
    confidence_floor: float = 20
    confidence_cap: float = 95
    # Lookback used for the portfolio trend series
    history_months: int = 24


@dataclass(frozen=True)
class ScenarioSpec:
    """Fixed multiplier set applied to an already-projected base curve."""
    key: str
    name: str
    description: str
    revenue_multiplier: float
    maintenance_multiplier: float
    occupancy_shift: float  # percentage points


SCENARIO_SPECS = (
    ScenarioSpec(
        key="optimistic",
        name="Optimistic Growth",
        description="20% revenue growth, reduced maintenance costs, improved occupancy",
        revenue_multiplier=1.20,
        maintenance_multiplier=0.80,
        occupancy_shift=5,
    ),
    ScenarioSpec(
        key="conservative",
        name="Conservative Growth",
        description="5% revenue growth, increased maintenance costs, lower occupancy",
        revenue_multiplier=1.05,
        maintenance_multiplier=1.15,
        occupancy_shift=-5,
    ),
    ScenarioSpec(
        key="pessimistic",
        name="Economic Downturn",
        description="No revenue growth, high maintenance costs, market challenges",
        revenue_multiplier=1.00,
        maintenance_multiplier=1.30,
        occupancy_shift=-10,
    ),
)

SCENARIO_OCCUPANCY_BOUNDS = (50, 100)

# Fallback turnover bands: (average score below, risk level, probability)
FALLBACK_RISK_BANDS = (
    (40, "high", 75),
    (70, "medium", 50),
)
FALLBACK_DEFAULT_BAND = ("low", 25)
FALLBACK_REASONING = "Prediction based on risk factor analysis due to AI service unavailability."

# Recommendation thresholds
UPSIDE_NET_INCOME_PCT = 15.0
DOWNSIDE_NET_INCOME_PCT = 25.0
MAINTENANCE_RATIO_PCT = 15.0
SCENARIO_UPSIDE_DOLLARS = 10000
SCENARIO_DOWNSIDE_DOLLARS = 5000
RENT_OVER_MARKET_PCT = 10.0
RENEWAL_OUTREACH_DAYS = 90
CRITICAL_EXPIRY_DAYS = 60
SYSTEMIC_HIGH_RISK_PCT = 25.0


def policy_from_config() -> ForecastPolicy:
    """Build a ForecastPolicy with overrides from the environment."""
    from config import (
        FORECAST_RENEWAL_RATE, FORECAST_MAINTENANCE_INFLATION, FORECAST_OCCUPANCY_FLOOR,
    )
    return ForecastPolicy(
        renewal_rate=FORECAST_RENEWAL_RATE,
        monthly_maintenance_inflation=FORECAST_MAINTENANCE_INFLATION,
        occupancy_floor=FORECAST_OCCUPANCY_FLOOR,
    )
