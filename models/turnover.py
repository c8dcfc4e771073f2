"""Composite turnover risk assessor.

Asks the reasoning client for a structured prediction over a lease's risk
factors and falls back to a score-band heuristic whenever that answer is
unavailable or unusable. Always returns a TurnoverPrediction.
"""

import logging
from dataclasses import dataclass

import numpy as np

from models.assumptions import FALLBACK_DEFAULT_BAND, FALLBACK_REASONING, FALLBACK_RISK_BANDS
from models.entities import Lease
from models.risk_factors import RiskFactor
from models.reasoning import (
    ReasoningMalformed, ReasoningOk, ReasoningTimeout, ReasoningTransportError,
)

logger = logging.getLogger(__name__)

PREDICTED_RISK_LEVELS = ("low", "medium", "high")
CONFIDENCE_LEVELS = ("low", "medium", "high")
TIMEFRAMES = ("immediate", "short", "medium", "long")

DEFAULT_RISK = "medium"
DEFAULT_CONFIDENCE = "medium"
DEFAULT_PROBABILITY = 50
DEFAULT_TIMEFRAME = "medium"
DEFAULT_REASONING = "Analysis based on available risk factors."

AI_METHOD = "ai"
FALLBACK_METHOD = "fallback"

FACTOR_LABELS = {
    "payment_history": "Payment History",
    "lease_term": "Lease Term",
    "maintenance_issues": "Maintenance Issues",
    "rent_competitiveness": "Rent Competitiveness",
    "tenant_profile": "Tenant Profile",
    "property_factors": "Property Desirability",
    "historical_patterns": "Historical Patterns",
}

SYSTEM_PROMPT = (
    "You are an expert property management analyst specializing in tenant retention "
    "and turnover prediction. Analyze the provided lease and risk factor data to predict "
    "turnover likelihood. Respond only with a JSON object."
)


@dataclass(frozen=True)
class TurnoverPrediction:
    risk_level: str
    confidence: str
    probability: float
    timeframe: str
    reasoning: str
    method: str = AI_METHOD

    def to_dict(self) -> dict:
        return {
            "turnoverRisk": self.risk_level,
            "confidence": self.confidence,
            "probability": self.probability,
            "timeframe": self.timeframe,
            "reasoning": self.reasoning,
        }


def build_turnover_prompt(lease: Lease, factors: dict[str, RiskFactor]) -> str:
    """Lease facts plus every factor score, with the expected JSON shape."""
    lines = [
        "Lease Information:",
        f"- Tenant: {lease.tenant_name or 'Unknown'}",
        f"- Property: {lease.property_title or 'Unknown'}",
        f"- Monthly Rent: ${lease.monthly_rent:,.0f}",
        f"- Lease End Date: {lease.end_date.isoformat()}",
        f"- Lease Status: {lease.status}",
        "",
        "Risk Factor Analysis:",
    ]
    for key, factor in factors.items():
        label = FACTOR_LABELS.get(key, key)
        lines.append(f"- {label}: {factor.risk_level} (Score: {factor.score}/100)")
        lines.append(f"  {factor.details}")

    lines += [
        "",
        "Provide your analysis in JSON format with:",
        '- turnoverRisk: "low", "medium", or "high"',
        '- confidence: "low", "medium", or "high"',
        "- probability: number (0-100) representing likelihood of turnover",
        '- timeframe: "immediate" (0-30 days), "short" (1-3 months), '
        '"medium" (3-6 months), or "long" (6+ months)',
        "- reasoning: string explaining your prediction (2-3 sentences)",
    ]
    return "\n".join(lines)


def _choice(value, allowed: tuple, default: str) -> str:
    if isinstance(value, str) and value.lower() in allowed:
        return value.lower()
    return default


def _clamp_probability(value) -> float:
    try:
        probability = float(value)
    except (TypeError, ValueError):
        return DEFAULT_PROBABILITY
    if np.isnan(probability):
        return DEFAULT_PROBABILITY
    return max(0.0, min(100.0, probability))


def parse_prediction(data: dict) -> TurnoverPrediction:
    """Sanitize a decoded response; missing or invalid fields take safe defaults."""
    reasoning = data.get("reasoning")
    return TurnoverPrediction(
        risk_level=_choice(data.get("turnoverRisk"), PREDICTED_RISK_LEVELS, DEFAULT_RISK),
        confidence=_choice(data.get("confidence"), CONFIDENCE_LEVELS, DEFAULT_CONFIDENCE),
        probability=_clamp_probability(data.get("probability", DEFAULT_PROBABILITY)),
        timeframe=_choice(data.get("timeframe"), TIMEFRAMES, DEFAULT_TIMEFRAME),
        reasoning=reasoning if isinstance(reasoning, str) and reasoning.strip() else DEFAULT_REASONING,
        method=AI_METHOD,
    )


def fallback_prediction(factors: dict[str, RiskFactor]) -> TurnoverPrediction:
    """Average every factor score and map it onto the fixed risk bands."""
    scores = [f.score for f in factors.values()] or [50]
    avg_score = float(np.mean(scores))

    level, probability = FALLBACK_DEFAULT_BAND
    for upper, band_level, band_probability in FALLBACK_RISK_BANDS:
        if avg_score < upper:
            level, probability = band_level, band_probability
            break

    return TurnoverPrediction(
        risk_level=level,
        confidence="low",
        probability=probability,
        timeframe=DEFAULT_TIMEFRAME,
        reasoning=FALLBACK_REASONING,
        method=FALLBACK_METHOD,
    )


def assess_turnover(lease: Lease, factors: dict[str, RiskFactor], reasoning_client=None) -> TurnoverPrediction:
    """Predict turnover for one lease; never raises on reasoning failures."""
    if reasoning_client is None:
        return fallback_prediction(factors)

    result = reasoning_client.request_json(SYSTEM_PROMPT, build_turnover_prompt(lease, factors))

    if isinstance(result, ReasoningOk):
        return parse_prediction(result.data)
    if isinstance(result, ReasoningMalformed):
        logger.warning(f"Malformed turnover prediction for lease {lease.id}: {result.reason}")
    elif isinstance(result, ReasoningTimeout):
        logger.warning(f"Turnover prediction for lease {lease.id} timed out after {result.timeout}s")
    elif isinstance(result, ReasoningTransportError):
        logger.warning(f"Turnover prediction for lease {lease.id} unavailable: {result.error}")
    else:
        logger.warning(f"Unexpected reasoning result for lease {lease.id}: {type(result).__name__}")
    return fallback_prediction(factors)
