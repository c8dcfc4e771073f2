"""Turnover risk factor evaluators.

Each evaluator is a pure function of the data slice it is handed and
returns a RiskFactor scored 0-100 (higher is safer). Missing optional data
degrades to an `unknown` factor scored 50 rather than raising.
"""

from dataclasses import dataclass, field
from datetime import date

import numpy as np

from models.entities import (
    HIGH_PRIORITIES, OPEN, RESOLVED, TERMINATED,
    Lease, MaintenanceTicket, Payment, Property, Tenant, add_months,
)

LOW = "low"
LOW_MEDIUM = "low-medium"
MEDIUM = "medium"
HIGH = "high"
UNKNOWN = "unknown"
RISK_LEVELS = (LOW, LOW_MEDIUM, MEDIUM, HIGH, UNKNOWN)

DESIRABLE_PROPERTY_TYPES = ("HOUSE", "CONDO", "TOWNHOUSE")
STUDIO = "STUDIO"

MAX_COMPARABLES = 20
MAX_HISTORICAL_LEASES = 10
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class RiskFactor:
    name: str
    risk_level: str
    score: int
    details: str
    metrics: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "riskLevel": self.risk_level,
            "score": self.score,
            "details": self.details,
            **self.metrics,
        }


def unknown_factor(name: str, details: str) -> RiskFactor:
    return RiskFactor(name=name, risk_level=UNKNOWN, score=50, details=details)


def level_from_score(score: int) -> str:
    """Shared bands for the completeness-style evaluators."""
    if score >= 80:
        return LOW
    if score >= 60:
        return MEDIUM
    return HIGH


def evaluate_payment_history(payments: list[Payment], as_of: date) -> RiskFactor:
    """Late and missed payment rates over the trailing 12 months."""
    name = "payment_history"
    if not payments:
        return unknown_factor(name, "No payment history available")

    since = add_months(as_of, -12)
    recent = [p for p in payments if p.due_date >= since]
    late = [p for p in recent if p.is_late]
    missed = [p for p in recent if p.is_missed]

    late_rate = len(late) / len(recent) * 100 if recent else 0.0
    missed_rate = len(missed) / len(recent) * 100 if recent else 0.0

    if missed_rate > 10:
        level, score = HIGH, 20
    elif late_rate > 30 or missed_rate > 0:
        level, score = MEDIUM, 50
    elif late_rate > 10:
        level, score = LOW_MEDIUM, 75
    else:
        level, score = LOW, 100

    return RiskFactor(
        name=name,
        risk_level=level,
        score=score,
        details=f"{len(late)} late payments, {len(missed)} missed payments in last 12 months",
        metrics={
            "latePaymentRate": round(late_rate),
            "missedPaymentRate": round(missed_rate),
            "totalPayments": len(recent),
        },
    )


def evaluate_lease_term(lease: Lease, as_of: date) -> RiskFactor:
    """Proximity to lease end, penalizing short (<= 6 month) leases."""
    days_left = lease.days_until_expiry(as_of)
    duration_months = int(np.ceil((lease.end_date - lease.start_date).days / DAYS_PER_MONTH))

    if days_left <= 60:
        level, score = HIGH, 30
    elif days_left <= 90:
        level, score = MEDIUM, 60
    elif days_left <= 180:
        level, score = LOW_MEDIUM, 80
    else:
        level, score = LOW, 100

    if duration_months <= 6:
        score = max(score - 20, 10)

    return RiskFactor(
        name="lease_term",
        risk_level=level,
        score=score,
        details=f"Lease expires in {days_left} days ({duration_months}-month lease)",
        metrics={
            "daysUntilExpiry": days_left,
            "leaseDurationMonths": duration_months,
            "status": lease.status,
        },
    )


def calc_avg_resolution_days(tickets: list[MaintenanceTicket]) -> float:
    resolved = [t for t in tickets if t.status == RESOLVED]
    if not resolved:
        return 0.0
    total = sum((t.completed_at - t.created_at).days for t in resolved if t.completed_at)
    return total / len(resolved)


def evaluate_maintenance_issues(tickets: list[MaintenanceTicket], as_of: date) -> RiskFactor:
    """Ticket volume, open backlog and urgent issues over the trailing 12 months."""
    name = "maintenance_issues"
    if not tickets:
        return RiskFactor(name=name, risk_level=LOW, score=100,
                          details="No maintenance issues reported",
                          metrics={"totalTickets": 0, "openTickets": 0, "highPriorityTickets": 0})

    since = add_months(as_of, -12)
    recent = [t for t in tickets if t.created_at >= since]
    open_tickets = [t for t in recent if t.status == OPEN]
    urgent = [t for t in recent if t.priority in HIGH_PRIORITIES]

    if len(open_tickets) > 2 or len(urgent) > 1:
        level, score = HIGH, 25
    elif len(recent) > 5 or open_tickets:
        level, score = MEDIUM, 50
    elif len(recent) > 2:
        level, score = LOW_MEDIUM, 75
    else:
        level, score = LOW, 100

    return RiskFactor(
        name=name,
        risk_level=level,
        score=score,
        details=f"{len(recent)} tickets in 12 months, {len(open_tickets)} still open",
        metrics={
            "totalTickets": len(recent),
            "openTickets": len(open_tickets),
            "highPriorityTickets": len(urgent),
            "avgResolutionDays": round(calc_avg_resolution_days(recent)),
        },
    )


def evaluate_rent_competitiveness(current_rent: float, comparable_rents: list[float]) -> RiskFactor:
    """Current rent vs the mean of up to 20 comparable active listings."""
    name = "rent_competitiveness"
    rents = [r for r in comparable_rents[:MAX_COMPARABLES] if r]
    if not rents:
        return unknown_factor(name, "No comparable properties found")

    market_avg = float(np.mean(rents))
    diff = (current_rent - market_avg) / market_avg * 100

    if diff > 20:
        level, score = HIGH, 20
    elif diff > 10:
        level, score = MEDIUM, 50
    elif diff > 5:
        level, score = LOW_MEDIUM, 75
    elif diff < -10:
        # Far below market is an anomaly worth a look, not a strength
        level, score = MEDIUM, 60
    else:
        level, score = LOW, 100

    sign = "+" if diff > 0 else ""
    return RiskFactor(
        name=name,
        risk_level=level,
        score=score,
        details=f"Rent is {sign}{diff:.1f}% vs market average",
        metrics={
            "currentRent": current_rent,
            "marketAverage": round(market_avg),
            "rentDifference": round(diff, 2),
            "comparableCount": len(rents),
        },
    )


def evaluate_tenant_profile(tenant: Tenant | None) -> RiskFactor:
    """Profile completeness as a proxy for tenant engagement."""
    name = "tenant_profile"
    if tenant is None:
        return unknown_factor(name, "No tenant profile available")

    score = 100
    notes = []

    if tenant.budget_min and tenant.budget_max:
        notes.append("Budget preferences available")
    else:
        score -= 10
        notes.append("Limited budget information")

    if tenant.first_name and tenant.last_name and tenant.phone:
        notes.append("Complete profile information")
    else:
        score -= 15
        notes.append("Incomplete profile")

    if tenant.preferences:
        notes.append("Preferences documented")
    else:
        score -= 10

    return RiskFactor(
        name=name,
        risk_level=level_from_score(score),
        score=score,
        details=f"Profile completeness: {score}%",
        metrics={"tenantId": tenant.id, "profileCompleteness": score, "factors": notes},
    )


def evaluate_property_desirability(prop: Property | None) -> RiskFactor:
    name = "property_factors"
    if prop is None:
        return unknown_factor(name, "No property details available")

    score = 100
    notes = []

    if prop.square_feet:
        notes.append("Size documented")
    else:
        score -= 10

    if prop.amenities:
        notes.append(f"{len(prop.amenities)} amenities listed")
    else:
        score -= 15
        notes.append("Limited amenities information")

    prop_type = (prop.property_type or "").upper()
    if prop_type in DESIRABLE_PROPERTY_TYPES:
        notes.append("Desirable property type")
    elif prop_type == STUDIO:
        score -= 20
        notes.append("Studio apartments have higher turnover")

    return RiskFactor(
        name=name,
        risk_level=level_from_score(score),
        score=score,
        details=f"Property score: {score}/100",
        metrics={"propertyType": prop.property_type, "factors": notes},
    )


def evaluate_historical_turnover(past_leases: list[Lease]) -> RiskFactor:
    """Average tenancy length and early-termination rate of ended leases."""
    name = "historical_patterns"
    ended = sorted(past_leases, key=lambda l: l.end_date, reverse=True)[:MAX_HISTORICAL_LEASES]
    if not ended:
        return unknown_factor(name, "No historical lease data")

    durations = [(l.end_date - l.start_date).days / DAYS_PER_MONTH for l in ended]
    avg_duration = float(np.mean(durations))
    terminated = sum(1 for l in ended if l.status == TERMINATED)
    termination_rate = terminated / len(ended) * 100

    if avg_duration < 8:
        level, score = HIGH, 30
    elif avg_duration < 12:
        level, score = MEDIUM, 60
    else:
        level, score = LOW, 100

    if termination_rate > 30:
        score = min(score, 40)
        level = HIGH

    return RiskFactor(
        name=name,
        risk_level=level,
        score=score,
        details=f"Avg lease: {avg_duration:.1f} months, {termination_rate:.0f}% early termination rate",
        metrics={
            "avgLeaseDuration": round(avg_duration),
            "terminationRate": round(termination_rate),
            "totalHistoricalLeases": len(ended),
        },
    )
