"""Tenant turnover prediction for single leases and whole portfolios."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import numpy as np

from config import REASONING_MAX_WORKERS
from models.entities import ACTIVE, EXPIRED, IN_PROGRESS, OPEN, TERMINATED, Lease
from models.recommendations import (
    intervention_recommendations, portfolio_priorities, portfolio_trends, retention_strategies,
)
from models.risk_factors import (
    MAX_COMPARABLES, MAX_HISTORICAL_LEASES, UNKNOWN, RiskFactor,
    evaluate_historical_turnover, evaluate_lease_term, evaluate_maintenance_issues,
    evaluate_payment_history, evaluate_property_desirability, evaluate_rent_competitiveness,
    evaluate_tenant_profile, unknown_factor,
)
from models.turnover import TurnoverPrediction, assess_turnover
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DASHBOARD_EXPIRY_DAYS = 90
DASHBOARD_MAINTENANCE_DAYS = 30

DASHBOARD_ACTION_ITEMS = [
    {
        "priority": "high",
        "title": "Review Expiring Leases",
        "description": "Contact tenants with leases expiring in the next 60 days to discuss renewal options.",
        "action": "schedule_renewals",
    },
    {
        "priority": "medium",
        "title": "Run Turnover Risk Analysis",
        "description": "Analyze which tenants are most likely to not renew their leases.",
        "action": "run_analysis",
    },
]


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


class TurnoverService:
    """Turnover risk operations over an injected portfolio repository."""

    def __init__(self, repository, reasoning_client=None, max_workers: int = None, today=date.today):
        self.repository = repository
        self.reasoning_client = reasoning_client
        self.max_workers = max_workers or REASONING_MAX_WORKERS
        self.today = today

    def _load_lease(self, lease_id: str) -> Lease:
        if not lease_id or not str(lease_id).strip():
            raise ValidationError("Lease ID is required")
        lease = self.repository.get_lease(str(lease_id))
        if lease is None:
            raise NotFoundError("Lease not found")
        return lease

    # ------------------------------------------------------------------
    # Risk factors
    # ------------------------------------------------------------------

    def _rent_factor(self, lease: Lease) -> RiskFactor:
        name = "rent_competitiveness"
        prop = lease.prop
        if prop is None:
            return unknown_factor(name, "No property details available")
        try:
            comparables = self.repository.find_comparables(
                prop.city, prop.state,
                property_type=prop.property_type or None,
                bedrooms=prop.bedrooms,
                exclude_property_id=prop.id,
                limit=MAX_COMPARABLES,
            )
        except Exception as e:
            logger.warning(f"Comparables lookup failed for lease {lease.id}: {e}")
            return unknown_factor(name, "Error analyzing market rent")
        return evaluate_rent_competitiveness(lease.monthly_rent, [p.rent_amount for p in comparables])

    def _history_factor(self, lease: Lease) -> RiskFactor:
        try:
            past = self.repository.list_leases(
                property_id=lease.property_id,
                statuses=(TERMINATED, EXPIRED),
                limit=MAX_HISTORICAL_LEASES,
            )
        except Exception as e:
            logger.warning(f"Historical lease lookup failed for lease {lease.id}: {e}")
            return unknown_factor("historical_patterns", "Error analyzing historical data")
        return evaluate_historical_turnover(past)

    def calculate_risk_factors(self, lease: Lease) -> dict[str, RiskFactor]:
        """All seven factors for a lease, keyed by factor name."""
        as_of = self.today()
        payments = lease.payments or self.repository.list_payments(lease_id=lease.id)
        tickets = self.repository.list_maintenance_tickets(
            property_id=lease.property_id, tenant_id=lease.tenant_id,
        )
        factors = [
            evaluate_payment_history(payments, as_of),
            evaluate_lease_term(lease, as_of),
            evaluate_maintenance_issues(tickets, as_of),
            self._rent_factor(lease),
            evaluate_tenant_profile(lease.tenant),
            evaluate_property_desirability(lease.prop),
            self._history_factor(lease),
        ]
        return {f.name: f for f in factors}

    def _assess(self, lease: Lease) -> tuple[dict[str, RiskFactor], TurnoverPrediction]:
        factors = self.calculate_risk_factors(lease)
        return factors, assess_turnover(lease, factors, self.reasoning_client)

    # ------------------------------------------------------------------
    # Single lease
    # ------------------------------------------------------------------

    def predict_turnover(self, lease_id: str) -> dict:
        lease = self._load_lease(lease_id)
        logger.info(f"Predicting turnover for lease {lease.id}")
        factors, prediction = self._assess(lease)
        return {
            "lease": lease.to_dict(),
            "prediction": prediction.to_dict(),
            "riskFactors": {key: f.to_dict() for key, f in factors.items()},
            "interventions": intervention_recommendations(factors, prediction),
            "recommendations": retention_strategies(prediction),
        }

    def get_risk_factors(self, lease_id: str) -> dict:
        lease = self._load_lease(lease_id)
        factors = self.calculate_risk_factors(lease)
        return {
            "lease": lease.to_dict(),
            "riskFactors": {key: f.to_dict() for key, f in factors.items()},
        }

    def get_interventions(self, lease_id: str) -> dict:
        lease = self._load_lease(lease_id)
        factors, prediction = self._assess(lease)
        return {
            "leaseId": lease.id,
            "riskLevel": prediction.risk_level,
            "interventions": intervention_recommendations(factors, prediction),
            "retentionStrategies": retention_strategies(prediction),
        }

    # ------------------------------------------------------------------
    # Portfolio
    # ------------------------------------------------------------------

    def _breakdown_entry(self, lease: Lease, as_of: date) -> dict:
        entry = {
            "leaseId": lease.id,
            "tenant": lease.tenant_name,
            "property": lease.property_title,
            "daysUntilExpiry": lease.days_until_expiry(as_of),
        }
        try:
            _, prediction = self._assess(lease)
        except Exception as e:
            logger.error(f"Error analyzing lease {lease.id}: {e}")
            entry.update(riskLevel=UNKNOWN, probability=50, timeframe=UNKNOWN, error=True)
            return entry

        entry.update(
            riskLevel=prediction.risk_level,
            probability=prediction.probability,
            timeframe=prediction.timeframe,
        )
        return entry

    def analyze_portfolio_turnover(self, landlord_id: str) -> dict:
        """Assess every active lease concurrently and summarize the portfolio."""
        if not landlord_id or not str(landlord_id).strip():
            raise ValidationError("Landlord ID is required")
        as_of = self.today()
        leases = self.repository.list_leases(landlord_id=str(landlord_id), statuses=(ACTIVE,))

        if not leases:
            return {
                "summary": {
                    "totalLeases": 0,
                    "highRiskLeases": 0,
                    "mediumRiskLeases": 0,
                    "lowRiskLeases": 0,
                    "averageRisk": 0,
                },
                "riskBreakdown": [],
                "priorityActions": [],
            }

        logger.info(f"Analyzing {len(leases)} active leases for landlord {landlord_id}")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            analyses = list(pool.map(lambda l: self._breakdown_entry(l, as_of), leases))

        failed = sum(1 for a in analyses if a.get("error"))
        if failed:
            logger.warning(f"{failed} of {len(analyses)} lease analyses failed for landlord {landlord_id}")

        breakdown = sorted(analyses, key=lambda a: a["probability"], reverse=True)
        return {
            "summary": {
                "totalLeases": len(leases),
                "highRiskLeases": sum(1 for a in analyses if a["riskLevel"] == "high"),
                "mediumRiskLeases": sum(1 for a in analyses if a["riskLevel"] == "medium"),
                "lowRiskLeases": sum(1 for a in analyses if a["riskLevel"] == "low"),
                "averageRisk": round(float(np.mean([a["probability"] for a in analyses]))),
            },
            "riskBreakdown": breakdown,
            "priorityActions": portfolio_priorities(analyses),
            "trends": portfolio_trends(analyses),
        }

    def turnover_dashboard(self, landlord_id: str) -> dict:
        if not landlord_id or not str(landlord_id).strip():
            raise ValidationError("Landlord ID is required")
        landlord_id = str(landlord_id)
        as_of = self.today()

        active = self.repository.list_leases(landlord_id=landlord_id, statuses=(ACTIVE,))
        cutoff = as_of + timedelta(days=DASHBOARD_EXPIRY_DAYS)
        expiring = sorted((l for l in active if l.end_date <= cutoff), key=lambda l: l.end_date)
        open_tickets = self.repository.list_maintenance_tickets(
            landlord_id=landlord_id,
            since=as_of - timedelta(days=DASHBOARD_MAINTENANCE_DAYS),
            statuses=(OPEN, IN_PROGRESS),
        )

        insights = []
        if expiring:
            insights.append({
                "type": "expiring_leases",
                "priority": "high",
                "title": "Leases Expiring Soon",
                "value": len(expiring),
                "description": f"{_plural(len(expiring), 'lease')} expiring in next {DASHBOARD_EXPIRY_DAYS} days",
            })
        if open_tickets:
            insights.append({
                "type": "maintenance_issues",
                "priority": "medium",
                "title": "Active Maintenance Issues",
                "value": len(open_tickets),
                "description": f"{_plural(len(open_tickets), 'open maintenance ticket')}",
            })
        insights.append({
            "type": "total_leases",
            "priority": "info",
            "title": "Active Leases",
            "value": len(active),
            "description": f"{_plural(len(active), 'active lease')} in portfolio",
        })

        return {
            "summary": {
                "totalActiveLeases": len(active),
                "expiringIn90Days": len(expiring),
                "activeMaintenance": len(open_tickets),
            },
            "expiringLeases": [{
                "leaseId": l.id,
                "tenant": l.tenant_name,
                "property": l.property_title,
                "endDate": l.end_date.isoformat(),
                "daysUntilExpiry": l.days_until_expiry(as_of),
            } for l in expiring],
            "insights": insights,
            "actionItems": [dict(item) for item in DASHBOARD_ACTION_ITEMS],
        }
