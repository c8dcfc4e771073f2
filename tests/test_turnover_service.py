"""End-to-end turnover prediction over the in-memory store."""

from dataclasses import replace

import pytest

from factories import (
    AS_OF, FakeReasoningClient, make_lease, make_property, make_ticket, monthly_payments,
)
from services.errors import NotFoundError, ValidationError
from services.portfolio_store import InMemoryPortfolioStore
from services.reasoning_client import ReasoningOk
from services.turnover_service import TurnoverService


class FlakyStore(InMemoryPortfolioStore):
    """Fails ticket lookups for one tenant and every comparables lookup."""

    def __init__(self, base: InMemoryPortfolioStore, failing_tenant: str):
        super().__init__(list(base.properties.values()), list(base.leases.values()), base.payments, base.tickets)
        self.failing_tenant = failing_tenant

    def list_maintenance_tickets(self, *args, **kwargs):
        if kwargs.get("tenant_id") == self.failing_tenant:
            raise RuntimeError("ticket service unavailable")
        return super().list_maintenance_tickets(*args, **kwargs)

    def find_comparables(self, *args, **kwargs):
        raise RuntimeError("comparables service unavailable")


@pytest.fixture
def service(store):
    return TurnoverService(store, max_workers=2, today=lambda: AS_OF)


class TestPredictTurnover:
    def test_steady_tenant(self, service):
        result = service.predict_turnover("lease-1")
        factors = result["riskFactors"]
        assert result["prediction"]["turnoverRisk"] == "low"
        assert result["prediction"]["probability"] == 25
        assert result["prediction"]["confidence"] == "low"
        assert factors["rent_competitiveness"]["rentDifference"] == 0
        assert factors["historical_patterns"]["riskLevel"] == "unknown"
        assert result["interventions"] == []
        assert [r["category"] for r in result["recommendations"]] == ["Communication & Engagement"]

    def test_struggling_tenant(self, service):
        result = service.predict_turnover("lease-9")
        factors = result["riskFactors"]
        assert result["prediction"]["turnoverRisk"] == "high"
        assert result["prediction"]["probability"] == 75
        assert {k: f["score"] for k, f in factors.items()} == {
            "payment_history": 20,
            "lease_term": 30,
            "maintenance_issues": 25,
            "rent_competitiveness": 20,
            "tenant_profile": 65,
            "property_factors": 55,
            "historical_patterns": 30,
        }
        assert [i["type"] for i in result["interventions"]] == [
            "payment", "maintenance", "pricing", "renewal", "retention",
        ]

    def test_reasoning_client_prediction(self, store):
        client = FakeReasoningClient(ReasoningOk({"turnoverRisk": "low", "confidence": "high",
                                                  "probability": 15, "timeframe": "long",
                                                  "reasoning": "Tenant has renewed before."}))
        service = TurnoverService(store, reasoning_client=client, max_workers=1, today=lambda: AS_OF)
        result = service.predict_turnover("lease-9")
        assert result["prediction"] == {
            "turnoverRisk": "low", "confidence": "high", "probability": 15.0,
            "timeframe": "long", "reasoning": "Tenant has renewed before.",
        }
        assert "retention" not in [i["type"] for i in result["interventions"]]

    def test_unknown_lease(self, service):
        with pytest.raises(NotFoundError):
            service.predict_turnover("missing")

    @pytest.mark.parametrize("lease_id", [None, "", "  "])
    def test_lease_id_required(self, service, lease_id):
        with pytest.raises(ValidationError):
            service.get_risk_factors(lease_id)

    def test_comparables_failure_marks_rent_unknown(self, store):
        service = TurnoverService(FlakyStore(store, failing_tenant="nobody"), today=lambda: AS_OF)
        factor = service.get_risk_factors("lease-1")["riskFactors"]["rent_competitiveness"]
        assert factor["riskLevel"] == "unknown"
        assert factor["details"] == "Error analyzing market rent"

    def test_interventions(self, service):
        result = service.get_interventions("lease-9")
        assert result["leaseId"] == "lease-9"
        assert result["riskLevel"] == "high"
        assert len(result["retentionStrategies"]) == 4


class TestPortfolioTurnover:
    def test_analysis(self, service, landlord_id):
        result = service.analyze_portfolio_turnover(landlord_id)
        assert result["summary"] == {
            "totalLeases": 2,
            "highRiskLeases": 1,
            "mediumRiskLeases": 0,
            "lowRiskLeases": 1,
            "averageRisk": 50,
        }
        assert [a["leaseId"] for a in result["riskBreakdown"]] == ["lease-9", "lease-1"]
        priorities = result["priorityActions"]
        assert [p["priority"] for p in priorities] == ["critical", "medium"]
        assert priorities[0]["leases"][0]["leaseId"] == "lease-9"

    def test_failed_lease_reported_not_raised(self, store, landlord_id):
        service = TurnoverService(FlakyStore(store, failing_tenant="tenant-9"), max_workers=2,
                                  today=lambda: AS_OF)
        result = service.analyze_portfolio_turnover(landlord_id)
        failed = [a for a in result["riskBreakdown"] if a.get("error")]
        assert len(failed) == 1
        assert failed[0]["leaseId"] == "lease-9"
        assert (failed[0]["riskLevel"], failed[0]["probability"]) == ("unknown", 50)
        assert result["summary"]["totalLeases"] == 2
        assert result["priorityActions"] == []

    def test_no_active_leases(self, service):
        result = service.analyze_portfolio_turnover("ghost-landlord")
        assert result["summary"]["totalLeases"] == 0
        assert result["riskBreakdown"] == []

    def test_dashboard(self, service, landlord_id):
        result = service.turnover_dashboard(landlord_id)
        assert result["summary"] == {"totalActiveLeases": 2, "expiringIn90Days": 1, "activeMaintenance": 3}
        assert result["expiringLeases"][0]["leaseId"] == "lease-9"
        assert result["expiringLeases"][0]["daysUntilExpiry"] == 30
        assert [i["description"] for i in result["insights"]] == [
            "1 lease expiring in next 90 days",
            "3 open maintenance tickets",
            "2 active leases in portfolio",
        ]
        assert [a["action"] for a in result["actionItems"]] == ["schedule_renewals", "run_analysis"]


def test_dashboard_action_items_not_shared(service, landlord_id):
    first = service.turnover_dashboard(landlord_id)
    first["actionItems"][0]["priority"] = "low"
    first["actionItems"].clear()

    second = service.turnover_dashboard(landlord_id)
    assert [a["priority"] for a in second["actionItems"]] == ["high", "medium"]


def test_payment_maintenance_and_expiry_alone_reach_high():
    """Three missed payments, three open tickets, 30 days left; everything else unknown."""
    unit = make_property("unlisted-unit")
    lease = replace(make_lease("lease-x", prop=unit, days_left=30), prop=None, tenant=None)
    store = InMemoryPortfolioStore(
        leases=[lease],
        payments=monthly_payments("lease-x", missed=3),
        tickets=[make_ticket(f"t-x-{i}", unit, days_ago=10, tenant_id=lease.tenant_id) for i in range(3)],
    )
    result = TurnoverService(store, max_workers=1, today=lambda: AS_OF).predict_turnover("lease-x")

    scores = {k: (f["riskLevel"], f["score"]) for k, f in result["riskFactors"].items()}
    assert scores == {
        "payment_history": ("high", 20),
        "lease_term": ("high", 30),
        "maintenance_issues": ("high", 25),
        "rent_competitiveness": ("unknown", 50),
        "tenant_profile": ("unknown", 50),
        "property_factors": ("unknown", 50),
        "historical_patterns": ("unknown", 50),
    }
    assert result["prediction"]["turnoverRisk"] == "high"
    assert result["prediction"]["probability"] == 75
