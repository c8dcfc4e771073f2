"""Tests for the seven turnover risk factor evaluators."""

from datetime import timedelta

import pytest

from factories import (
    AS_OF, make_lease, make_property, make_tenant, make_ticket, monthly_payments, past_lease,
)
from models.entities import EXPIRED, RESOLVED, Lease, add_months
from models.risk_factors import (
    HIGH, LOW, LOW_MEDIUM, MEDIUM, RISK_LEVELS, UNKNOWN,
    evaluate_historical_turnover, evaluate_lease_term, evaluate_maintenance_issues,
    evaluate_payment_history, evaluate_property_desirability, evaluate_rent_competitiveness,
    evaluate_tenant_profile,
)


def assert_valid(factor):
    assert 0 <= factor.score <= 100
    assert factor.risk_level in RISK_LEVELS


class TestPaymentHistory:
    @pytest.mark.parametrize("missed,late,level,score", [
        (0, 0, LOW, 100),
        (0, 2, LOW_MEDIUM, 75),
        (0, 4, MEDIUM, 50),
        (1, 0, MEDIUM, 50),
        (2, 0, HIGH, 20),
    ])
    def test_bands(self, missed, late, level, score):
        factor = evaluate_payment_history(monthly_payments("l", missed=missed, late=late), AS_OF)
        assert_valid(factor)
        assert (factor.risk_level, factor.score) == (level, score)

    def test_no_payments_is_unknown(self):
        factor = evaluate_payment_history([], AS_OF)
        assert (factor.risk_level, factor.score) == (UNKNOWN, 50)
        assert factor.details == "No payment history available"

    def test_only_trailing_year_counts(self):
        payments = monthly_payments("l", count=24, missed=12)
        factor = evaluate_payment_history(payments, AS_OF)
        assert factor.metrics["totalPayments"] == 12
        assert factor.risk_level == LOW


class TestLeaseTerm:
    @pytest.mark.parametrize("days_left,level,score", [
        (200, LOW, 100),
        (120, LOW_MEDIUM, 80),
        (75, MEDIUM, 60),
        (30, HIGH, 30),
    ])
    def test_expiry_bands(self, days_left, level, score):
        factor = evaluate_lease_term(make_lease(days_left=days_left), AS_OF)
        assert_valid(factor)
        assert (factor.risk_level, factor.score) == (level, score)
        assert factor.metrics["daysUntilExpiry"] == days_left

    def test_short_lease_penalty(self):
        end = AS_OF + timedelta(days=200)
        lease = Lease(id="short", property_id="p", tenant_id="t",
                      start_date=end - timedelta(days=150), end_date=end)
        factor = evaluate_lease_term(lease, AS_OF)
        assert factor.metrics["leaseDurationMonths"] == 5
        assert factor.score == 80

    def test_short_lease_penalty_floor(self):
        end = AS_OF + timedelta(days=10)
        lease = Lease(id="short", property_id="p", tenant_id="t",
                      start_date=end - timedelta(days=90), end_date=end)
        assert evaluate_lease_term(lease, AS_OF).score == 10


class TestMaintenanceIssues:
    def test_no_tickets(self):
        factor = evaluate_maintenance_issues([], AS_OF)
        assert (factor.risk_level, factor.score) == (LOW, 100)
        assert factor.metrics["openTickets"] == 0

    def test_three_open_tickets_is_high(self):
        prop = make_property()
        tickets = [make_ticket(f"t{i}", prop) for i in range(3)]
        factor = evaluate_maintenance_issues(tickets, AS_OF)
        assert (factor.risk_level, factor.score) == (HIGH, 25)
        assert factor.metrics["openTickets"] == 3

    def test_two_urgent_tickets_is_high(self):
        prop = make_property()
        tickets = [make_ticket(f"t{i}", prop, status=RESOLVED, priority="URGENT") for i in range(2)]
        assert evaluate_maintenance_issues(tickets, AS_OF).risk_level == HIGH

    def test_one_open_ticket_is_medium(self):
        prop = make_property()
        factor = evaluate_maintenance_issues([make_ticket("t", prop)], AS_OF)
        assert (factor.risk_level, factor.score) == (MEDIUM, 50)

    def test_several_resolved_tickets_is_low_medium(self):
        prop = make_property()
        tickets = [make_ticket(f"t{i}", prop, status=RESOLVED) for i in range(3)]
        factor = evaluate_maintenance_issues(tickets, AS_OF)
        assert (factor.risk_level, factor.score) == (LOW_MEDIUM, 75)
        assert factor.metrics["avgResolutionDays"] == 3

    def test_old_tickets_ignored(self):
        prop = make_property()
        tickets = [make_ticket(f"t{i}", prop, days_ago=400) for i in range(5)]
        assert evaluate_maintenance_issues(tickets, AS_OF).score == 100


class TestRentCompetitiveness:
    @pytest.mark.parametrize("rent,level,score", [
        (2500, HIGH, 20),
        (2300, MEDIUM, 50),
        (2150, LOW_MEDIUM, 75),
        (2000, LOW, 100),
        (1700, MEDIUM, 60),
    ])
    def test_bands(self, rent, level, score):
        factor = evaluate_rent_competitiveness(rent, [2000.0, 2000.0])
        assert_valid(factor)
        assert (factor.risk_level, factor.score) == (level, score)

    def test_no_comparables_is_unknown(self):
        factor = evaluate_rent_competitiveness(2000, [])
        assert (factor.risk_level, factor.score) == (UNKNOWN, 50)

    def test_uses_at_most_twenty_comparables(self):
        factor = evaluate_rent_competitiveness(2000, [2000.0] * 20 + [9000.0] * 5)
        assert factor.metrics["comparableCount"] == 20
        assert factor.metrics["rentDifference"] == 0


class TestTenantProfile:
    def test_complete_profile(self):
        factor = evaluate_tenant_profile(make_tenant())
        assert (factor.risk_level, factor.score) == (LOW, 100)

    def test_incomplete_profile(self):
        factor = evaluate_tenant_profile(make_tenant(complete=False))
        assert factor.score == 65
        assert factor.risk_level == MEDIUM

    def test_missing_tenant_is_unknown(self):
        assert evaluate_tenant_profile(None).risk_level == UNKNOWN


class TestPropertyDesirability:
    def test_documented_house(self):
        factor = evaluate_property_desirability(make_property())
        assert (factor.risk_level, factor.score) == (LOW, 100)
        assert "Desirable property type" in factor.metrics["factors"]

    def test_bare_studio(self):
        studio = make_property(property_type="STUDIO", square_feet=None, amenities=[])
        factor = evaluate_property_desirability(studio)
        assert (factor.risk_level, factor.score) == (HIGH, 55)

    def test_missing_property_is_unknown(self):
        assert evaluate_property_desirability(None).score == 50


class TestHistoricalTurnover:
    def test_no_history_is_unknown(self):
        factor = evaluate_historical_turnover([])
        assert (factor.risk_level, factor.score) == (UNKNOWN, 50)

    def test_long_expired_leases_are_low_risk(self):
        prop = make_property()
        leases = [past_lease(f"h{i}", prop, add_months(AS_OF, -36 + 12 * i), 12, status=EXPIRED)
                  for i in range(2)]
        factor = evaluate_historical_turnover(leases)
        assert (factor.risk_level, factor.score) == (LOW, 100)

    def test_medium_duration(self):
        prop = make_property()
        leases = [past_lease("h", prop, add_months(AS_OF, -20), 10, status=EXPIRED)]
        assert evaluate_historical_turnover(leases).score == 60

    def test_high_termination_rate_caps_score(self):
        prop = make_property()
        leases = [
            past_lease("h1", prop, add_months(AS_OF, -40), 12),
            past_lease("h2", prop, add_months(AS_OF, -28), 12, status=EXPIRED),
        ]
        factor = evaluate_historical_turnover(leases)
        assert factor.score == 40
        assert factor.risk_level == HIGH
        assert factor.metrics["terminationRate"] == 50

    def test_only_ten_most_recent_considered(self):
        prop = make_property()
        leases = [past_lease(f"h{i}", prop, add_months(AS_OF, -120 + 12 * i), 12, status=EXPIRED)
                  for i in range(10)]
        leases += [past_lease("ancient", prop, add_months(AS_OF, -200), 2)]
        factor = evaluate_historical_turnover(leases)
        assert factor.metrics["totalHistoricalLeases"] == 10
        assert factor.metrics["terminationRate"] == 0
