"""Shared fixtures: a fixed reference date and a small two-lease portfolio."""

import pytest

from factories import (
    AS_OF, LANDLORD_ID, comparables, make_lease, make_property, make_tenant,
    make_ticket, monthly_payments, past_lease,
)
from models.entities import add_months
from models.assumptions import ForecastPolicy
from services.portfolio_store import InMemoryPortfolioStore


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def policy():
    return ForecastPolicy()


@pytest.fixture
def steady_lease():
    """On-time payer, 200 days left, no tickets, rent at market."""
    return make_lease("lease-1", prop=make_property("prop-1"), days_left=200)


@pytest.fixture
def struggling_lease():
    """Missed payments, open tickets, 30 days left, rent well over market."""
    studio = make_property("prop-9", rent=2500.0, property_type="STUDIO", bedrooms=0,
                           square_feet=None, amenities=[])
    return make_lease("lease-9", prop=studio, tenant=make_tenant("tenant-9", complete=False),
                      days_left=30, rent=2500.0)


@pytest.fixture
def store(steady_lease, struggling_lease):
    studio = struggling_lease.prop
    vacant = make_property("prop-vacant", rent=1500.0, property_type="CONDO", bedrooms=3)
    tickets = [
        make_ticket(f"t-9-{i}", studio, days_ago=10 + i, tenant_id=struggling_lease.tenant_id,
                    estimated_cost=300.0)
        for i in range(3)
    ]
    history = [
        past_lease("old-1", studio, add_months(AS_OF, -30), 6),
        past_lease("old-2", studio, add_months(AS_OF, -20), 6),
    ]
    return InMemoryPortfolioStore(
        properties=[steady_lease.prop, studio, vacant]
        + comparables(3, rent=2000.0)
        + comparables(3, rent=2000.0, property_type="STUDIO", bedrooms=0, landlord_id="other-studio"),
        leases=[steady_lease, struggling_lease] + history,
        payments=monthly_payments("lease-1") + monthly_payments("lease-9", amount=2500.0, missed=3),
        tickets=tickets,
    )


@pytest.fixture
def landlord_id():
    return LANDLORD_ID
