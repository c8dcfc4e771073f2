"""Tests for the in-memory portfolio store."""

from factories import AS_OF, LANDLORD_ID, comparables, make_property
from models.entities import EXPIRED, TERMINATED, add_months
from services.portfolio_store import InMemoryPortfolioStore


class TestQueries:
    def test_get_lease_is_hydrated(self, store):
        lease = store.get_lease("lease-9")
        assert lease.prop.id == "prop-9"
        assert len(lease.payments) == 12

    def test_missing_records(self, store):
        assert store.get_lease("nope") is None
        assert store.get_property("nope") is None

    def test_list_properties_scoped_to_landlord(self, store):
        ids = {p.id for p in store.list_properties(LANDLORD_ID)}
        assert ids == {"prop-1", "prop-9", "prop-vacant"}

    def test_list_leases_filters(self, store):
        history = store.list_leases(property_id="prop-9", statuses=(TERMINATED, EXPIRED))
        assert [l.id for l in history] == ["old-2", "old-1"]
        expiring = store.list_leases(landlord_id=LANDLORD_ID, ending_on_or_before=add_months(AS_OF, 3))
        assert {l.id for l in expiring} == {"lease-9", "old-1", "old-2"}

    def test_list_leases_limit(self, store):
        assert len(store.list_leases(landlord_id=LANDLORD_ID, limit=2)) == 2

    def test_list_payments_since(self, store):
        payments = store.list_payments(lease_id="lease-1", since=add_months(AS_OF, -3))
        assert len(payments) == 3
        assert payments[0].due_date > payments[-1].due_date

    def test_tickets_by_tenant(self, store):
        assert len(store.list_maintenance_tickets(tenant_id="tenant-9")) == 3
        assert store.list_maintenance_tickets(tenant_id="tenant-1") == []


class TestComparables:
    def test_matches_type_and_bedrooms(self, store):
        found = store.find_comparables("Austin", "TX", property_type="HOUSE", bedrooms=2,
                                       exclude_property_id="prop-1")
        assert {p.id for p in found} == {"comp-house-0", "comp-house-1", "comp-house-2"}

    def test_excludes_subject(self, store):
        found = store.find_comparables("Austin", "TX", property_type="STUDIO", bedrooms=0,
                                       exclude_property_id="prop-9")
        assert "prop-9" not in {p.id for p in found}

    def test_limit_capped(self):
        store = InMemoryPortfolioStore(properties=comparables(60))
        assert len(store.find_comparables("Austin", "TX", limit=500)) == 50

    def test_skips_unpriced(self):
        store = InMemoryPortfolioStore(properties=[make_property("free", rent=None)])
        assert store.find_comparables("Austin", "TX") == []


def test_from_dict():
    store = InMemoryPortfolioStore.from_dict({
        "properties": [{"id": 7, "landlordId": "ll", "addressCity": "Denver", "addressState": "CO",
                        "propertyType": "CONDO", "rentAmount": 1800}],
        "leases": [{"id": "l7", "propertyId": "7", "tenantId": "t7",
                    "startDate": "2025-01-01", "endDate": "2025-12-31T00:00:00Z", "monthlyRent": 1800}],
        "payments": [{"id": "p1", "leaseId": "l7", "amount": 1800, "dueDate": "2025-02-01",
                      "status": "PAID", "paidDate": "2025-02-01"}],
        "maintenanceTickets": [{"id": "m1", "propertyId": "7", "createdAt": "2025-03-02"}],
    })
    lease = store.get_lease("l7")
    assert lease.prop.market == "Denver, CO"
    assert lease.end_date.isoformat() == "2025-12-31"
    assert lease.payments[0].is_on_time
    assert len(store.list_maintenance_tickets(landlord_id="ll")) == 1
