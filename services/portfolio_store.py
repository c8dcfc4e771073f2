"""Read-only portfolio/lease query backends.

`PortfolioRepository` is the query surface the forecasting and turnover
services depend on. `InMemoryPortfolioStore` serves local runs and tests;
`services.api_clients.property_api_client.PropertyApiClient` reads the
platform REST API.
"""

import logging
from dataclasses import replace
from datetime import date

from models.entities import ACTIVE, Lease, MaintenanceTicket, Payment, Property

logger = logging.getLogger(__name__)

MAX_COMPARABLES_LIMIT = 50


class PortfolioRepository:
    """Query interface for properties, leases, payments and maintenance tickets."""

    def get_lease(self, lease_id: str) -> Lease | None:
        raise NotImplementedError

    def get_property(self, property_id: str) -> Property | None:
        raise NotImplementedError

    def list_properties(self, landlord_id: str, status: str | None = ACTIVE) -> list[Property]:
        raise NotImplementedError

    def list_leases(self, landlord_id: str = None, property_id: str = None, tenant_id: str = None,
                    statuses: tuple | None = None, ending_on_or_before: date = None,
                    limit: int = None) -> list[Lease]:
        """Leases matching every given filter, most recent end date first."""
        raise NotImplementedError

    def list_payments(self, landlord_id: str = None, property_id: str = None,
                      lease_id: str = None, since: date = None) -> list[Payment]:
        raise NotImplementedError

    def list_maintenance_tickets(self, landlord_id: str = None, property_id: str = None,
                                 tenant_id: str = None, since: date = None,
                                 statuses: tuple | None = None) -> list[MaintenanceTicket]:
        raise NotImplementedError

    def find_comparables(self, city: str, state: str, property_type: str = None,
                         bedrooms: int = None, exclude_property_id: str = None,
                         limit: int = 20) -> list[Property]:
        """Active properties with a rent amount in the same market."""
        raise NotImplementedError


class InMemoryPortfolioStore(PortfolioRepository):
    """Portfolio data held in process, keyed by id."""

    def __init__(self, properties: list[Property] = None, leases: list[Lease] = None,
                 payments: list[Payment] = None, tickets: list[MaintenanceTicket] = None):
        self.properties = {p.id: p for p in properties or []}
        self.leases = {l.id: l for l in leases or []}
        self.payments = list(payments or [])
        self.tickets = list(tickets or [])

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryPortfolioStore":
        """Build a store from API-shaped (camelCase) record lists."""
        return cls(
            properties=[Property.from_dict(p) for p in data.get("properties", [])],
            leases=[Lease.from_dict(l) for l in data.get("leases", [])],
            payments=[Payment.from_dict(p) for p in data.get("payments", [])],
            tickets=[MaintenanceTicket.from_dict(t) for t in data.get("maintenanceTickets", [])],
        )

    def _landlord_of(self, property_id: str) -> str | None:
        prop = self.properties.get(property_id)
        return prop.landlord_id if prop else None

    def _lease_property(self, lease_id: str) -> str | None:
        lease = self.leases.get(lease_id)
        return lease.property_id if lease else None

    def _hydrate(self, lease: Lease) -> Lease:
        return replace(
            lease,
            prop=lease.prop or self.properties.get(lease.property_id),
            payments=lease.payments or [p for p in self.payments if p.lease_id == lease.id],
        )

    def get_lease(self, lease_id: str) -> Lease | None:
        lease = self.leases.get(lease_id)
        return self._hydrate(lease) if lease else None

    def get_property(self, property_id: str) -> Property | None:
        return self.properties.get(property_id)

    def list_properties(self, landlord_id: str, status: str | None = ACTIVE) -> list[Property]:
        return [
            p for p in self.properties.values()
            if p.landlord_id == landlord_id and (status is None or p.status == status)
        ]

    def list_leases(self, landlord_id: str = None, property_id: str = None, tenant_id: str = None,
                    statuses: tuple | None = None, ending_on_or_before: date = None,
                    limit: int = None) -> list[Lease]:
        leases = []
        for lease in self.leases.values():
            if landlord_id is not None and self._landlord_of(lease.property_id) != landlord_id:
                continue
            if property_id is not None and lease.property_id != property_id:
                continue
            if tenant_id is not None and lease.tenant_id != tenant_id:
                continue
            if statuses is not None and lease.status not in statuses:
                continue
            if ending_on_or_before is not None and lease.end_date > ending_on_or_before:
                continue
            leases.append(self._hydrate(lease))

        leases.sort(key=lambda l: l.end_date, reverse=True)
        return leases[:limit] if limit else leases

    def list_payments(self, landlord_id: str = None, property_id: str = None,
                      lease_id: str = None, since: date = None) -> list[Payment]:
        payments = []
        for payment in self.payments:
            lease_property = self._lease_property(payment.lease_id)
            if lease_id is not None and payment.lease_id != lease_id:
                continue
            if property_id is not None and lease_property != property_id:
                continue
            if landlord_id is not None and self._landlord_of(lease_property) != landlord_id:
                continue
            if since is not None and payment.due_date < since:
                continue
            payments.append(payment)
        return sorted(payments, key=lambda p: p.due_date, reverse=True)

    def list_maintenance_tickets(self, landlord_id: str = None, property_id: str = None,
                                 tenant_id: str = None, since: date = None,
                                 statuses: tuple | None = None) -> list[MaintenanceTicket]:
        tickets = []
        for ticket in self.tickets:
            if landlord_id is not None and self._landlord_of(ticket.property_id) != landlord_id:
                continue
            if property_id is not None and ticket.property_id != property_id:
                continue
            if tenant_id is not None and ticket.tenant_id != tenant_id:
                continue
            if since is not None and ticket.created_at < since:
                continue
            if statuses is not None and ticket.status not in statuses:
                continue
            tickets.append(ticket)
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)

    def find_comparables(self, city: str, state: str, property_type: str = None,
                         bedrooms: int = None, exclude_property_id: str = None,
                         limit: int = 20) -> list[Property]:
        limit = min(limit, MAX_COMPARABLES_LIMIT)
        matches = [
            p for p in self.properties.values()
            if p.city == city and p.state == state
            and p.status == ACTIVE and p.rent_amount
            and (property_type is None or p.property_type == property_type)
            and (bedrooms is None or p.bedrooms == bedrooms)
            and p.id != exclude_property_id
        ]
        return matches[:limit]
