"""Current portfolio state assembled fresh for each forecast request."""

from dataclasses import dataclass, field
from datetime import date

from models.entities import ACTIVE, Lease, MaintenanceTicket, Property, add_months


@dataclass
class PropertyState:
    prop: Property
    current_rent: float
    active_leases: list = field(default_factory=list)
    recent_tickets: list = field(default_factory=list)

    @property
    def has_active_lease(self) -> bool:
        return any(l.status == ACTIVE for l in self.active_leases)


@dataclass
class PortfolioSnapshot:
    properties: list
    total_monthly_revenue: float
    occupancy_rate: float  # 0-100
    average_monthly_maintenance_cost: float
    property_count: int

    @property
    def occupied_count(self) -> int:
        return sum(1 for p in self.properties if p.has_active_lease)

    def active_leases(self) -> list[Lease]:
        return [l for p in self.properties for l in p.active_leases if l.status == ACTIVE]


def build_property_state(prop: Property, leases: list[Lease],
                         tickets: list[MaintenanceTicket]) -> PropertyState:
    active = [l for l in leases if l.property_id == prop.id and l.status == ACTIVE]
    current_rent = active[0].monthly_rent if active and active[0].monthly_rent else (prop.rent_amount or 0.0)
    return PropertyState(
        prop=prop,
        current_rent=current_rent,
        active_leases=active,
        recent_tickets=[t for t in tickets if t.property_id == prop.id],
    )


def build_portfolio_snapshot(properties: list[Property], leases: list[Lease],
                             tickets: list[MaintenanceTicket], as_of: date,
                             maintenance_months: int = 12) -> PortfolioSnapshot:
    """Build the snapshot from active properties, their leases and recent tickets.

    Maintenance cost is the ticket spend over the trailing window spread
    evenly across its months.
    """
    since = add_months(as_of, -maintenance_months)
    recent = [t for t in tickets if t.created_at >= since]
    states = [build_property_state(p, leases, recent) for p in properties]

    total_revenue = sum(s.current_rent for s in states)
    occupied = sum(1 for s in states if s.has_active_lease)
    occupancy = occupied / len(states) * 100 if states else 0.0
    total_maintenance = sum(t.cost for s in states for t in s.recent_tickets)

    return PortfolioSnapshot(
        properties=states,
        total_monthly_revenue=total_revenue,
        occupancy_rate=occupancy,
        average_monthly_maintenance_cost=total_maintenance / maintenance_months,
        property_count=len(states),
    )


def build_single_property_snapshot(prop: Property, leases: list[Lease],
                                   tickets: list[MaintenanceTicket], as_of: date) -> PortfolioSnapshot:
    """Snapshot for one property; maintenance averaged over a 24-month window."""
    snapshot = build_portfolio_snapshot([prop], leases, tickets, as_of, maintenance_months=24)
    state = snapshot.properties[0]
    snapshot.occupancy_rate = 100.0 if state.has_active_lease else 0.0
    return snapshot
