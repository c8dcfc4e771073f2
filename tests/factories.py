"""Builders for portfolio records used across the test suite."""

from datetime import date, timedelta

from models.entities import (
    ACTIVE, OPEN, OVERDUE, PAID, TERMINATED,
    Lease, MaintenanceTicket, Payment, Property, Tenant, add_months,
)

AS_OF = date(2025, 6, 15)
LANDLORD_ID = "landlord-1"


def make_tenant(tenant_id="tenant-1", complete=True) -> Tenant:
    if complete:
        return Tenant(
            id=tenant_id, first_name="Dana", last_name="Reyes", email="dana@example.com",
            phone="555-0100", budget_min=1800, budget_max=2400,
            preferences={"pets": False, "parking": True},
        )
    return Tenant(id=tenant_id, first_name="Sam", last_name="", email="sam@example.com")


def make_property(property_id="prop-1", landlord_id=LANDLORD_ID, rent=2000.0,
                  property_type="HOUSE", bedrooms=2, city="Austin", state="TX",
                  square_feet=1100, amenities=None, created_at=date(2024, 1, 10)) -> Property:
    return Property(
        id=property_id,
        landlord_id=landlord_id,
        title=f"Unit {property_id}",
        city=city,
        state=state,
        property_type=property_type,
        bedrooms=bedrooms,
        rent_amount=rent,
        square_feet=square_feet,
        amenities=["parking", "laundry"] if amenities is None else amenities,
        created_at=created_at,
    )


def make_lease(lease_id="lease-1", prop=None, tenant=None, days_left=200, months=12,
               rent=2000.0, status=ACTIVE) -> Lease:
    prop = prop or make_property()
    tenant = tenant or make_tenant()
    end = AS_OF + timedelta(days=days_left)
    start = add_months(end, -months)
    return Lease(
        id=lease_id,
        property_id=prop.id,
        tenant_id=tenant.id,
        start_date=start,
        end_date=end,
        monthly_rent=rent,
        status=status,
        tenant=tenant,
        prop=prop,
    )


def past_lease(lease_id, prop, start, months, status=TERMINATED) -> Lease:
    return Lease(
        id=lease_id,
        property_id=prop.id,
        tenant_id=f"former-{lease_id}",
        start_date=start,
        end_date=add_months(start, months),
        monthly_rent=prop.rent_amount or 0.0,
        status=status,
    )


def monthly_payments(lease_id, count=12, amount=2000.0, missed=0, late=0, end=AS_OF) -> list[Payment]:
    """`count` monthly payments due on the 1st, the most recent first in the month of `end`.

    The oldest `missed` are OVERDUE, the next `late` are paid five days late.
    """
    payments = []
    for i in range(count):
        due = add_months(date(end.year, end.month, 1), -(count - 1 - i))
        if i < missed:
            payments.append(Payment(id=f"{lease_id}-p{i}", lease_id=lease_id, amount=amount,
                                    due_date=due, status=OVERDUE))
        elif i < missed + late:
            payments.append(Payment(id=f"{lease_id}-p{i}", lease_id=lease_id, amount=amount,
                                    due_date=due, status=PAID, paid_date=due + timedelta(days=5)))
        else:
            payments.append(Payment(id=f"{lease_id}-p{i}", lease_id=lease_id, amount=amount,
                                    due_date=due, status=PAID, paid_date=due))
    return payments


def make_ticket(ticket_id, prop, days_ago=20, status=OPEN, priority="MEDIUM",
                tenant_id=None, actual_cost=None, estimated_cost=None) -> MaintenanceTicket:
    created = AS_OF - timedelta(days=days_ago)
    return MaintenanceTicket(
        id=ticket_id,
        property_id=prop.id,
        created_at=created,
        tenant_id=tenant_id,
        status=status,
        priority=priority,
        completed_at=created + timedelta(days=3) if status == "RESOLVED" else None,
        actual_cost=actual_cost,
        estimated_cost=estimated_cost,
    )


def comparables(count=3, rent=2000.0, property_type="HOUSE", bedrooms=2, landlord_id="other") -> list[Property]:
    return [
        make_property(property_id=f"comp-{property_type.lower()}-{i}", landlord_id=landlord_id, rent=rent,
                      property_type=property_type, bedrooms=bedrooms)
        for i in range(count)
    ]


class FakeReasoningClient:
    """Returns a canned ReasoningResult and records every prompt it was sent."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def request_json(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        return self.result
