"""Property, lease, payment and maintenance records read from the platform API."""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime

# Lease statuses
ACTIVE = "ACTIVE"
TERMINATED = "TERMINATED"
EXPIRED = "EXPIRED"

# Payment statuses
PAID = "PAID"
OVERDUE = "OVERDUE"
FAILED = "FAILED"

# Maintenance ticket statuses / priorities
OPEN = "OPEN"
IN_PROGRESS = "IN_PROGRESS"
RESOLVED = "RESOLVED"
HIGH_PRIORITIES = ("HIGH", "URGENT")


def parse_date(value) -> date | None:
    """Accept a date, datetime, or ISO string ('2024-05-01' / '2024-05-01T00:00:00Z')."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def add_months(d: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping the day to the month length."""
    total = d.year * 12 + (d.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


@dataclass
class Tenant:
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    budget_min: float | None = None
    budget_max: float | None = None
    preferences: dict | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict) -> "Tenant":
        return cls(
            id=str(data["id"]),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            budget_min=data.get("budgetMin"),
            budget_max=data.get("budgetMax"),
            preferences=data.get("profilePreferences"),
        )


@dataclass
class Property:
    id: str
    landlord_id: str = ""
    title: str = ""
    city: str = ""
    state: str = ""
    property_type: str = ""
    bedrooms: int | None = None
    rent_amount: float | None = None
    square_feet: float | None = None
    amenities: list = field(default_factory=list)
    status: str = ACTIVE
    created_at: date | None = None

    @property
    def market(self) -> str:
        return f"{self.city}, {self.state}"

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        return cls(
            id=str(data["id"]),
            landlord_id=str(data.get("landlordId") or ""),
            title=data.get("title") or "",
            city=data.get("addressCity") or "",
            state=data.get("addressState") or "",
            property_type=data.get("propertyType") or "",
            bedrooms=data.get("bedrooms"),
            rent_amount=data.get("rentAmount"),
            square_feet=data.get("squareFeet"),
            amenities=data.get("amenities") or [],
            status=data.get("status") or ACTIVE,
            created_at=parse_date(data.get("createdAt")),
        )


@dataclass
class Payment:
    id: str
    lease_id: str
    amount: float
    due_date: date
    status: str = PAID
    paid_date: date | None = None
    late: bool = False

    @property
    def is_late(self) -> bool:
        return self.late or (self.paid_date is not None and self.paid_date > self.due_date)

    @property
    def is_missed(self) -> bool:
        return self.status in (OVERDUE, FAILED)

    @property
    def is_on_time(self) -> bool:
        return self.status == PAID and self.paid_date is not None and self.paid_date <= self.due_date

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        return cls(
            id=str(data["id"]),
            lease_id=str(data.get("leaseId") or ""),
            amount=float(data.get("amount") or 0),
            due_date=parse_date(data["dueDate"]),
            status=data.get("status") or PAID,
            paid_date=parse_date(data.get("paidDate")),
            late=bool(data.get("late", False)),
        )


@dataclass
class MaintenanceTicket:
    id: str
    property_id: str
    created_at: date
    tenant_id: str | None = None
    status: str = OPEN
    priority: str = "MEDIUM"
    completed_at: date | None = None
    actual_cost: float | None = None
    estimated_cost: float | None = None

    @property
    def cost(self) -> float:
        return self.actual_cost or self.estimated_cost or 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "MaintenanceTicket":
        return cls(
            id=str(data["id"]),
            property_id=str(data.get("propertyId") or ""),
            created_at=parse_date(data["createdAt"]),
            tenant_id=data.get("tenantId"),
            status=data.get("status") or OPEN,
            priority=data.get("priority") or "MEDIUM",
            completed_at=parse_date(data.get("completedAt")),
            actual_cost=data.get("actualCost"),
            estimated_cost=data.get("estimatedCost"),
        )


@dataclass
class Lease:
    id: str
    property_id: str
    tenant_id: str
    start_date: date
    end_date: date
    monthly_rent: float = 0.0
    status: str = ACTIVE
    tenant: Tenant | None = None
    prop: Property | None = None
    payments: list = field(default_factory=list)

    def days_until_expiry(self, as_of: date) -> int:
        return (self.end_date - as_of).days

    @property
    def tenant_name(self) -> str:
        return self.tenant.full_name if self.tenant else ""

    @property
    def property_title(self) -> str:
        return self.prop.title if self.prop else ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant": self.tenant_name,
            "property": self.property_title,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "monthlyRent": self.monthly_rent,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Lease":
        tenant = data.get("tenant")
        prop = data.get("property")
        return cls(
            id=str(data["id"]),
            property_id=str(data.get("propertyId") or (prop or {}).get("id") or ""),
            tenant_id=str(data.get("tenantId") or (tenant or {}).get("id") or ""),
            start_date=parse_date(data["startDate"]),
            end_date=parse_date(data["endDate"]),
            monthly_rent=float(data.get("monthlyRent") or 0),
            status=data.get("status") or ACTIVE,
            tenant=Tenant.from_dict(tenant) if tenant else None,
            prop=Property.from_dict(prop) if prop else None,
            payments=[Payment.from_dict(p) for p in data.get("payments") or []],
        )
