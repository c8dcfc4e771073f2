"""Platform REST API client for properties, leases, payments and maintenance tickets."""

import logging
from datetime import date

import requests

from config import PROPERTY_API_KEY, PROPERTY_API_TIMEOUT, PROPERTY_API_URL
from models.entities import ACTIVE, Lease, MaintenanceTicket, Payment, Property
from services.portfolio_store import MAX_COMPARABLES_LIMIT, PortfolioRepository

logger = logging.getLogger(__name__)


def _items(payload) -> list[dict]:
    """List endpoints answer either a bare list or {"data": [...]}."""
    if isinstance(payload, dict):
        return payload.get("data") or []
    return payload or []


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d else None


class PropertyApiClient(PortfolioRepository):
    """Read-only client for the property management platform API."""

    def __init__(self, base_url: str = None, api_key: str = None, timeout: float = None):
        self.base_url = (base_url or PROPERTY_API_URL).rstrip("/")
        self.timeout = timeout or PROPERTY_API_TIMEOUT
        self.session = requests.Session()
        api_key = api_key or PROPERTY_API_KEY
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def _get(self, path: str, params: dict = None):
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in (params or {}).items() if v is not None}
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _get_one(self, path: str) -> dict | None:
        try:
            payload = self._get(path)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload

    def get_lease(self, lease_id: str) -> Lease | None:
        data = self._get_one(f"/leases/{lease_id}")
        return Lease.from_dict(data) if data else None

    def get_property(self, property_id: str) -> Property | None:
        data = self._get_one(f"/properties/{property_id}")
        return Property.from_dict(data) if data else None

    def list_properties(self, landlord_id: str, status: str | None = ACTIVE) -> list[Property]:
        payload = self._get("/properties", {"landlordId": landlord_id, "status": status})
        return [Property.from_dict(p) for p in _items(payload)]

    def list_leases(self, landlord_id: str = None, property_id: str = None, tenant_id: str = None,
                    statuses: tuple | None = None, ending_on_or_before: date = None,
                    limit: int = None) -> list[Lease]:
        payload = self._get("/leases", {
            "landlordId": landlord_id,
            "propertyId": property_id,
            "tenantId": tenant_id,
            "status": ",".join(statuses) if statuses else None,
            "endBefore": _iso(ending_on_or_before),
            "limit": limit,
        })
        leases = [Lease.from_dict(l) for l in _items(payload)]
        leases.sort(key=lambda l: l.end_date, reverse=True)
        return leases[:limit] if limit else leases

    def list_payments(self, landlord_id: str = None, property_id: str = None,
                      lease_id: str = None, since: date = None) -> list[Payment]:
        payload = self._get("/payments", {
            "landlordId": landlord_id,
            "propertyId": property_id,
            "leaseId": lease_id,
            "since": _iso(since),
        })
        return [Payment.from_dict(p) for p in _items(payload)]

    def list_maintenance_tickets(self, landlord_id: str = None, property_id: str = None,
                                 tenant_id: str = None, since: date = None,
                                 statuses: tuple | None = None) -> list[MaintenanceTicket]:
        payload = self._get("/maintenance-tickets", {
            "landlordId": landlord_id,
            "propertyId": property_id,
            "tenantId": tenant_id,
            "since": _iso(since),
            "status": ",".join(statuses) if statuses else None,
        })
        return [MaintenanceTicket.from_dict(t) for t in _items(payload)]

    def find_comparables(self, city: str, state: str, property_type: str = None,
                         bedrooms: int = None, exclude_property_id: str = None,
                         limit: int = 20) -> list[Property]:
        limit = min(limit, MAX_COMPARABLES_LIMIT)
        payload = self._get("/properties/comparables", {
            "city": city,
            "state": state,
            "propertyType": property_type,
            "bedrooms": bedrooms,
            "exclude": exclude_property_id,
            "limit": limit,
        })
        comparables = [Property.from_dict(p) for p in _items(payload)]
        logger.debug(f"Found {len(comparables)} comparables in {city}, {state}")
        return [p for p in comparables if p.rent_amount][:limit]
