"""
Multi-Tenant Service: tenant-bound query capability

WHY: Every query touching tenant-owned data must filter by tenant_id. Instead
of repeating that filter in each service, authentication produces a
TenantScope bound to the caller's tenant, and services only reach tenant data
through it.

SECURITY INVARIANTS:
1. Every authenticated request has g.scope set (see decorators.require_auth)
2. A scope can only see and create rows of its own tenant
3. A row of another tenant is reported exactly like a missing row
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..models import Tenant


class NotFoundError(LookupError):
    """Raised when an entity is absent or belongs to another tenant."""


@dataclass(frozen=True)
class TenantScope:
    """
    Capability object bound to one tenant at authentication time.

    Only models with a tenant_id column can be queried through it.
    """
    tenant_id: int

    def query(self, model):
        return db.session.query(model).filter(model.tenant_id == self.tenant_id)

    def find(self, model, entity_id):
        """Return the row or None; foreign-tenant rows are None too."""
        if entity_id is None:
            return None
        return self.query(model).filter(model.id == entity_id).first()

    def get_or_404(self, model, entity_id, label: str | None = None):
        obj = self.find(model, entity_id)
        if obj is None:
            raise NotFoundError(f"{label or model.__name__} not found")
        return obj

    def add(self, obj):
        """Attach a new row to this tenant and stage it in the session."""
        obj.tenant_id = self.tenant_id
        db.session.add(obj)
        return obj

    def tenant(self) -> Tenant:
        return db.session.query(Tenant).filter_by(id=self.tenant_id).one()
