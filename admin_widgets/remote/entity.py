# ==============================================
# Entity + EntityAPI
# ==============================================
#
# PURPOSE:
#   The shape of a remote entity as the widgets see it, and the
#   three calls they need from whatever owns those entities.
#
# DATA CLASS: Entity
# ------------------
#   - id: str
#   - metadata: dict            (open key-value bag, never None)
#   - version: Any              (optimistic concurrency token)
#   - data: dict                (full remote payload: title, handle, ...)
#
# PROTOCOL: EntityAPI
# -------------------
#   - retrieve(resource, entity_id) -> Entity
#   - update(resource, entity_id, metadata, expected_version=None) -> Entity
#   - list(resource, q=None, limit=50) -> list[Entity]
#
#   resource is one of CUSTOMERS, PRODUCTS, COLLECTIONS.
#   Implementations raise EntityFetchError / WriteBackError /
#   StaleEntityError from admin_widgets.errors.
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

CUSTOMERS = "customers"
PRODUCTS = "products"
COLLECTIONS = "collections"

# Envelope keys used by the admin API for single/list responses
SINGULAR = {
    CUSTOMERS: "customer",
    PRODUCTS: "product",
    COLLECTIONS: "collection",
}


@dataclass
class Entity:
    id: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    version: Any = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> Optional[str]:
        return self.data.get("title")

    @property
    def handle(self) -> Optional[str]:
        return self.data.get("handle")

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "Entity":
        """Build an Entity from a raw API object."""
        return Entity(
            id=str(payload["id"]),
            metadata=dict(payload.get("metadata") or {}),
            version=payload.get("updated_at"),
            data=dict(payload),
        )


class EntityAPI(Protocol):
    def retrieve(self, resource: str, entity_id: str) -> Entity:
        ...

    def update(
        self,
        resource: str,
        entity_id: str,
        metadata: Dict[str, Any],
        expected_version: Any = None,
    ) -> Optional[Entity]:
        ...

    def list(self, resource: str, q: Optional[str] = None, limit: int = 50) -> List[Entity]:
        ...
