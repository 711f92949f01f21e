# ==============================================
# REMOTE: the entity API the widgets consume
# ==============================================
#
# Modules:
# --------
# - entity.py        → Entity dataclass + EntityAPI protocol
# - http_client.py   → MedusaAdminClient (requests)
# - memory_store.py  → InMemoryEntityStore (tests, dry runs)
#
# ==============================================

from .entity import CUSTOMERS, PRODUCTS, COLLECTIONS, Entity, EntityAPI
from .http_client import MedusaAdminClient
from .memory_store import InMemoryEntityStore

__all__ = [
    "CUSTOMERS",
    "PRODUCTS",
    "COLLECTIONS",
    "Entity",
    "EntityAPI",
    "MedusaAdminClient",
    "InMemoryEntityStore",
]
