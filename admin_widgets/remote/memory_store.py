# ==============================================
# InMemoryEntityStore
# ==============================================
#
# PURPOSE:
#   EntityAPI implementation backed by a dict. Every update bumps an
#   integer version; an update carrying a stale expected_version is
#   rejected atomically, which is the guarantee the HTTP API lacks.
#
# CLASS: InMemoryEntityStore
# --------------------------
#   - add(resource, entity_id, metadata=None, **fields) -> Entity
#   - retrieve / update / list   (EntityAPI)
#
#   Returned entities are copies; mutating them never touches the store.
#
# ==============================================

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from admin_widgets.errors import EntityFetchError, StaleEntityError
from admin_widgets.remote.entity import Entity


class InMemoryEntityStore:
    def __init__(self):
        self._entities: Dict[str, Dict[str, Entity]] = {}
        self._lock = threading.Lock()
        self.update_calls: List[Dict[str, Any]] = []

    def add(self, resource: str, entity_id: str, metadata: Optional[Dict[str, Any]] = None, **fields) -> Entity:
        """Seed an entity. Extra keyword fields (title, handle) land in data."""
        data = {"id": entity_id, **fields}
        entity = Entity(id=entity_id, metadata=dict(metadata or {}), version=1, data=data)
        with self._lock:
            self._entities.setdefault(resource, {})[entity_id] = entity
        return copy.deepcopy(entity)

    def retrieve(self, resource: str, entity_id: str) -> Entity:
        with self._lock:
            entity = self._entities.get(resource, {}).get(entity_id)
            if entity is None:
                raise EntityFetchError(resource, entity_id, "not found")
            return copy.deepcopy(entity)

    def update(
        self,
        resource: str,
        entity_id: str,
        metadata: Dict[str, Any],
        expected_version: Any = None,
    ) -> Optional[Entity]:
        with self._lock:
            entity = self._entities.get(resource, {}).get(entity_id)
            if entity is None:
                raise EntityFetchError(resource, entity_id, "not found")
            if expected_version is not None and entity.version != expected_version:
                raise StaleEntityError(resource, entity_id, expected_version, entity.version)

            self.update_calls.append({
                "resource": resource,
                "entity_id": entity_id,
                "metadata": copy.deepcopy(metadata),
                "expected_version": expected_version,
            })
            entity.metadata = copy.deepcopy(metadata)
            entity.version += 1
            entity.data["updated_at"] = datetime.now(timezone.utc).isoformat()
            return copy.deepcopy(entity)

    def list(self, resource: str, q: Optional[str] = None, limit: int = 50) -> List[Entity]:
        with self._lock:
            entities = list(self._entities.get(resource, {}).values())
        if q:
            needle = q.lower()
            entities = [
                e for e in entities
                if needle in str(e.data.get("title", "")).lower()
                or needle in str(e.data.get("handle", "")).lower()
            ]
        return [copy.deepcopy(e) for e in entities[:limit]]
