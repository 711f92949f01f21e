# ==============================================
# MetadataFlagSynchronizer
# ==============================================
#
# PURPOSE:
#   Mirrors one boolean metadata field. Same fetch-merge-update cycle
#   as the list synchronizer, without list semantics. Failures are
#   logged only; the committed value simply stays where it was.
#
# CLASS: MetadataFlagSynchronizer
# -------------------------------
#   - load(entity_id) -> Entity | None
#   - set(value: bool) -> bool
#   - value (property)     last committed value
#   - is_saving (property)
#
# ==============================================

import logging
import threading
from typing import Any, Optional

from admin_widgets.errors import WidgetError, WriteBackError
from admin_widgets.remote.entity import Entity, EntityAPI

logger = logging.getLogger(__name__)


def coerce_flag(raw: Any, default: bool) -> bool:
    """
    Interpret a stored flag. Some stores stringify metadata values,
    so "true"/"false" are accepted too.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return default


class MetadataFlagSynchronizer:
    def __init__(self, api: EntityAPI, resource: str, field_name: str, default: bool = True):
        self.api = api
        self.resource = resource
        self.field_name = field_name
        self.default = default

        self.entity: Optional[Entity] = None
        self._value = default
        self._lock = threading.Lock()
        self._saving = False
        self._closed = False

    @property
    def value(self) -> bool:
        return self._value

    @property
    def is_saving(self) -> bool:
        return self._saving

    def load(self, entity_id: str) -> Optional[Entity]:
        try:
            entity = self.api.retrieve(self.resource, entity_id)
        except WidgetError as e:
            logger.error("Error retrieving %s/%s: %s", self.resource, entity_id, e)
            return None

        with self._lock:
            self.entity = entity
            self._value = coerce_flag(entity.metadata.get(self.field_name), self.default)
        return entity

    def set(self, value: bool) -> bool:
        """
        Persist a new flag value.

        Returns:
            True if the remote confirmed the write
        """
        with self._lock:
            if self.entity is None:
                logger.error("Cannot set %s: no %s loaded", self.field_name, self.resource)
                return False

            self._saving = True
            entity_id = self.entity.id
            try:
                latest = self.api.retrieve(self.resource, entity_id)
                metadata = {**latest.metadata, self.field_name: value}
                updated = self.api.update(
                    self.resource, entity_id, metadata, expected_version=latest.version
                )
                if updated is None:
                    raise WriteBackError(f"Update of {self.resource}/{entity_id} returned no entity")
            except WidgetError as e:
                logger.error("Error updating %s on %s/%s: %s", self.field_name, self.resource, entity_id, e)
                return False
            finally:
                self._saving = False

            if not self._closed:
                self.entity = updated
                self._value = value
            return True

    def close(self) -> None:
        self._closed = True
