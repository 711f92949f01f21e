# ==============================================
# MetadataListSynchronizer
# ==============================================
#
# PURPOSE:
#   Keeps a local ordered list of typed items mirrored to one
#   JSON-encoded field of a remote entity's metadata bag. Every
#   mutation round-trips through the remote store; the local list only
#   ever moves to a state the remote has confirmed.
#
# HOW A MUTATION WORKS:
#
#   append / remove_by_key / update_by_key
#        │  (mutex held from here ...)
#        ▼
#   new_items = f(committed items)
#        │
#        ▼
#   re-fetch entity ──► field changed by someone else? → fail
#        │
#        ▼
#   update(metadata = {**latest.metadata, field: json(new_items)},
#          expected_version = latest.version)
#        │
#        ▼
#   commit new_items locally  (... to here)
#
#   Any failure leaves the committed list untouched and calls the
#   notifier. Nothing is retried.
#
# CLASS: MetadataListSynchronizer
# -------------------------------
#   Constructor:
#   ------------
#   - __init__(api, resource, field_name, item_type,
#              notifier=None, failure_message="Failed to save")
#
#   Methods:
#   --------
#   - load(entity_id) -> (Entity | None, list)
#   - append(item) -> bool
#   - remove_by_key(key) -> bool
#   - update_by_key(key, mutator) -> bool
#   - close() -> None           (late results no longer touch local state)
#
#   Properties:
#   -----------
#   - items       copy of the committed list
#   - is_saving   True while a write-back is in flight
#
# ==============================================

import logging
import threading
from typing import Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar

from admin_widgets.errors import FieldConflictError, PayloadDecodeError, WidgetError, WriteBackError
from admin_widgets.remote.entity import Entity, EntityAPI
from admin_widgets.sync.codec import decode_list, encode_list

logger = logging.getLogger(__name__)

T = TypeVar("T")

Notifier = Callable[[str], None]

UNREADABLE_SUFFIX = "_unreadable"


def log_notifier(message: str) -> None:
    """Default notifier when no UI is attached."""
    logger.warning("ALERT: %s", message)


class MetadataListSynchronizer(Generic[T]):
    def __init__(
        self,
        api: EntityAPI,
        resource: str,
        field_name: str,
        item_type: Type[T],
        notifier: Optional[Notifier] = None,
        failure_message: str = "Failed to save",
    ):
        self.api = api
        self.resource = resource
        self.field_name = field_name
        self.item_type = item_type
        self.notifier = notifier or log_notifier
        self.failure_message = failure_message

        self.entity: Optional[Entity] = None
        self._items: List[T] = []
        # Raw field value as last confirmed by the remote (None = absent)
        self._confirmed_raw: Any = None
        # Value that failed to decode; kept aside on the next write-back
        self._unreadable_raw: Any = None

        self._lock = threading.Lock()
        self._saving = False
        self._closed = False

    @property
    def entity_id(self) -> Optional[str]:
        return self.entity.id if self.entity else None

    @property
    def items(self) -> List[T]:
        return list(self._items)

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def unreadable_field(self) -> str:
        return f"{self.field_name}{UNREADABLE_SUFFIX}"

    def load(self, entity_id: str) -> Tuple[Optional[Entity], List[T]]:
        """
        Fetch the entity and decode the list stored in its metadata field.

        A malformed field yields an empty list; it is logged, not raised.

        Args:
            entity_id: Id of the customer/product

        Returns:
            (entity, items), or (None, []) if the entity could not be fetched
        """
        try:
            entity = self.api.retrieve(self.resource, entity_id)
        except WidgetError as e:
            logger.error("Error fetching %s/%s: %s", self.resource, entity_id, e)
            return None, []

        raw = entity.metadata.get(self.field_name)
        items: List[T] = []
        unreadable = None
        if raw not in (None, ""):
            try:
                items = decode_list(raw, self.field_name, self.item_type)
            except PayloadDecodeError as e:
                logger.error("Error parsing %s on %s/%s: %s", self.field_name, self.resource, entity_id, e)
                unreadable = raw

        with self._lock:
            self.entity = entity
            self._items = items
            self._confirmed_raw = raw
            self._unreadable_raw = unreadable

        logger.debug("Loaded %d %s from %s/%s", len(items), self.field_name, self.resource, entity_id)
        return entity, list(items)

    def append(self, item: T) -> bool:
        return self._mutate(lambda items: items + [item])

    def remove_by_key(self, key: Any) -> bool:
        """Remove the item with this key. An absent key still writes back."""
        return self._mutate(lambda items: [i for i in items if i.key != key])

    def update_by_key(self, key: Any, mutator: Callable[[T], T]) -> bool:
        """Replace the item with this key by mutator(item)."""
        return self._mutate(lambda items: [mutator(i) if i.key == key else i for i in items])

    def close(self) -> None:
        self._closed = True

    def _mutate(self, compute: Callable[[List[T]], List[T]]) -> bool:
        with self._lock:
            self._saving = True
            try:
                new_items = compute(list(self._items))
                updated = self._write_back(new_items)
                if updated is not None:
                    self._commit(updated, new_items)
            finally:
                self._saving = False

        # The notifier runs without the lock held
        if updated is None:
            self.notifier(self.failure_message)
            return False
        return True

    def _commit(self, updated: Entity, new_items: List[T]) -> None:
        if self._closed:
            logger.debug("Discarding %s write-back result after close", self.field_name)
            return
        self.entity = updated
        self._items = new_items
        self._confirmed_raw = updated.metadata.get(self.field_name, encode_list(new_items))
        self._unreadable_raw = None

    def _write_back(self, new_items: List[T]) -> Optional[Entity]:
        """
        Persist new_items into the metadata field.

        Returns:
            The updated entity, or None on any failure (already logged)
        """
        if self.entity is None:
            logger.error("Cannot save %s: no %s loaded", self.field_name, self.resource)
            return None

        entity_id = self.entity.id
        try:
            latest = self.api.retrieve(self.resource, entity_id)

            latest_raw = latest.metadata.get(self.field_name)
            if latest_raw != self._confirmed_raw:
                raise FieldConflictError(
                    self.resource, entity_id, self.field_name, self._confirmed_raw, latest_raw
                )

            metadata = dict(latest.metadata)
            metadata[self.field_name] = encode_list(new_items)
            if self._unreadable_raw is not None and self.unreadable_field not in metadata:
                metadata[self.unreadable_field] = self._unreadable_raw

            updated = self.api.update(
                self.resource, entity_id, metadata, expected_version=latest.version
            )
            if updated is None:
                raise WriteBackError(f"Update of {self.resource}/{entity_id} returned no entity")
        except WidgetError as e:
            logger.error("Error saving %s on %s/%s: %s", self.field_name, self.resource, entity_id, e)
            return None

        return updated
