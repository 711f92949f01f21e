# ==============================================
# Exception Hierarchy
# ==============================================
#
#   WidgetError
#   ├── EntityFetchError     → retrieve/list failed (not found, transport)
#   ├── PayloadDecodeError   → metadata field is not a JSON array
#   └── WriteBackError       → re-fetch or update failed
#       └── StaleEntityError → entity changed since it was read
#           └── FieldConflictError → our metadata field changed remotely
#
# The remote layer raises these. Synchronizers catch them at their
# boundary and turn them into boolean results.
# ==============================================

from typing import Optional


class WidgetError(Exception):
    """Base class for all widget errors."""


class EntityFetchError(WidgetError):
    """The remote entity could not be retrieved."""

    def __init__(self, resource: str, entity_id: Optional[str], reason: str = ""):
        self.resource = resource
        self.entity_id = entity_id
        self.reason = reason
        message = f"Could not fetch {resource}/{entity_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PayloadDecodeError(WidgetError):
    """A metadata field does not hold a JSON-encoded array."""

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Cannot decode metadata field '{field_name}': {reason}")


class WriteBackError(WidgetError):
    """Persisting a value to the remote metadata bag failed."""


class StaleEntityError(WriteBackError):
    """The entity was modified by someone else since it was last read."""

    def __init__(self, resource: str, entity_id: str, expected: object, actual: object):
        self.resource = resource
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{resource}/{entity_id} changed concurrently "
            f"(expected version {expected!r}, found {actual!r})"
        )


class FieldConflictError(StaleEntityError):
    """The synchronized metadata field no longer holds the value we last confirmed."""

    def __init__(self, resource: str, entity_id: str, field_name: str, expected: object, actual: object):
        self.field_name = field_name
        WriteBackError.__init__(
            self,
            f"Metadata field '{field_name}' of {resource}/{entity_id} was changed "
            f"by another writer; reload before saving"
        )
        self.resource = resource
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
