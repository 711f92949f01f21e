# ==============================================
# List Payload Codec
# ==============================================
#
# PURPOSE:
#   Convert between a list of typed items and the JSON string stored
#   in one metadata field.
#
# FORMAT:
#   A bare JSON array of objects, compact separators, UTF-8 kept as-is:
#     [{"id":1700000000000,"content":"hi",...}]
#
# ITEM TYPES:
#   Any class providing
#     - key            (property: stable identity within the list)
#     - to_dict()      -> dict
#     - from_dict(d, position)  (staticmethod/classmethod) -> item
#         position is the entry index in the stored array
#
# FUNCTIONS:
# ----------
# - encode_list(items) -> str
# - decode_list(raw, field_name, item_type) -> list
#     Raises PayloadDecodeError if raw is not JSON or not an array.
#     Array elements that are not objects are dropped with a warning.
#
# ==============================================

import json
import logging
from typing import Any, Dict, List, Protocol, Type, TypeVar

from admin_widgets.errors import PayloadDecodeError

logger = logging.getLogger(__name__)


class ListItem(Protocol):
    @property
    def key(self) -> Any:
        ...

    def to_dict(self) -> Dict[str, Any]:
        ...


T = TypeVar("T")


def encode_list(items: List[Any]) -> str:
    """Serialize items the way the storefront expects to read them back."""
    return json.dumps(
        [item.to_dict() for item in items],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def decode_list(raw: Any, field_name: str, item_type: Type[T]) -> List[T]:
    """
    Parse a metadata value into a list of items.

    Args:
        raw: The metadata value (normally a JSON string)
        field_name: Metadata key, used in error messages
        item_type: Class with a from_dict() constructor

    Returns:
        Items in stored order
    """
    if isinstance(raw, list):
        decoded = raw
    else:
        if not isinstance(raw, (str, bytes)):
            raise PayloadDecodeError(field_name, f"expected a JSON string, got {type(raw).__name__}")
        try:
            decoded = json.loads(raw)
        except ValueError as e:
            raise PayloadDecodeError(field_name, str(e)) from e

    if not isinstance(decoded, list):
        raise PayloadDecodeError(field_name, f"expected an array, got {type(decoded).__name__}")

    items = []
    for position, element in enumerate(decoded):
        if not isinstance(element, dict):
            logger.warning("Dropping non-object entry %d in '%s': %r", position, field_name, element)
            continue
        items.append(item_type.from_dict(element, position))
    return items
