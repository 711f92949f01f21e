# ==============================================
# QuicklinksWidget
# ==============================================
#
# PURPOSE:
#   Curated links shown on a product page, stored as a JSON array
#   under metadata["quicklinks"]. A link is either free-form (custom)
#   or points at another product / collection by handle.
#
# DATA CLASS: Quicklink
# ---------------------
#   - id: str        generated once, survives reordering and edits
#   - title: str
#   - link: str      URL for custom links, handle otherwise
#   - type: str      "custom" | "product" | "collection"
#   - extra: dict    unknown stored keys, written back unchanged
#
#   Entries written before ids existed get one on decode, derived from
#   their position and content so every load yields the same id. It is
#   persisted with the next save.
#
# CLASS: QuicklinksWidget
# -----------------------
#   Form state: kind, title, link
#
#   - mount(path) -> bool
#   - select_kind(kind) -> None
#   - search_products(term="") / search_collections(term="") -> list[Entity]
#   - choose_product(handle) / choose_collection(handle) -> bool
#   - add_quicklink() -> bool
#   - remove_quicklink(quicklink_id) -> bool
#   - render() -> str
#
# ==============================================

import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from admin_widgets.errors import WidgetError
from admin_widgets.navigation import entity_id_from_path
from admin_widgets.remote.entity import COLLECTIONS, PRODUCTS, Entity, EntityAPI
from admin_widgets.sync.list_sync import MetadataListSynchronizer, Notifier

logger = logging.getLogger(__name__)

QUICKLINKS_FIELD = "quicklinks"
FAILURE_MESSAGE = "Failed to save quicklinks"

CUSTOM = "custom"
PRODUCT = "product"
COLLECTION = "collection"
LINK_KINDS = (CUSTOM, PRODUCT, COLLECTION)


def new_quicklink_id() -> str:
    return uuid.uuid4().hex


def legacy_quicklink_id(position: int, data: dict) -> str:
    """Stable id for a stored entry that has none."""
    content = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return uuid.uuid5(uuid.NAMESPACE_URL, f"quicklink:{position}:{content}").hex


@dataclass
class Quicklink:
    title: str
    link: str
    type: str = CUSTOM
    id: str = field(default_factory=new_quicklink_id)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "type": self.type,
        }
        data.update(self.extra)
        return data

    @staticmethod
    def from_dict(data: dict, position: int = 0) -> "Quicklink":
        known = {"id", "title", "link", "type"}
        return Quicklink(
            id=data.get("id") or legacy_quicklink_id(position, data),
            title=data.get("title", ""),
            link=data.get("link", ""),
            type=data.get("type", CUSTOM),
            extra={k: v for k, v in data.items() if k not in known},
        )


class QuicklinksWidget:
    def __init__(self, api: EntityAPI, notifier: Optional[Notifier] = None, picker_limit: int = 50):
        self.api = api
        self.picker_limit = picker_limit
        self._sync: MetadataListSynchronizer[Quicklink] = MetadataListSynchronizer(
            api,
            PRODUCTS,
            QUICKLINKS_FIELD,
            Quicklink,
            notifier=notifier,
            failure_message=FAILURE_MESSAGE,
        )
        self.product: Optional[Entity] = None

        # Form state
        self.kind = CUSTOM
        self.title = ""
        self.link = ""

        # Picker state
        self.available_products: List[Entity] = []
        self.collections: List[Entity] = []

    @property
    def quicklinks(self) -> List[Quicklink]:
        return self._sync.items

    @property
    def is_saving(self) -> bool:
        return self._sync.is_saving

    @property
    def mounted(self) -> bool:
        return self.product is not None

    def mount(self, path: str) -> bool:
        product_id = entity_id_from_path(path, PRODUCTS)
        if not product_id:
            logger.debug("No product id in path %r", path)
            return False
        self.product, _ = self._sync.load(product_id)
        return self.product is not None

    def unmount(self) -> None:
        self._sync.close()

    def select_kind(self, kind: str) -> None:
        if kind not in LINK_KINDS:
            raise ValueError(f"Unknown link kind {kind!r}; expected one of {LINK_KINDS}")
        self.kind = kind
        self.title = ""
        self.link = ""

    def _search(self, resource: str, term: str) -> Optional[List[Entity]]:
        try:
            return self.api.list(resource, q=term or None, limit=self.picker_limit)
        except WidgetError as e:
            logger.error("Error loading %s: %s", resource, e)
            return None

    def search_products(self, term: str = "") -> List[Entity]:
        results = self._search(PRODUCTS, term)
        if results is not None:
            self.available_products = results
        return list(self.available_products)

    def search_collections(self, term: str = "") -> List[Entity]:
        results = self._search(COLLECTIONS, term)
        if results is not None:
            self.collections = results
        return list(self.collections)

    def choose_product(self, handle: str) -> bool:
        """Point the form at a product from the last search results."""
        if not handle:
            return False
        self.link = handle
        for product in self.available_products:
            if product.handle == handle:
                self.title = f"Explore {product.title}"
                return True
        return False

    def choose_collection(self, handle: str) -> bool:
        if not handle:
            return False
        self.link = handle
        for collection in self.collections:
            if collection.handle == handle:
                self.title = f"Explore From {collection.title}"
                return True
        return False

    @property
    def can_add(self) -> bool:
        if self.is_saving or not self.link.strip():
            return False
        if self.kind == CUSTOM and not self.title.strip():
            return False
        return True

    def add_quicklink(self) -> bool:
        if not self.can_add:
            return False

        quicklink = Quicklink(
            title=self.title.strip() or self.link.strip(),
            link=self.link.strip(),
            type=self.kind,
        )
        if not self._sync.append(quicklink):
            return False

        self.product = self._sync.entity
        self.select_kind(CUSTOM)
        return True

    def remove_quicklink(self, quicklink_id: str) -> bool:
        if not self._sync.remove_by_key(quicklink_id):
            return False
        self.product = self._sync.entity
        return True

    def render(self) -> str:
        if not self.mounted:
            return ""
        lines = ["Quicklinks"]
        for quicklink in self._sync.items:
            label = quicklink.type.capitalize()
            if quicklink.type == CUSTOM:
                label += f": {quicklink.link}"
            lines.append(f"- [{quicklink.id}] {quicklink.title} ({label})")
        return "\n".join(lines)
