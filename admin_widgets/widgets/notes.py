# ==============================================
# CustomerNotesWidget
# ==============================================
#
# PURPOSE:
#   Free-text notes on a customer, stored as a JSON array under
#   metadata["notes"]. Shown on the customer details page.
#
# DATA CLASS: Note
# ----------------
#   - id: int               epoch milliseconds at creation, unique per list
#   - content: str
#   - timestamp: str        ISO-8601 creation time
#   - created_by: str       stored as "createdBy"
#   - last_edited: str|None stored as "lastEdited", omitted when unset
#   - extra: dict           unknown stored keys, written back unchanged
#
# CLASS: CustomerNotesWidget
# --------------------------
#   - mount(path) -> bool
#   - add_note(text=None) -> bool        uses the draft when text is None
#   - start_edit(note_id) / cancel_edit()
#   - save_edit(note_id, text=None) -> bool
#   - delete_note(note_id) -> bool
#   - render() -> str
#
# ==============================================

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from admin_widgets.navigation import entity_id_from_path
from admin_widgets.remote.entity import CUSTOMERS, Entity, EntityAPI
from admin_widgets.sync.list_sync import MetadataListSynchronizer, Notifier

logger = logging.getLogger(__name__)

NOTES_FIELD = "notes"
FAILURE_MESSAGE = "Failed to save notes"


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M")


@dataclass
class Note:
    id: int
    content: str
    timestamp: str
    created_by: str = "Admin"
    last_edited: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> int:
        return self.id

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "content": self.content,
            "timestamp": self.timestamp,
            "createdBy": self.created_by,
        }
        if self.last_edited is not None:
            data["lastEdited"] = self.last_edited
        data.update(self.extra)
        return data

    @staticmethod
    def from_dict(data: dict, position: int = 0) -> "Note":
        known = {"id", "content", "timestamp", "createdBy", "lastEdited"}
        return Note(
            id=data.get("id"),
            content=data.get("content", ""),
            timestamp=data.get("timestamp", ""),
            created_by=data.get("createdBy", "Admin"),
            last_edited=data.get("lastEdited"),
            extra={k: v for k, v in data.items() if k not in known},
        )


class CustomerNotesWidget:
    """Notes list with inline add / edit / delete."""

    def __init__(
        self,
        api: EntityAPI,
        notifier: Optional[Notifier] = None,
        author: str = "Admin",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.author = author
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sync: MetadataListSynchronizer[Note] = MetadataListSynchronizer(
            api,
            CUSTOMERS,
            NOTES_FIELD,
            Note,
            notifier=notifier,
            failure_message=FAILURE_MESSAGE,
        )
        self.customer: Optional[Entity] = None
        self.draft = ""
        self.editing_id: Optional[int] = None

    @property
    def notes(self) -> List[Note]:
        return self._sync.items

    @property
    def is_saving(self) -> bool:
        return self._sync.is_saving

    @property
    def mounted(self) -> bool:
        return self.customer is not None

    def mount(self, path: str) -> bool:
        """
        Load notes for the customer named in the admin path.

        Returns:
            False if the path has no customer id or the fetch failed
        """
        customer_id = entity_id_from_path(path, CUSTOMERS)
        if not customer_id:
            logger.debug("No customer id in path %r", path)
            return False
        self.customer, _ = self._sync.load(customer_id)
        return self.customer is not None

    def unmount(self) -> None:
        self._sync.close()

    def _next_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        existing = [n.id for n in self._sync.items if isinstance(n.id, int)]
        if existing and candidate <= max(existing):
            candidate = max(existing) + 1
        return candidate

    def add_note(self, text: Optional[str] = None) -> bool:
        content = (self.draft if text is None else text).strip()
        if not content:
            return False

        now = self._clock()
        note = Note(
            id=self._next_id(now),
            content=content,
            timestamp=iso_timestamp(now),
            created_by=self.author,
        )
        if not self._sync.append(note):
            return False
        self.customer = self._sync.entity
        self.draft = ""
        return True

    def start_edit(self, note_id: int) -> bool:
        for note in self._sync.items:
            if note.id == note_id:
                self.editing_id = note_id
                self.draft = note.content
                return True
        return False

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.draft = ""

    def save_edit(self, note_id: int, text: Optional[str] = None) -> bool:
        content = (self.draft if text is None else text).strip()
        if not content:
            return False

        edited_at = iso_timestamp(self._clock())
        ok = self._sync.update_by_key(
            note_id,
            lambda note: replace(note, content=content, last_edited=edited_at),
        )
        if not ok:
            return False
        self.customer = self._sync.entity
        self.editing_id = None
        self.draft = ""
        return True

    def delete_note(self, note_id: int) -> bool:
        if not self._sync.remove_by_key(note_id):
            return False
        self.customer = self._sync.entity
        return True

    def count_label(self) -> str:
        count = len(self._sync.items)
        return f"{count} {'note' if count == 1 else 'notes'}"

    def render(self) -> str:
        if not self.mounted:
            return ""
        lines = ["Customer Notes"]
        notes = self._sync.items
        if notes:
            lines[0] += f" ({self.count_label()})"
        for note in notes:
            marker = "*" if note.id == self.editing_id else "-"
            lines.append(f"{marker} [{note.id}] {note.content}")
            stamp = f"    Added {format_timestamp(note.timestamp)}"
            if note.last_edited:
                stamp += f" • Edited {format_timestamp(note.last_edited)}"
            lines.append(stamp)
        return "\n".join(lines)
