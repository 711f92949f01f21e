"""Password-change restriction toggle for a customer."""

import logging
from typing import List, Optional, Tuple

from admin_widgets.navigation import entity_id_from_path, last_segment
from admin_widgets.remote.entity import CUSTOMERS, Entity, EntityAPI
from admin_widgets.sync.flag_sync import MetadataFlagSynchronizer

logger = logging.getLogger(__name__)

PASSWORD_FIELD = "can_change_password"

ALLOW_LABEL = "Yes, allow customer to change password"
DENY_LABEL = "No, do not allow customer to change password"


class PasswordRestrictionWidget:
    """Yes/no choice stored under metadata["can_change_password"]; unset means allowed."""

    def __init__(self, api: EntityAPI):
        self._sync = MetadataFlagSynchronizer(api, CUSTOMERS, PASSWORD_FIELD, default=True)
        self.customer: Optional[Entity] = None

    @property
    def can_change_password(self) -> bool:
        return self._sync.value

    @property
    def is_saving(self) -> bool:
        return self._sync.is_saving

    @property
    def mounted(self) -> bool:
        return self.customer is not None

    def mount(self, path: str) -> bool:
        # Older admin routes end with the id and carry no "customers" segment
        customer_id = entity_id_from_path(path, CUSTOMERS) or last_segment(path)
        if not customer_id:
            return False
        self.customer = self._sync.load(customer_id)
        return self.customer is not None

    def unmount(self) -> None:
        self._sync.close()

    def set_can_change_password(self, value: bool) -> bool:
        ok = self._sync.set(bool(value))
        if ok:
            self.customer = self._sync.entity
        return ok

    def options(self) -> List[Tuple[bool, str, bool]]:
        """(value, label, selected) for each choice."""
        current = self._sync.value
        return [
            (True, ALLOW_LABEL, current is True),
            (False, DENY_LABEL, current is False),
        ]

    def render(self) -> str:
        if not self.mounted:
            return ""
        lines = ["Password Change Options"]
        for _, label, selected in self.options():
            lines.append(f"({'x' if selected else ' '}) {label}")
        return "\n".join(lines)
