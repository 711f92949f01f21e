# ==============================================
# WIDGETS: admin console adapters
# ==============================================
#
# Modules:
# --------
# - notes.py       → CustomerNotesWidget      (customer, "notes")
# - quicklinks.py  → QuicklinksWidget         (product, "quicklinks")
# - password.py    → PasswordRestrictionWidget (customer, "can_change_password")
#
# ==============================================

from .notes import CustomerNotesWidget, Note
from .quicklinks import QuicklinksWidget, Quicklink
from .password import PasswordRestrictionWidget

__all__ = [
    "CustomerNotesWidget",
    "Note",
    "QuicklinksWidget",
    "Quicklink",
    "PasswordRestrictionWidget",
]
