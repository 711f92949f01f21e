# ==============================================
# SYNC: metadata read-modify-write
# ==============================================
#
# Modules:
# --------
# - codec.py      → JSON array <-> typed items
# - list_sync.py  → MetadataListSynchronizer (notes, quicklinks)
# - flag_sync.py  → MetadataFlagSynchronizer (can_change_password)
#
# ==============================================

from .codec import decode_list, encode_list
from .list_sync import MetadataListSynchronizer, Notifier, log_notifier
from .flag_sync import MetadataFlagSynchronizer, coerce_flag

__all__ = [
    "decode_list",
    "encode_list",
    "MetadataListSynchronizer",
    "Notifier",
    "log_notifier",
    "MetadataFlagSynchronizer",
    "coerce_flag",
]
