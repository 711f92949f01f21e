# ==============================================
# Admin Metadata Widgets
# ==============================================
#
# Package Structure:
#
# admin_widgets/
# ├── remote/         # Entity API: HTTP client + in-memory store
# ├── sync/           # Metadata synchronizers (list + single flag)
# ├── widgets/        # Notes, quicklinks, password restriction adapters
# ├── config.py       # Configuration management
# ├── errors.py       # Exception hierarchy
# ├── log.py          # Logging setup
# ├── navigation.py   # Entity id extraction from admin paths
# └── cli.py          # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
