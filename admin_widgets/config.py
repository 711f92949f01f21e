# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load all configuration from environment variables / .env file.
#   Provides typed config objects to the API client, widgets and CLI.
#
# CLASSES:
# --------
# - ApiConfig (dataclass)
#     base_url: str             (default "http://localhost:9000")
#     api_key: str | None       (default None)
#     token: str | None         (default None)
#     timeout_seconds: float    (default 10.0)
#
# - WidgetConfig (dataclass)
#     author: str               (default "Admin")
#     picker_limit: int         (default 50)
#
# - AppConfig (dataclass)
#     api: ApiConfig
#     widgets: WidgetConfig
#     log_level: str            (default "INFO")
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Forget the singleton (used by tests).
#
# USAGE:
# ------
#   from admin_widgets.config import get_config
#   config = get_config()
#   print(config.api.base_url)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class ApiConfig:
    """Remote admin API configuration."""
    base_url: str = "http://localhost:9000"
    api_key: Optional[str] = None
    token: Optional[str] = None
    timeout_seconds: float = 10.0


@dataclass
class WidgetConfig:
    """Widget behaviour configuration."""
    author: str = "Admin"
    picker_limit: int = 50


@dataclass
class AppConfig:
    """Main application configuration."""
    api: ApiConfig = field(default_factory=ApiConfig)
    widgets: WidgetConfig = field(default_factory=WidgetConfig)
    log_level: str = "INFO"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    api_config = ApiConfig(
        base_url=os.getenv("MEDUSA_BACKEND_URL", "http://localhost:9000").rstrip("/"),
        api_key=os.getenv("MEDUSA_API_KEY") or None,
        token=os.getenv("MEDUSA_API_TOKEN") or None,
        timeout_seconds=float(os.getenv("MEDUSA_TIMEOUT_SECONDS", "10")),
    )

    widget_config = WidgetConfig(
        author=os.getenv("NOTES_AUTHOR", "Admin"),
        picker_limit=int(os.getenv("PICKER_LIMIT", "50")),
    )

    _config_instance = AppConfig(
        api=api_config,
        widgets=widget_config,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
