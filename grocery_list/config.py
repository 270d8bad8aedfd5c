"""Configuration: key-value settings storage plus environment settings.

The settings table doubles as the app's local key-value store.

Known keys:
    groceryList  — JSON array of grocery items, overwritten on every change.

Environment:
    RECIPE_API_URL  — recipe generation endpoint.
    LOG_LEVEL       — root log level (default INFO).
"""

import logging
import os
import sys

from grocery_list.db.database import get_connection

DEFAULT_RECIPE_API_URL = "https://searchbuddy.app/api/createRecipe"

# Seconds. Per-request timeout and overall deadline for one recipe fetch.
RECIPE_REQUEST_TIMEOUT = 60
RECIPE_RESOURCE_TIMEOUT = 120


def get_setting(key: str, default: str = None) -> str:
    """Return the value for a settings key, or default if not found."""
    conn = get_connection()
    try:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else default
    finally:
        conn.close()


def set_setting(key: str, value: str) -> None:
    """Insert or update a settings key-value pair (upsert)."""
    conn = get_connection()
    try:
        conn.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        conn.commit()
    finally:
        conn.close()


def get_recipe_api_url() -> str:
    """Read RECIPE_API_URL at call time so tests can set it via env."""
    return os.environ.get("RECIPE_API_URL") or DEFAULT_RECIPE_API_URL


def configure_logging() -> None:
    """Install a single stdout handler on the root logger."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    root_logger.addHandler(handler)

    # Request lines are logged by recipe_client itself
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
