from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
APP_VERSION = "0.1.0"
HN_FRONT_PAGE_API = "https://hn.algolia.com/api/v1/search"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
ARTICLE_CONTEXT_MESSAGE_TYPE = "hn-article-context"
UNTITLED = "(untitled)"

BASE_DIR_ENV = "HN_TUI_DIR"
DEFAULT_BASE_DIR = "~/.config/hn"

ARTICLE_REQUEST_HEADERS = {
    "Accept": "text/html,application/xhtml+xml",
    "User-Agent": f"hn-tui/{APP_VERSION}",
}
LISTING_RETRY_TOTAL = 3
LISTING_RETRY_BACKOFF = 0.3

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
SPINNER_INTERVAL = 0.11

DEFAULT_CONFIG: Dict[str, Any] = {
    "hits_per_page": 30,
    "read_flush_threshold": 10,
    "http_timeout": 15,
    "theme": "textual-dark",
}

# --- Logging ---
logger = logging.getLogger("hn")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/hn_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def get_base_dir() -> str:
    """Return the directory holding config and data, honouring HN_TUI_DIR."""
    configured = os.environ.get(BASE_DIR_ENV, "").strip()
    if configured:
        return os.path.expanduser(configured)
    return os.path.expanduser(DEFAULT_BASE_DIR)


def get_config_path() -> str:
    return os.path.join(get_base_dir(), "config.json")


def get_store_path() -> str:
    return os.path.join(get_base_dir(), "data", "db.json")


def ensure_config_file_exists() -> None:
    """Write the default config file if the user's config file is not found."""
    config_path = get_config_path()
    if not os.path.exists(config_path):
        logger.info("Config file not found at %s, creating default.", config_path)
        save_config(DEFAULT_CONFIG)


def load_config() -> Dict[str, Any]:
    """Load the main configuration file, falling back to defaults."""
    ensure_config_file_exists()
    config_path = get_config_path()
    config = dict(DEFAULT_CONFIG)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        if isinstance(loaded, dict):
            config.update(loaded)
            logger.info("Loaded config from %s", config_path)
        else:
            logger.error("Ignoring config at %s: expected a JSON object", config_path)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", config_path, e)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """Save the main configuration file."""
    config_path = get_config_path()
    try:
        os.makedirs(os.path.dirname(config_path), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        logger.info("Saved config to %s", config_path)
    except IOError as e:
        logger.error("Failed to save config to %s: %s", config_path, e)
