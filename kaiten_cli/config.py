"""
kaiten-cli shared configuration, constants, and module-level state.
Standalone module — no imports from other project files.
"""

import os

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

ENV_PATH = os.path.join(os.getcwd(), ".env")


def load_env(path=None):
    """Read KEY=VALUE pairs from a .env file, then overlay the real environment.

    Only keys with the KAITEN_ prefix are taken from os.environ so the
    process environment wins over the file for the settings we care about.
    """
    env = {}
    path = path or ENV_PATH
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip().strip("'\"")
    for key, val in os.environ.items():
        if key.startswith("KAITEN_"):
            env[key] = val
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"

DEFAULT_MAX_DEPTH = 3

# Kaiten column type enum
COLUMN_TYPES = {"queue": 1, "in_progress": 2, "done": 3}

# Member role type that marks the responsible person on a card
RESPONSIBLE_ROLE_TYPE = 2

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "svg"}

DEFAULT_COLUMN_TITLE = "Column 1"
DEFAULT_LANE_TITLE = "Lane 1"

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env and the environment)
# ---------------------------------------------------------------------------

env = load_env()

API_TOKEN = env.get("KAITEN_API_TOKEN", "")
API_BASE_URL = env.get("KAITEN_API_BASE_URL", "").rstrip("/")
HTTP_TIMEOUT_SECONDS = _env_int("KAITEN_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int("KAITEN_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool("KAITEN_HTTP_LOG", False)

# ---------------------------------------------------------------------------
# Runtime flags (set by the CLI)
# ---------------------------------------------------------------------------

RUNTIME_QUIET = False
RUNTIME_VERBOSE = False
