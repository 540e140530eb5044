"""kaiten-cli — command-line helpers and a Python client for the Kaiten REST API."""

from kaiten_cli.client import KaitenClient
from kaiten_cli.config import VERSION
from kaiten_cli.exceptions import CliError, ConfigError
from kaiten_cli.formatters import render_card_markdown
from kaiten_cli.models import (
    Card,
    CardLocation,
    Checklist,
    ChecklistItem,
    Comment,
    DownloadNode,
    FileAttachment,
    StepResult,
    User,
)

__all__ = [
    "VERSION",
    "KaitenClient",
    "CliError",
    "ConfigError",
    "render_card_markdown",
    "Card",
    "CardLocation",
    "Checklist",
    "ChecklistItem",
    "Comment",
    "DownloadNode",
    "FileAttachment",
    "StepResult",
    "User",
]
