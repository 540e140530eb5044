"""Output formatting package for kaiten-cli.

Re-exports all public names so consumers can do:
    from kaiten_cli.formatters import render_card_markdown
"""

from kaiten_cli.formatters._core import (
    output,
    output_json,
    pretty_print,
    progress,
    to_json,
    write_text,
)
from kaiten_cli.formatters._markdown import (
    format_user,
    html_to_markdown,
    render_card_markdown,
)

__all__ = [
    "format_user",
    "html_to_markdown",
    "output",
    "output_json",
    "pretty_print",
    "progress",
    "render_card_markdown",
    "to_json",
    "write_text",
]
