"""Read tools: card fetch and download (3 tools)."""

from __future__ import annotations

from kaiten_cli import CliError, DownloadNode, config
from kaiten_cli.mcp_server._core import (
    _call,
    _contract_error,
    _finalize_tool_result,
    _validate_id,
)


def get_card(card_id: str) -> dict:
    """Get the raw Kaiten card object.

    Args:
        card_id: Numeric Kaiten card ID.
    """
    try:
        card_id = _validate_id(card_id)
    except CliError as e:
        return _contract_error(str(e), "error")
    return _finalize_tool_result(_call("get_card", card_id=card_id))


def download_card(card_id: str, include_children: bool = True) -> dict:
    """Fetch a card with comments (and children) and render it as Markdown.

    Returns:
        Dict with card, markdown, comments, children.
    """
    try:
        card_id = _validate_id(card_id)
    except CliError as e:
        return _contract_error(str(e), "error")
    return _finalize_tool_result(
        _call("download_card", card_id=card_id, include_children=include_children)
    )


def download_card_tree(
    card_id: str,
    output_dir: str,
    max_depth: int = config.DEFAULT_MAX_DEPTH,
    skip_files: bool = False,
) -> dict:
    """Download a card and its children to ``<output_dir>/<card_id>/``.

    Args:
        max_depth: How many levels of children to follow (default 3).
        skip_files: True to skip attachment downloads.

    Returns:
        Nested dict of card, markdown, comments, directory, failures, children.
    """
    try:
        card_id = _validate_id(card_id)
    except CliError as e:
        return _contract_error(str(e), "error")
    result = _call(
        "download_card_tree",
        card_id=card_id,
        output_dir=output_dir,
        max_depth=max_depth,
        skip_files=skip_files,
    )
    if isinstance(result, DownloadNode):
        result = result.to_dict()
    return _finalize_tool_result(result)


def register(mcp):
    """Register all read tools with the FastMCP instance."""
    mcp.tool()(get_card)
    mcp.tool()(download_card)
    mcp.tool()(download_card_tree)
