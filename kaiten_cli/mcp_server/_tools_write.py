"""Write tools: create spaces, boards, columns, cards; delete cards (5 tools)."""

from __future__ import annotations

from kaiten_cli import CliError
from kaiten_cli.mcp_server._core import (
    _call,
    _contract_error,
    _finalize_tool_result,
    _validate_id,
)


def create_space(name: str) -> dict:
    """Create a space. Returns the created space (``name`` mirrors ``title``)."""
    return _finalize_tool_result(_call("create_space", name=name))


def create_board(space_id: str, name: str) -> dict:
    """Create a board in a space with one default column and lane."""
    try:
        space_id = _validate_id(space_id, "space_id")
    except CliError as e:
        return _contract_error(str(e), "error")
    return _finalize_tool_result(_call("create_board", space_id=space_id, name=name))


def create_column(board_id: str, title: str) -> dict:
    """Add a column to a board."""
    try:
        board_id = _validate_id(board_id, "board_id")
    except CliError as e:
        return _contract_error(str(e), "error")
    return _finalize_tool_result(_call("create_column", board_id=board_id, title=title))


def create_card(
    board_id: str,
    name: str,
    column_id: str | None = None,
    lane_id: str | None = None,
) -> dict:
    """Create a card on a board.

    Args:
        column_id/lane_id: Placement. Defaults to the board's first column and lane.
    """
    try:
        board_id = _validate_id(board_id, "board_id")
    except CliError as e:
        return _contract_error(str(e), "error")
    return _finalize_tool_result(
        _call("create_card", board_id=board_id, name=name, column_id=column_id, lane_id=lane_id)
    )


def delete_card(card_id: str) -> dict:
    """PERMANENTLY delete a card."""
    try:
        card_id = _validate_id(card_id)
    except CliError as e:
        return _contract_error(str(e), "error")
    result = _call("delete_card", card_id=card_id)
    if isinstance(result, dict) and result.get("ok") is False:
        return result
    return {"ok": True, "deleted": card_id}


def register(mcp):
    """Register all write tools with the FastMCP instance."""
    mcp.tool()(create_space)
    mcp.tool()(create_board)
    mcp.tool()(create_column)
    mcp.tool()(create_card)
    mcp.tool()(delete_card)
