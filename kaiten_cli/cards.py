"""
Kaiten resource operations: create/delete spaces, boards, columns and cards,
fetch cards with comments and children, and parse card references.

Every function takes optional ``token`` / ``api_base`` overrides and falls
back to the values loaded into kaiten_cli.config.
"""

import re
import urllib.parse

from kaiten_cli import config
from kaiten_cli._utils import _as_list, _require
from kaiten_cli.api import api_request, latest_api_base, resolve_api_base
from kaiten_cli.exceptions import CliError, ConfigError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _with_name(resource):
    """Mirror the canonical ``title`` field as ``name`` on a created resource."""
    if isinstance(resource, dict) and "name" not in resource and "title" in resource:
        return {**resource, "name": resource["title"]}
    return resource


def _expect_list(result, operation):
    if isinstance(result, list):
        return result
    raise CliError(
        f"[ERROR] Unexpected {operation} response shape: "
        f"expected JSON array, got {type(result).__name__}."
    )


def _expect_object(result, operation):
    if isinstance(result, dict):
        return result
    raise CliError(
        f"[ERROR] Unexpected {operation} response shape: "
        f"expected JSON object, got {type(result).__name__}."
    )


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

_BOARD_CARD_PATH_RE = re.compile(r"/space/\d+/boards/card/(?P<card_id>[^/]+)/?$")
_SHORT_CARD_PATH_RE = re.compile(r"^/(?P<card_id>[^/]+)/?$")


def parse_card_input(value, api_base=None):
    """Extract ``(card_id, api_base)`` from a bare ID or a Kaiten card URL.

    Accepted shapes:
        12345                                   (needs KAITEN_API_BASE_URL)
        https://company.kaiten.ru/12345
        https://company.kaiten.ru/space/42/boards/card/12345
    """
    text = (value or "").strip()
    if not text:
        raise CliError("[ERROR] Card ID or URL is required")

    if text.isdigit():
        base = api_base or config.API_BASE_URL
        if not base:
            raise ConfigError("[ERROR] Set environment variable KAITEN_API_BASE_URL for card ID input")
        return text, base.rstrip("/")

    parsed = urllib.parse.urlsplit(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise CliError(
            f"[ERROR] Invalid URL format: {text}. Expected format: "
            "https://company.kaiten.ru/123456, "
            "https://company.kaiten.ru/space/1/boards/card/123456 or just card ID"
        )
    match = _BOARD_CARD_PATH_RE.search(parsed.path) or _SHORT_CARD_PATH_RE.match(parsed.path)
    if not match:
        raise CliError(f"[ERROR] Unrecognized Kaiten card URL: {text}")
    card_id = match.group("card_id")
    if not card_id.isdigit():
        raise CliError(f"[ERROR] Invalid card ID extracted from URL: {card_id}")
    return card_id, f"{parsed.scheme}://{parsed.netloc}/api/v1"


# ---------------------------------------------------------------------------
# Creators
# ---------------------------------------------------------------------------


def create_space(name, *, token=None, api_base=None):
    """POST /spaces."""
    _require(name, "name")
    base = resolve_api_base(api_base)
    result = api_request("/spaces", {"title": name}, "POST", token=token, api_base=base)
    return _with_name(_expect_object(result, "create space"))


def create_board(space_id, name, *, token=None, api_base=None):
    """POST /spaces/{space_id}/boards with one default column and lane."""
    _require(space_id, "space_id")
    _require(name, "name")
    base = resolve_api_base(api_base)
    payload = {
        "title": name,
        "columns": [{"title": config.DEFAULT_COLUMN_TITLE, "type": config.COLUMN_TYPES["queue"]}],
        "lanes": [{"title": config.DEFAULT_LANE_TITLE}],
    }
    result = api_request(f"/spaces/{space_id}/boards", payload, "POST", token=token, api_base=base)
    return _with_name(_expect_object(result, "create board"))


def create_column(board_id, title, *, column_type=None, token=None, api_base=None):
    """POST /boards/{board_id}/columns."""
    _require(board_id, "board_id")
    _require(title, "title")
    base = latest_api_base(resolve_api_base(api_base))
    payload = {"title": title}
    if column_type is not None:
        payload["type"] = column_type
    result = api_request(f"/boards/{board_id}/columns", payload, "POST", token=token, api_base=base)
    return _with_name(_expect_object(result, "create column"))


def get_board(board_id, *, token=None, api_base=None):
    """GET /boards/{board_id}."""
    _require(board_id, "board_id")
    result = api_request(f"/boards/{board_id}", token=token, api_base=api_base)
    return _expect_object(result, "board")


def resolve_board_placement(board_id, column_id=None, lane_id=None, *, token=None, api_base=None):
    """Fill in a missing column/lane with the board's first column and lane."""
    if column_id and lane_id:
        return column_id, lane_id
    board = get_board(board_id, token=token, api_base=api_base)
    columns = _as_list(board.get("columns"))
    lanes = _as_list(board.get("lanes"))
    if not column_id:
        if not columns:
            raise CliError(f"[ERROR] Board {board_id} has no columns to place a card in.")
        column_id = columns[0].get("id")
    if not lane_id:
        if not lanes:
            raise CliError(f"[ERROR] Board {board_id} has no lanes to place a card in.")
        lane_id = lanes[0].get("id")
    return column_id, lane_id


def create_card(board_id, name, *, column_id=None, lane_id=None, token=None, api_base=None):
    """POST /cards on the given board (first column and lane unless given)."""
    _require(board_id, "board_id")
    _require(name, "name")
    base = resolve_api_base(api_base)
    column_id, lane_id = resolve_board_placement(
        board_id, column_id, lane_id, token=token, api_base=base
    )
    payload = {"title": name, "board_id": board_id, "column_id": column_id, "lane_id": lane_id}
    result = api_request("/cards", payload, "POST", token=token, api_base=latest_api_base(base))
    return _with_name(_expect_object(result, "create card"))


# ---------------------------------------------------------------------------
# Deleters
# ---------------------------------------------------------------------------


def delete_card(card_id, *, token=None, api_base=None):
    _require(card_id, "card_id")
    return api_request(f"/cards/{card_id}", method="DELETE", token=token, api_base=api_base)


def delete_column(board_id, column_id, *, token=None, api_base=None):
    _require(board_id, "board_id")
    _require(column_id, "column_id")
    base = latest_api_base(resolve_api_base(api_base))
    return api_request(
        f"/boards/{board_id}/columns/{column_id}", method="DELETE", token=token, api_base=base
    )


def delete_board(space_id, board_id, *, token=None, api_base=None):
    """DELETE a board even if it still has cards (force)."""
    _require(space_id, "space_id")
    _require(board_id, "board_id")
    return api_request(
        f"/spaces/{space_id}/boards/{board_id}",
        {"force": True},
        "DELETE",
        token=token,
        api_base=api_base,
    )


def delete_space(space_id, *, token=None, api_base=None):
    _require(space_id, "space_id")
    return api_request(f"/spaces/{space_id}", method="DELETE", token=token, api_base=api_base)


# ---------------------------------------------------------------------------
# Fetchers
# ---------------------------------------------------------------------------


def get_card(card_id, *, token=None, api_base=None):
    """GET /cards/{card_id}."""
    _require(card_id, "card_id")
    result = api_request(f"/cards/{card_id}", token=token, api_base=api_base)
    return _expect_object(result, "card")


def get_card_comments(card_id, *, token=None, api_base=None):
    """GET /cards/{card_id}/comments."""
    _require(card_id, "card_id")
    result = api_request(f"/cards/{card_id}/comments", token=token, api_base=api_base)
    return _expect_list(result, "comments")


def get_card_children(card_id, *, token=None, api_base=None):
    """GET /cards/{card_id}/children."""
    _require(card_id, "card_id")
    result = api_request(f"/cards/{card_id}/children", token=token, api_base=api_base)
    return _expect_list(result, "children")


def fetch_card_bundle(card_id, *, include_children=True, token=None, api_base=None):
    """Fetch a card with its comments and, when it has any, its children.

    Returns {"card": dict, "comments": list, "children": list}.
    """
    card = get_card(card_id, token=token, api_base=api_base)
    comments = get_card_comments(card_id, token=token, api_base=api_base)
    children = []
    if include_children and (card.get("children_count") or 0) > 0:
        children = get_card_children(card_id, token=token, api_base=api_base)
    return {"card": card, "comments": comments, "children": children}
