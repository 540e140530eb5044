"""
KaitenClient — public Python API for the Kaiten helpers.

Single entry point for programmatic use and the MCP server.
Methods return plain dicts suitable for JSON serialization, except
download_card_tree() which returns the DownloadNode tree.
"""

from __future__ import annotations

from typing import Any

from kaiten_cli import config
from kaiten_cli.api import resolve_api_base
from kaiten_cli.cards import (
    create_board,
    create_card,
    create_column,
    create_space,
    delete_board,
    delete_card,
    delete_column,
    delete_space,
    fetch_card_bundle,
    get_card,
    parse_card_input,
)
from kaiten_cli.download import download_card_tree, save_card_bundle
from kaiten_cli.formatters import render_card_markdown
from kaiten_cli.models import DownloadNode


class KaitenClient:
    """Public API surface for the Kaiten REST helpers.

    Raises CliError/ConfigError on failure. Partial download failures
    (attachments, child cards) are reported in the results instead.
    """

    def __init__(self, *, token: str | None = None, api_base: str | None = None):
        """Initialize the client.

        Args:
            token: Bearer token. Defaults to KAITEN_API_TOKEN.
            api_base: API base URL, e.g. https://company.kaiten.ru/api/v1.
                Defaults to KAITEN_API_BASE_URL.
        """
        self.token = config.API_TOKEN if token is None else token
        self.api_base = resolve_api_base(api_base)

    @classmethod
    def for_card_input(cls, value: str, *, token: str | None = None, api_base: str | None = None):
        """Build a client for a card ID or URL. Returns (client, card_id)."""
        card_id, base = parse_card_input(value, api_base=api_base)
        return cls(token=token, api_base=base), card_id

    def _auth(self) -> dict[str, Any]:
        return {"token": self.token, "api_base": self.api_base}

    # -------------------------------------------------------------------
    # Creators
    # -------------------------------------------------------------------

    def create_space(self, name: str) -> dict[str, Any]:
        return create_space(name, **self._auth())

    def create_board(self, space_id: int | str, name: str) -> dict[str, Any]:
        return create_board(space_id, name, **self._auth())

    def create_column(self, board_id: int | str, title: str) -> dict[str, Any]:
        return create_column(board_id, title, **self._auth())

    def create_card(
        self,
        board_id: int | str,
        name: str,
        *,
        column_id: int | str | None = None,
        lane_id: int | str | None = None,
    ) -> dict[str, Any]:
        """Create a card; missing column/lane resolve to the board's first ones."""
        return create_card(board_id, name, column_id=column_id, lane_id=lane_id, **self._auth())

    # -------------------------------------------------------------------
    # Deleters
    # -------------------------------------------------------------------

    def delete_card(self, card_id: int | str) -> dict[str, Any]:
        return delete_card(card_id, **self._auth())

    def delete_column(self, board_id: int | str, column_id: int | str) -> dict[str, Any]:
        return delete_column(board_id, column_id, **self._auth())

    def delete_board(self, space_id: int | str, board_id: int | str) -> dict[str, Any]:
        return delete_board(space_id, board_id, **self._auth())

    def delete_space(self, space_id: int | str) -> dict[str, Any]:
        return delete_space(space_id, **self._auth())

    # -------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------

    def get_card(self, card_id: int | str) -> dict[str, Any]:
        return get_card(card_id, **self._auth())

    def download_card(self, card_id: int | str, *, include_children: bool = True) -> dict[str, Any]:
        """Fetch a card and render it as Markdown.

        Returns:
            dict with keys: card, markdown, comments, children.
        """
        bundle = fetch_card_bundle(card_id, include_children=include_children, **self._auth())
        bundle["markdown"] = render_card_markdown(
            bundle["card"], bundle["comments"], bundle["children"]
        )
        return bundle

    def save_card(
        self, card_id: int | str, output_dir: str, *, skip_files: bool = False
    ) -> dict[str, Any]:
        """Download one card into *output_dir* (no per-card subdirectory).

        Returns:
            dict with keys: card, markdown, comments, children, directory, failures.
        """
        result = self.download_card(card_id)
        steps = save_card_bundle(
            result,
            output_dir,
            markdown=result["markdown"],
            skip_files=skip_files,
            **self._auth(),
        )
        result["directory"] = output_dir
        result["failures"] = [
            {"kind": s.kind, "target": s.target, "error": s.error} for s in steps if not s.ok
        ]
        return result

    def download_card_tree(
        self,
        card_id: int | str,
        output_dir: str,
        *,
        max_depth: int = config.DEFAULT_MAX_DEPTH,
        skip_files: bool = False,
    ) -> DownloadNode:
        """Download a card and its descendants under ``<output_dir>/<card_id>/``."""
        return download_card_tree(
            card_id,
            output_dir,
            max_depth=max_depth,
            skip_files=skip_files,
            **self._auth(),
        )
