"""Core helpers: client caching, _call dispatcher, response contract, ID validation."""

from __future__ import annotations

from kaiten_cli import CliError, ConfigError, KaitenClient

_client: KaitenClient | None = None


def _get_client() -> KaitenClient:
    """Return a cached KaitenClient, creating one on first use."""
    global _client
    if _client is None:
        _client = KaitenClient()
    return _client


def _contract_error(message: str, error_type: str = "error") -> dict:
    """Return a stable MCP error envelope."""
    return {
        "ok": False,
        "error": message,
        "error_detail": {
            "type": error_type,
            "message": message,
        },
    }


def _finalize_tool_result(result):
    """Add ``ok: True`` to successful dict responses."""
    if isinstance(result, dict) and "ok" not in result:
        return {"ok": True, **result}
    return result


_ALLOWED_METHODS = {
    "get_card",
    "download_card",
    "download_card_tree",
    "create_space",
    "create_board",
    "create_column",
    "create_card",
    "delete_card",
}


def _validate_id(value, field: str = "card_id") -> str:
    """Kaiten IDs are positive integers. Raises CliError if not."""
    text = str(value).strip()
    if not text.isdigit():
        raise CliError(f"[ERROR] {field} must be a numeric Kaiten ID, got: {value!r}")
    return text


def _call(method_name: str, **kwargs):
    """Call a KaitenClient method, converting exceptions to error dicts."""
    if method_name not in _ALLOWED_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
        return getattr(client, method_name)(**kwargs)
    except ConfigError as e:
        return _contract_error(str(e), "setup")
    except CliError as e:
        return _contract_error(str(e), "error")
    except OSError as e:
        return _contract_error(f"Filesystem error: {e}", "error")
