"""
HTTP request layer and security helpers for kaiten-cli.
"""

import http.client
import json
import os
import re
import shutil
import sys
import time
import urllib.error
import urllib.parse
import urllib.request

from kaiten_cli import config
from kaiten_cli.exceptions import CliError, ConfigError, HTTPError

# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    return token[:6] + "..." if len(token) > 6 else token


def _safe_json_parse(text, context="input"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CliError(f"[ERROR] Invalid JSON in {context}: {e.msg} at position {e.pos}") from None


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _safe_headers_for_log(headers):
    """Drop everything but content-type and a masked authorization header."""
    safe = {}
    for key, value in (headers or {}).items():
        if key.lower() == "authorization":
            scheme, _, secret = value.partition(" ")
            safe[key] = f"{scheme} {_mask_token(secret)}" if secret else _mask_token(value)
        elif key.lower() == "content-type":
            safe[key] = value
    return safe


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def warn(message):
    """Report a swallowed, non-fatal failure on stderr unless --quiet."""
    if config.RUNTIME_QUIET:
        return
    print(f"[WARN] {message}", file=sys.stderr)


def _error_envelope(message, status=None, detail=None):
    """Build a consistent CLI-safe HTTP error message."""
    suffix = f" (status={status})" if status is not None else ""
    body = f"[ERROR] {message}{suffix}"
    if detail:
        body += f"\n{detail}"
    return body


# ---------------------------------------------------------------------------
# API base helpers
# ---------------------------------------------------------------------------


def resolve_api_base(api_base=None):
    """Return the explicit base URL, or the configured one. Raises ConfigError."""
    base = (api_base or config.API_BASE_URL or "").strip().rstrip("/")
    if not base:
        raise ConfigError(
            "[ERROR] Set environment variable KAITEN_API_BASE_URL "
            "(e.g. https://company.kaiten.ru/api/v1)"
        )
    return base


def latest_api_base(api_base):
    """Kaiten serves cards and columns from /latest; swap a trailing /v1."""
    return re.sub(r"/v1$", "/latest", api_base)


def auth_headers(token=None):
    """Bearer auth header for *token*, or the configured token. Empty if none."""
    token = config.API_TOKEN if token is None else token
    return {"Authorization": f"Bearer {token}"} if token else {}


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _http_request(url, data=None, headers=None, method="GET"):
    """Make an HTTP request with standard error handling.
    Returns parsed JSON on success (an empty dict for empty bodies).
    Raises HTTPError for HTTP errors (caller handles specific codes).
    Raises CliError on network/timeout/parse errors."""
    body = json.dumps(data).encode("utf-8") if data is not None else None
    headers = dict(headers or {})
    headers.setdefault("Accept", "application/json")
    if body is not None:
        headers.setdefault("Content-Type", "application/json")
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    start = time.perf_counter()
    _log_http_event(
        phase="request",
        method=method,
        url=url,
        headers=_safe_headers_for_log(headers),
        timeout_seconds=timeout,
    )
    try:
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise CliError(
                    "[ERROR] Response too large from Kaiten API "
                    f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            _log_http_event(
                phase="response",
                method=method,
                url=url,
                status=getattr(resp, "status", 200),
                content_type=content_type,
                bytes=len(raw),
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            if not raw.strip():
                return {}
            try:
                return json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                if content_type and "json" not in content_type.lower():
                    raise CliError(
                        f"[ERROR] Unexpected Content-Type from server "
                        f"({content_type}). This may be a proxy or "
                        "network issue."
                    ) from None
                raise CliError("[ERROR] Unexpected response from Kaiten API (not valid JSON).") from None
    except urllib.error.HTTPError as e:
        error_body = (
            e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
            if e.fp
            else ""
        )
        _log_http_event(
            phase="response",
            method=method,
            url=url,
            status=e.code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
    except TimeoutError as e:
        _log_http_event(phase="network_error", method=method, url=url, error="timeout")
        raise CliError(
            _error_envelope(f"Request timed out after {timeout} seconds. Is Kaiten API reachable?")
        ) from e
    except urllib.error.URLError as e:
        _log_http_event(phase="network_error", method=method, url=url, error=f"url_error: {e.reason}")
        raise CliError(_error_envelope(f"Connection failed: {e.reason}")) from e
    except http.client.HTTPException as e:
        _log_http_event(phase="network_error", method=method, url=url, error=repr(e))
        raise CliError(_error_envelope(f"Connection dropped: {e!r}")) from e
    except ValueError as e:
        raise CliError(_error_envelope(f"Invalid request URL {url!r}: {e}")) from e


def api_request(path, data=None, method="GET", *, token=None, api_base=None):
    """Make an authenticated request against the Kaiten REST API.

    *path* is appended to the resolved API base. *api_base* may be a full
    base URL (e.g. the ``/latest`` variant) to override the configured one.
    """
    url = resolve_api_base(api_base) + path
    try:
        return _http_request(url, data, auth_headers(token), method)
    except HTTPError as e:
        if e.code in (401, 403):
            raise CliError(
                _error_envelope(
                    f"HTTP {e.code}: {e.reason}. Check KAITEN_API_TOKEN or pass --token.",
                    status=e.code,
                    detail=_sanitize_error(e.body),
                )
            ) from e
        raise CliError(
            _error_envelope(
                f"HTTP {e.code}: {e.reason} ({method} {path})",
                status=e.code,
                detail=_sanitize_error(e.body),
            )
        ) from e


def _same_host(url, api_base):
    if not api_base:
        return False
    return urllib.parse.urlsplit(url).netloc == urllib.parse.urlsplit(api_base).netloc


def _quote_url(url):
    """Percent-encode non-ASCII and unsafe characters in the URL path."""
    parts = urllib.parse.urlsplit(url)
    return urllib.parse.urlunsplit(parts._replace(path=urllib.parse.quote(parts.path, safe="/%:@")))


def _discard_partial(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def download_file(url, dest_path, *, token=None, api_base=None):
    """Stream *url* to *dest_path*. Returns the number of bytes written.

    The bearer token is only sent when the file lives on the API host;
    pre-signed storage URLs reject extra Authorization headers. A failed
    download leaves no file behind.
    """
    if not url:
        raise CliError("[ERROR] File has no download URL.")
    base = api_base or config.API_BASE_URL
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    _log_http_event(phase="download", method="GET", url=url, dest=str(dest_path))
    try:
        headers = auth_headers(token) if _same_host(url, base) else {}
        req = urllib.request.Request(_quote_url(url), headers=headers, method="GET")
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest_path, "wb") as f:
            shutil.copyfileobj(resp, f)
            written = f.tell()
    except urllib.error.HTTPError as e:
        _discard_partial(dest_path)
        raise CliError(_error_envelope(f"Download failed: HTTP {e.code}: {e.reason}", status=e.code)) from e
    except TimeoutError as e:
        _discard_partial(dest_path)
        raise CliError(_error_envelope(f"Download timed out after {timeout} seconds: {url}")) from e
    except urllib.error.URLError as e:
        _discard_partial(dest_path)
        raise CliError(_error_envelope(f"Download failed: {e.reason}")) from e
    except http.client.HTTPException as e:
        _discard_partial(dest_path)
        raise CliError(_error_envelope(f"Download interrupted: {e!r}")) from e
    except ValueError as e:
        _discard_partial(dest_path)
        raise CliError(_error_envelope(f"Invalid download URL {url!r}: {e}")) from e
    except OSError:
        _discard_partial(dest_path)
        raise
    _log_http_event(phase="downloaded", url=url, bytes=written)
    return written
