"""
Command implementations for kaiten-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (KaitenClient). These thin wrappers
handle argparse → keyword args, output destination, and progress messages.
"""

from kaiten_cli.client import KaitenClient
from kaiten_cli.exceptions import CliError
from kaiten_cli.formatters import output, output_json, progress


def _client(ns):
    return KaitenClient(token=ns.token)


def _require_confirm(ns, what):
    if not ns.confirm:
        raise CliError(f"[ERROR] Permanent deletion of {what} requires --confirm flag.")


# ---------------------------------------------------------------------------
# Creators
# ---------------------------------------------------------------------------


def cmd_create_space(ns):
    output_json(_client(ns).create_space(ns.name), ns.output_file)


def cmd_create_board(ns):
    output_json(_client(ns).create_board(ns.space_id, ns.name), ns.output_file)


def cmd_create_column(ns):
    output_json(_client(ns).create_column(ns.board_id, ns.title), ns.output_file)


def cmd_create_card(ns):
    card = _client(ns).create_card(
        ns.board_id, ns.name, column_id=ns.column_id, lane_id=ns.lane_id
    )
    output_json(card, ns.output_file)


# ---------------------------------------------------------------------------
# Deleters
# ---------------------------------------------------------------------------


def cmd_delete_card(ns):
    _require_confirm(ns, f"card {ns.card_id}")
    _client(ns).delete_card(ns.card_id)
    progress(f"OK: deleted card {ns.card_id}")


def cmd_delete_board(ns):
    _require_confirm(ns, f"board {ns.board_id}")
    _client(ns).delete_board(ns.space_id, ns.board_id)
    progress(f"OK: deleted board {ns.board_id}")


def cmd_delete_space(ns):
    _require_confirm(ns, f"space {ns.space_id}")
    _client(ns).delete_space(ns.space_id)
    progress(f"OK: deleted space {ns.space_id}")


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------


def _report_tree(node):
    """Print a one-line summary of a recursive download."""
    cards = 0
    failures = []
    skipped = 0
    stack = [node]
    while stack:
        current = stack.pop()
        cards += 1
        failures.extend(current.failures)
        skipped += int(current.children_skipped)
        stack.extend(current.children)
    summary = f"Downloaded {cards} card(s) to {node.directory}"
    if failures:
        summary += f", {len(failures)} failure(s)"
    if skipped:
        summary += f", children skipped at depth limit under {skipped} card(s)"
    progress(summary)


def cmd_download_card(ns):
    client, card_id = KaitenClient.for_card_input(ns.card, token=ns.token)

    if ns.stdout_only:
        print(client.download_card(card_id)["markdown"])
        return

    if ns.recursive:
        node = client.download_card_tree(
            card_id,
            ns.output_dir or ".",
            max_depth=ns.max_depth,
            skip_files=ns.skip_files_download,
        )
        _report_tree(node)
        return

    if ns.output_dir:
        result = client.save_card(card_id, ns.output_dir, skip_files=ns.skip_files_download)
        summary = f"Saved card {card_id} to {ns.output_dir}"
        if result["failures"]:
            summary += f", {len(result['failures'])} file(s) failed"
        progress(summary)
        return

    output(client.download_card(card_id)["markdown"], ns.output_file)
