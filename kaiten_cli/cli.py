"""
kaiten-cli — command-line helpers for the Kaiten REST API
"""

import argparse
import sys

from kaiten_cli import config
from kaiten_cli.commands import (
    cmd_create_board,
    cmd_create_card,
    cmd_create_column,
    cmd_create_space,
    cmd_delete_board,
    cmd_delete_card,
    cmd_delete_space,
    cmd_download_card,
)
from kaiten_cli.exceptions import CliError

HELP_TEXT = """\
Usage: kaiten-cli <command> [args...]

Global flags:
  --quiet, -q             Suppress progress output and warnings
  --verbose, -v           Enable HTTP request logging
  --version               Show version number

Commands:
  create-space <name> [output_file]            - Create a space
  create-board <space_id> <name> [output_file] - Create a board with one column and lane
  create-column <board_id> <title> [output_file]
                                               - Create a column on a board
  create-card <board_id> <name> [output_file]  - Create a card on a board
    --column-id <id>        Target column (default: first column of the board)
    --lane-id <id>          Target lane (default: first lane of the board)
  download-card <card_id|url> [output_file]    - Download a card as Markdown
    (run: kaiten-cli download-card --help)
  delete-card <card_id> --confirm              - PERMANENTLY delete a card
  delete-board <space_id> <board_id> --confirm - PERMANENTLY delete a board
  delete-space <space_id> --confirm            - PERMANENTLY delete a space

Every command accepts:
  --token <token>         API token (default: KAITEN_API_TOKEN)

Environment:
  KAITEN_API_TOKEN        Bearer token for authentication
  KAITEN_API_BASE_URL     API base, e.g. https://company.kaiten.ru/api/v1
"""

DOWNLOAD_HELP_TEXT = """\
Usage: kaiten-cli download-card <card_id|url> [output_file] [options]

Card input:
  123456                                          (needs KAITEN_API_BASE_URL)
  https://company.kaiten.ru/123456
  https://company.kaiten.ru/space/42/boards/card/123456

Options:
  --stdout-only           Print the Markdown only, write nothing to disk
  --output-dir <dir>      Write card.md, card.json, comments/ and files/ to <dir>
  --recursive             Also download child cards into children/<id>/
  --max-depth <n>         Maximum child depth for --recursive (default: 3)
  --skip-files-download   Do not download file attachments
  --token <token>         API token (default: KAITEN_API_TOKEN)
  --help, -h              Show this help
"""

COMMAND_USAGE = {
    "create-space": "Usage: kaiten-cli create-space <name> [output_file] [--token <token>]",
    "create-board": (
        "Usage: kaiten-cli create-board <space_id> <name> [output_file] [--token <token>]"
    ),
    "create-column": (
        "Usage: kaiten-cli create-column <board_id> <title> [output_file] [--token <token>]"
    ),
    "create-card": (
        "Usage: kaiten-cli create-card <board_id> <name> [output_file]"
        " [--column-id <id>] [--lane-id <id>] [--token <token>]"
    ),
    "download-card": DOWNLOAD_HELP_TEXT,
    "delete-card": "Usage: kaiten-cli delete-card <card_id> --confirm [--token <token>]",
    "delete-board": (
        "Usage: kaiten-cli delete-board <space_id> <board_id> --confirm [--token <token>]"
    ),
    "delete-space": "Usage: kaiten-cli delete-space <space_id> --confirm [--token <token>]",
}


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after the subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (quiet, verbose, remaining_argv). Handles --version directly.
    """
    quiet = False
    verbose = False
    remaining = []
    for arg in argv:
        if arg == "--version":
            print(f"kaiten-cli {config.VERSION}")
            sys.exit(0)
        elif arg in ("--quiet", "-q"):
            quiet = True
        elif arg in ("--verbose", "-v"):
            verbose = True
        else:
            remaining.append(arg)
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return quiet, verbose, remaining


def _help_requested(argv):
    """Return the help text to show, or None. Checked before argparse so that
    `<command> --help` works without the command's required arguments."""
    if not any(a in ("--help", "-h") for a in argv):
        return None
    command = next((a for a in argv if not a.startswith("-")), None)
    return COMMAND_USAGE.get(command, HELP_TEXT)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _non_negative_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a non-negative integer") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be a non-negative integer")
    return parsed


def _add_common(p):
    p.add_argument("--token", default=None)


def build_parser():
    parser = _SubcommandParser(
        prog="kaiten-cli",
        description="Command-line helpers for the Kaiten REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- create-space ---
    p = sub.add_parser("create-space", add_help=False)
    p.add_argument("name")
    p.add_argument("output_file", nargs="?")
    _add_common(p)
    p.set_defaults(func=cmd_create_space)

    # --- create-board ---
    p = sub.add_parser("create-board", add_help=False)
    p.add_argument("space_id")
    p.add_argument("name")
    p.add_argument("output_file", nargs="?")
    _add_common(p)
    p.set_defaults(func=cmd_create_board)

    # --- create-column ---
    p = sub.add_parser("create-column", add_help=False)
    p.add_argument("board_id")
    p.add_argument("title")
    p.add_argument("output_file", nargs="?")
    _add_common(p)
    p.set_defaults(func=cmd_create_column)

    # --- create-card ---
    p = sub.add_parser("create-card", add_help=False)
    p.add_argument("board_id")
    p.add_argument("name")
    p.add_argument("output_file", nargs="?")
    p.add_argument("--column-id", dest="column_id")
    p.add_argument("--lane-id", dest="lane_id")
    _add_common(p)
    p.set_defaults(func=cmd_create_card)

    # --- download-card ---
    p = sub.add_parser("download-card", add_help=False)
    p.add_argument("card")
    p.add_argument("output_file", nargs="?")
    p.add_argument("--output-dir", dest="output_dir")
    p.add_argument("--stdout-only", action="store_true", dest="stdout_only")
    p.add_argument("--recursive", action="store_true")
    p.add_argument(
        "--max-depth", type=_non_negative_int, default=config.DEFAULT_MAX_DEPTH, dest="max_depth"
    )
    p.add_argument("--skip-files-download", action="store_true", dest="skip_files_download")
    _add_common(p)
    p.set_defaults(func=cmd_download_card)

    # --- delete-card / delete-board / delete-space ---
    p = sub.add_parser("delete-card", add_help=False)
    p.add_argument("card_id")
    p.add_argument("--confirm", action="store_true")
    _add_common(p)
    p.set_defaults(func=cmd_delete_card)

    p = sub.add_parser("delete-board", add_help=False)
    p.add_argument("space_id")
    p.add_argument("board_id")
    p.add_argument("--confirm", action="store_true")
    _add_common(p)
    p.set_defaults(func=cmd_delete_board)

    p = sub.add_parser("delete-space", add_help=False)
    p.add_argument("space_id")
    p.add_argument("--confirm", action="store_true")
    _add_common(p)
    p.set_defaults(func=cmd_delete_space)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def main(argv=None, command=None):
    """Run the CLI. *command* pins the subcommand for single-purpose scripts."""
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = list(sys.argv[1:] if argv is None else argv)
    if command:
        argv = [command, *argv]

    try:
        quiet, verbose, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.HTTP_LOG_ENABLED = True

        help_text = _help_requested(remaining_argv)
        if help_text or not remaining_argv:
            print(help_text or HELP_TEXT)
            sys.exit(0)

        ns = build_parser().parse_args(remaining_argv)
        handler = getattr(ns, "func", None)
        if not handler:
            raise CliError(f"[ERROR] Unknown command: {ns.command}")
        handler(ns)
    except CliError as e:
        print(str(e), file=sys.stderr)
        sys.exit(e.exit_code)
    except OSError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)


def create_space_main():
    main(command="create-space")


def create_board_main():
    main(command="create-board")


def create_column_main():
    main(command="create-column")


def create_card_main():
    main(command="create-card")


def download_card_main():
    main(command="download-card")


if __name__ == "__main__":
    main()
