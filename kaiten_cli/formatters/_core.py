"""Core output dispatchers: JSON serialization and file/stdout writing."""

import json
import os

from kaiten_cli import config


def to_json(data):
    return json.dumps(data, indent=2, ensure_ascii=False)


def pretty_print(data):
    print(to_json(data))


def write_text(path, text):
    """Write UTF-8 text, creating parent directories as needed."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def output(text, output_file=None):
    """Print *text*, or write it to *output_file* when one is given."""
    if output_file:
        write_text(output_file, text)
        progress(f"Saved to {output_file}")
    else:
        print(text)


def output_json(data, output_file=None):
    output(to_json(data), output_file)


def progress(message):
    """Progress line on stdout, suppressed by --quiet."""
    if not config.RUNTIME_QUIET:
        print(message)
