"""
Card download: persist a card (markdown, raw JSON, comments, attachments)
to disk, optionally walking its children down to a maximum depth.

Output layout for one card directory:

    card.md
    card.json
    comments/<index>_<comment_id>.json
    files/<file name>
    children/<child_id>/...        (recursive downloads only)

Partial failures (one attachment, one child card) are reported and recorded
as StepResult entries; they never abort the surrounding download.
"""

from __future__ import annotations

import os

from kaiten_cli import config
from kaiten_cli.api import download_file, warn
from kaiten_cli.cards import fetch_card_bundle
from kaiten_cli.exceptions import CliError
from kaiten_cli.formatters import progress, render_card_markdown, to_json, write_text
from kaiten_cli.models import Card, DownloadNode, StepResult, local_file_names

CARD_MARKDOWN = "card.md"
CARD_JSON = "card.json"
COMMENTS_DIR = "comments"
FILES_DIR = "files"
CHILDREN_DIR = "children"


def _comment_filename(index, comment):
    return f"{index}_{comment.get('id', 'unknown')}.json"


def save_comments(comments, directory):
    """Write each comment as its own JSON file under comments/."""
    if not comments:
        return
    comments_dir = os.path.join(directory, COMMENTS_DIR)
    os.makedirs(comments_dir, exist_ok=True)
    for index, comment in enumerate(comments, start=1):
        write_text(os.path.join(comments_dir, _comment_filename(index, comment)), to_json(comment))


def download_attachments(card, directory, *, token=None, api_base=None):
    """Stream every attachment of *card* into files/. Returns StepResults."""
    files = Card.from_api(card).files
    if not files:
        return []
    files_dir = os.path.join(directory, FILES_DIR)
    os.makedirs(files_dir, exist_ok=True)
    results = []
    for attachment, local_name in zip(files, local_file_names(files)):
        dest = os.path.join(files_dir, local_name)
        try:
            download_file(attachment.url, dest, token=token, api_base=api_base)
        except (CliError, OSError) as e:
            warn(f"Failed to download file '{attachment.name}' of card {card.get('id')}: {e}")
            results.append(StepResult("file", attachment.name, False, str(e)))
            continue
        results.append(StepResult("file", attachment.name, True))
    return results


def save_card_bundle(
    bundle,
    directory,
    *,
    markdown=None,
    skip_files=False,
    token=None,
    api_base=None,
):
    """Write one fetched card bundle straight into *directory*.

    *bundle* is the dict returned by cards.fetch_card_bundle(). Returns the
    StepResults of the attachment downloads.
    """
    card = bundle["card"]
    if markdown is None:
        markdown = render_card_markdown(card, bundle.get("comments"), bundle.get("children"))
    os.makedirs(directory, exist_ok=True)
    write_text(os.path.join(directory, CARD_MARKDOWN), markdown)
    write_text(os.path.join(directory, CARD_JSON), to_json(card))
    save_comments(bundle.get("comments") or [], directory)
    if skip_files:
        return []
    return download_attachments(card, directory, token=token, api_base=api_base)


def download_card_tree(
    card_id,
    output_dir,
    *,
    max_depth=config.DEFAULT_MAX_DEPTH,
    depth=0,
    skip_files=False,
    token=None,
    api_base=None,
) -> DownloadNode:
    """Download *card_id* into ``<output_dir>/<card_id>/`` and recurse into children.

    The root is at depth 0; children are fetched while ``depth < max_depth``.
    A failing child is logged and recorded on the parent node, and its
    siblings are still downloaded. Errors for the card itself propagate.
    """
    bundle = fetch_card_bundle(card_id, token=token, api_base=api_base)
    card = bundle["card"]
    children = bundle["children"]
    markdown = render_card_markdown(card, bundle["comments"], children)

    card_dir = os.path.join(output_dir, str(card.get("id", card_id)))
    node = DownloadNode(
        card=card,
        markdown=markdown,
        comments=bundle["comments"],
        directory=card_dir,
    )
    node.steps.extend(
        save_card_bundle(
            bundle,
            card_dir,
            markdown=markdown,
            skip_files=skip_files,
            token=token,
            api_base=api_base,
        )
    )
    progress(f"Saved card {card.get('id', card_id)} to {card_dir}")

    if not children:
        return node
    if depth >= max_depth:
        node.children_skipped = True
        warn(
            f"Max depth {max_depth} reached at card {card.get('id', card_id)}; "
            f"skipped {len(children)} child card(s)"
        )
        return node

    children_dir = os.path.join(card_dir, CHILDREN_DIR)
    os.makedirs(children_dir, exist_ok=True)
    for child in children:
        child_id = child.get("id")
        try:
            child_node = download_card_tree(
                child_id,
                children_dir,
                max_depth=max_depth,
                depth=depth + 1,
                skip_files=skip_files,
                token=token,
                api_base=api_base,
            )
        except (CliError, OSError) as e:
            warn(f"Failed to download child card {child_id}: {e}")
            node.steps.append(StepResult("child", str(child_id), False, str(e)))
            continue
        node.children.append(child_node)
        node.steps.append(StepResult("child", str(child_id), True))
    return node
