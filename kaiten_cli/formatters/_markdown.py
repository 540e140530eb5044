"""Card → Markdown renderer used by download-card."""

from markdownify import markdownify

from kaiten_cli._utils import _format_timestamp
from kaiten_cli.models import Card, Comment, local_file_names, sort_comments_newest_first


def html_to_markdown(html):
    """Convert an HTML fragment to Markdown (ATX headings, ``-`` bullets)."""
    if not html:
        return ""
    return markdownify(html, heading_style="ATX", bullets="-").strip()


def format_user(user):
    """``@username (Full Name) <email>`` with absent parts left out."""
    if user is None:
        return ""
    parts = []
    if user.username:
        parts.append(f"@{user.username}")
    if user.full_name:
        parts.append(f"({user.full_name})")
    if user.email:
        parts.append(f"<{user.email}>")
    return " ".join(parts)


def _format_location(location):
    path = [*location.spaces, location.board, location.column]
    return " / ".join(p for p in path if p) + f" ({location.lane})"


def _format_type(card):
    parts = []
    if card.type_letter:
        parts.append(f"[{card.type_letter}]")
    if card.type_name:
        parts.append(card.type_name)
    return " ".join(parts)


def _format_checklist_item(item):
    line = f"- {'[x]' if item.checked else '[ ]'} {item.name}"
    if item.due:
        line += f" (due: {item.due})"
    if item.assignee:
        if item.assignee.username:
            line += f" [@{item.assignee.username}]"
        elif item.assignee.full_name:
            line += f" [{item.assignee.full_name}]"
    return line + "\n"


def _metadata_section(card):
    md = f"- **ID**: {card.id}\n"
    owner = format_user(card.owner)
    if owner:
        md += f"- **Owner**: {owner}\n"
    if card.location:
        md += f"- **Location**: {_format_location(card.location)}\n"
    card_type = _format_type(card)
    if card_type:
        md += f"- **Type**: {card_type}\n"
    if card.status_name:
        md += f"- **Status**: {card.status_name}\n"
    if card.estimate is not None:
        md += f"- **Estimate**: {card.estimate}\n"
    if card.children_count > 0:
        md += f"- **Children**: {card.children_done}/{card.children_count} completed\n"
    members = []
    for member in card.members_responsible_first:
        name = format_user(member)
        if not name:
            continue
        members.append(f"{name} (responsible)" if member.is_responsible else name)
    if members:
        md += f"- **Members**: {', '.join(members)}\n"
    return md


def _checklists_section(card):
    if not card.checklists and not card.checklist_items:
        return ""
    md = "\n## Checklists\n\n"
    if card.checklists:
        for checklist in card.checklists:
            md += f"### {checklist.name or 'Checklist'}\n\n"
            for item in checklist.items:
                md += _format_checklist_item(item)
            md += "\n"
    else:
        # Flat items only stand in when the card has no grouped checklists
        md += "### Checklist\n\n"
        for item in card.checklist_items:
            md += _format_checklist_item(item)
        md += "\n"
    return md


def _comments_section(comments):
    if not comments:
        return ""
    md = "\n## Comments\n\n"
    for comment in sort_comments_newest_first(comments):
        md += f"### By {comment.author_name} at {_format_timestamp(comment.created)}\n\n"
        md += html_to_markdown(comment.text)
        md += "\n\n"
    return md


def _files_section(card):
    if not card.files:
        return ""
    md = "\n## Files\n\n"
    for f, local_name in zip(card.files, local_file_names(card.files)):
        md += f"### {f.name}\n\n"
        md += f"- **Source**: {f.url or ''}\n"
        md += f"- **Size**: {f.size if f.size is not None else 0} bytes\n"
        if f.created:
            md += f"- **Created**: {_format_timestamp(f.created)}\n"
        ref = f"./files/{local_name}"
        md += f"\n![{f.name}]({ref})\n\n" if f.is_image else f"\n[{f.name}]({ref})\n\n"
    return md


def _children_section(children):
    if not children:
        return ""
    md = "\n## Children Cards\n\n"
    for child in children:
        md += f"- [{child.title}](./children/{child.id}/card.md)"
        if child.status_name:
            md += f" - {child.status_name}"
        if child.type_letter:
            md += f" [{child.type_letter}]"
        if child.children_count > 0:
            md += f" ({child.children_done}/{child.children_count} subtasks)"
        md += "\n"
    return md + "\n"


def render_card_markdown(card, comments=None, children=None):
    """Render a card with its comments and children as one Markdown document.

    Accepts raw API dicts or already-built records for every argument.
    Sections are emitted in a fixed order and only when they have data;
    the Description header is always present.
    """
    if not isinstance(card, Card):
        card = Card.from_api(card)
    comments = [c if isinstance(c, Comment) else Comment.from_api(c) for c in comments or []]
    children = [c if isinstance(c, Card) else Card.from_api(c) for c in children or []]

    md = f"# {card.title}\n\n"
    md += _metadata_section(card)
    md += "\n## Description\n\n"
    md += html_to_markdown(card.description)
    md += "\n"
    md += _checklists_section(card)
    md += _comments_section(comments)
    md += _files_section(card)
    md += _children_section(children)
    return md
