"""
Typed records for Kaiten API payloads and download results.

Records are built from raw API dicts via ``from_api``. Every optional field
is nullable; absent collections become empty tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kaiten_cli import config
from kaiten_cli._utils import _as_list, _first_present, _timestamp_sort_key

UNNAMED_ITEM = "Unnamed item"
UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class User:
    username: str | None = None
    full_name: str | None = None
    email: str | None = None
    role_type: int | None = None

    @classmethod
    def from_api(cls, data):
        if not isinstance(data, dict):
            return None
        return cls(
            username=data.get("username") or None,
            full_name=data.get("full_name") or None,
            email=data.get("email") or None,
            role_type=data.get("type"),
        )

    @property
    def is_responsible(self) -> bool:
        return self.role_type == config.RESPONSIBLE_ROLE_TYPE

    @property
    def display_name(self) -> str:
        """Full name, then username, then "Unknown"."""
        return self.full_name or self.username or UNKNOWN_AUTHOR


@dataclass(frozen=True)
class ChecklistItem:
    name: str
    checked: bool
    due: str | None = None
    assignee: User | None = None

    @classmethod
    def from_api(cls, data):
        data = data if isinstance(data, dict) else {}
        return cls(
            name=_first_present(data, ("name", "title", "text"), UNNAMED_ITEM),
            checked=bool(data.get("checked") or data.get("completed") or data.get("is_checked")),
            due=_first_present(data, ("due_date", "due")),
            assignee=User.from_api(data.get("assignee")),
        )


@dataclass(frozen=True)
class Checklist:
    name: str | None
    items: tuple[ChecklistItem, ...] = ()

    @classmethod
    def from_api(cls, data):
        data = data if isinstance(data, dict) else {}
        raw_items = _first_present(data, ("items", "checklist_items"), [])
        return cls(
            name=_first_present(data, ("name", "title")),
            items=tuple(ChecklistItem.from_api(i) for i in _as_list(raw_items)),
        )


@dataclass(frozen=True)
class FileAttachment:
    id: Any
    name: str
    url: str | None
    size: int | None = None
    created: str | None = None

    @classmethod
    def from_api(cls, data):
        data = data if isinstance(data, dict) else {}
        file_id = data.get("id")
        return cls(
            id=file_id,
            name=data.get("name") or f"file_{file_id}",
            url=data.get("url"),
            size=data.get("size"),
            created=data.get("created"),
        )

    @property
    def is_image(self) -> bool:
        _, dot, ext = self.name.rpartition(".")
        return bool(dot) and ext.lower() in config.IMAGE_EXTENSIONS

    @property
    def safe_name(self) -> str:
        """Attachment name without path components, usable inside files/."""
        base = self.name.replace("\\", "/").rsplit("/", 1)[-1]
        return base if base not in ("", ".", "..") else f"file_{self.id}"


def local_file_names(files):
    """On-disk names for *files*, in order, unique within one files/ directory.

    A name already taken gets an ``<id>_`` prefix, then a numeric suffix.
    """
    taken = set()
    names = []
    for f in files:
        name = f.safe_name
        if name in taken:
            name = f"{f.id}_{name}"
        stem, dot, ext = name.rpartition(".")
        counter = 2
        while name in taken:
            name = f"{stem}_{counter}{dot}{ext}" if dot else f"{ext}_{counter}"
            counter += 1
        taken.add(name)
        names.append(name)
    return names


@dataclass(frozen=True)
class Comment:
    id: Any
    author: User | None
    created: str | None
    text: str
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data):
        data = data if isinstance(data, dict) else {}
        return cls(
            id=data.get("id"),
            author=User.from_api(data.get("author")),
            created=data.get("created"),
            text=data.get("text") or "",
            raw=data,
        )

    @property
    def author_name(self) -> str:
        return self.author.display_name if self.author else UNKNOWN_AUTHOR


def sort_comments_newest_first(comments):
    """Stable sort by creation time, newest first."""
    return sorted(comments, key=lambda c: _timestamp_sort_key(c.created), reverse=True)


@dataclass(frozen=True)
class CardLocation:
    board: str
    column: str
    lane: str
    spaces: tuple[str, ...] = ()

    @classmethod
    def from_card(cls, data):
        """Location only exists when board, column and lane are all present."""
        board = data.get("board") if isinstance(data.get("board"), dict) else None
        column = data.get("column") if isinstance(data.get("column"), dict) else None
        lane = data.get("lane") if isinstance(data.get("lane"), dict) else None
        if not (board and column and lane):
            return None
        spaces = _as_list(board.get("spaces")) or _as_list(data.get("spaces"))
        return cls(
            board=board.get("title") or "",
            column=column.get("title") or "",
            lane=lane.get("title") or "",
            spaces=tuple(
                _first_present(s, ("title", "name"), "")
                for s in spaces
                if isinstance(s, dict) and s.get("primary_path")
            ),
        )


@dataclass(frozen=True)
class Card:
    id: Any
    title: str
    owner: User | None = None
    status_name: str | None = None
    estimate: float | int | None = None
    type_letter: str | None = None
    type_name: str | None = None
    location: CardLocation | None = None
    members: tuple[User, ...] = ()
    description: str | None = None
    checklists: tuple[Checklist, ...] = ()
    checklist_items: tuple[ChecklistItem, ...] = ()
    files: tuple[FileAttachment, ...] = ()
    children_count: int = 0
    children_done: int = 0
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data):
        data = data if isinstance(data, dict) else {}
        status = data.get("status") if isinstance(data.get("status"), dict) else {}
        card_type = data.get("type") if isinstance(data.get("type"), dict) else {}
        members = [User.from_api(m) for m in _as_list(data.get("members"))]
        return cls(
            id=data.get("id"),
            title=data.get("title") or f"Card {data.get('id')}",
            owner=User.from_api(data.get("owner")),
            status_name=status.get("name") or None,
            estimate=data.get("estimate"),
            type_letter=card_type.get("letter") or None,
            type_name=card_type.get("name") or None,
            location=CardLocation.from_card(data),
            members=tuple(m for m in members if m is not None),
            description=data.get("description") or None,
            checklists=tuple(
                Checklist.from_api(c)
                for c in _as_list(_first_present(data, ("checklists", "check_lists"), []))
            ),
            checklist_items=tuple(
                ChecklistItem.from_api(i)
                for i in _as_list(_first_present(data, ("checklist_items", "checklistItems"), []))
            ),
            files=tuple(FileAttachment.from_api(f) for f in _as_list(data.get("files"))),
            children_count=data.get("children_count") or 0,
            children_done=data.get("children_done") or 0,
            raw=data,
        )

    @property
    def members_responsible_first(self) -> list[User]:
        # sorted() is stable, so relative order is kept within each group
        return sorted(self.members, key=lambda m: 0 if m.is_responsible else 1)


# ---------------------------------------------------------------------------
# Download results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepResult:
    """Outcome of one best-effort sub-operation (file or child download)."""

    kind: str
    target: str
    ok: bool
    error: str | None = None


@dataclass
class DownloadNode:
    """One downloaded card plus its downloaded descendants."""

    card: dict
    markdown: str
    comments: list[dict]
    children: list[DownloadNode] = field(default_factory=list)
    directory: str | None = None
    steps: list[StepResult] = field(default_factory=list)
    children_skipped: bool = False

    @property
    def failures(self) -> list[StepResult]:
        return [s for s in self.steps if not s.ok]

    def to_dict(self) -> dict:
        return {
            "card": self.card,
            "markdown": self.markdown,
            "comments": self.comments,
            "directory": self.directory,
            "children_skipped": self.children_skipped,
            "failures": [
                {"kind": s.kind, "target": s.target, "error": s.error} for s in self.failures
            ],
            "children": [c.to_dict() for c in self.children],
        }
