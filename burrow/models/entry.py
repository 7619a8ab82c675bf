from __future__ import annotations

from dataclasses import dataclass, field

from burrow.models.enums import ClipboardAction, EntryKind


@dataclass(slots=True)
class Entry:
    name: str
    path: str
    kind: EntryKind
    size: int = 0
    permissions: int = 0
    is_selected: bool = False
    mime_type: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind is EntryKind.SYMLINK


@dataclass(slots=True)
class ParentView:
    entries: list[Entry] = field(default_factory=list)
    path: str | None = None
    cursor: int | None = None


@dataclass(slots=True)
class Clipboard:
    paths: list[str] = field(default_factory=list)
    action: ClipboardAction = ClipboardAction.NONE

    @property
    def is_pending(self) -> bool:
        return self.action is not ClipboardAction.NONE


@dataclass(slots=True, frozen=True)
class Notification:
    message: str
    created_at: float
    duration: float = 3.0

    def is_expired(self, now: float) -> bool:
        return now - self.created_at >= self.duration


@dataclass(slots=True, frozen=True)
class TextContent:
    text: str


@dataclass(slots=True, frozen=True)
class BinaryContent:
    summary: str


FileContent = TextContent | BinaryContent


@dataclass(slots=True, frozen=True)
class DirectoryPreview:
    entries: list[Entry]


@dataclass(slots=True, frozen=True)
class FilePreview:
    content: FileContent


PreviewContent = DirectoryPreview | FilePreview


@dataclass(slots=True, frozen=True)
class Snapshot:
    """A directory listing together with its parent's listing."""

    entries: list[Entry]
    parent_path: str | None
    parent_entries: list[Entry]
