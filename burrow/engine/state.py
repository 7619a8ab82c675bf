from __future__ import annotations

from dataclasses import dataclass, field

from burrow.models.entry import (
    Clipboard,
    DirectoryPreview,
    Entry,
    Notification,
    ParentView,
    PreviewContent,
)
from burrow.models.enums import InteractionMode, PopupKind


def _empty_preview() -> PreviewContent:
    return DirectoryPreview([])


@dataclass(slots=True)
class EngineState:
    current_path: str
    entries: list[Entry] = field(default_factory=list)
    parent_view: ParentView = field(default_factory=ParentView)
    cursor: int | None = None
    mode: InteractionMode = InteractionMode.NORMAL
    clipboard: Clipboard = field(default_factory=Clipboard)
    popup: PopupKind = PopupKind.NONE
    input_buffer: str = ""
    notification: Notification | None = None
    preview: PreviewContent = field(default_factory=_empty_preview)

    @property
    def selected_entry(self) -> Entry | None:
        """The entry under the cursor."""
        if self.cursor is None or not self.entries:
            return None
        return self.entries[self.cursor]

    def selected_paths(self) -> list[str]:
        """Paths of every entry flagged as selected, in listing order."""
        return [entry.path for entry in self.entries if entry.is_selected]

    def has_selection(self) -> bool:
        return any(entry.is_selected for entry in self.entries)
