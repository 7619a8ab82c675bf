from __future__ import annotations

from enum import Enum


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


class InteractionMode(str, Enum):
    NORMAL = "normal"
    MULTI_SELECT = "multi_select"


class PopupKind(str, Enum):
    NONE = "none"
    CONFIRM = "confirm"
    RENAME = "rename"
    CREATE = "create"


class ClipboardAction(str, Enum):
    NONE = "none"
    COPY = "copy"
    MOVE = "move"
