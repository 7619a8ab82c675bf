from __future__ import annotations

from enum import Enum

from burrow.models.enums import InteractionMode, PopupKind


class Command(str, Enum):
    NAVIGATE_UP = "navigate_up"
    NAVIGATE_DOWN = "navigate_down"
    NAVIGATE_TO_CHILD = "navigate_to_child"
    NAVIGATE_TO_PARENT = "navigate_to_parent"
    TOGGLE_CONFIRM = "toggle_confirm"
    CONFIRM = "confirm"
    DELETE_SELECTED = "delete_selected"
    DELETE_MULTIPLE = "delete_multiple"
    OPEN_RENAME = "open_rename"
    OPEN_CREATE = "open_create"
    CLOSE_POPUP = "close_popup"
    INPUT = "input"
    SUBMIT_INPUT = "submit_input"
    RENAME = "rename"
    CREATE = "create"
    COPY = "copy"
    MOVE = "move"
    PASTE = "paste"
    SELECT_CURRENT = "select_current"
    DESELECT_ALL = "deselect_all"
    ENTER_MULTI_SELECT = "enter_multi_select"
    EXIT_MULTI_SELECT = "exit_multi_select"
    EXTRACT = "extract"


_INPUT_POPUP = frozenset({Command.INPUT, Command.SUBMIT_INPUT, Command.CLOSE_POPUP})

ALLOWED: dict[tuple[PopupKind, InteractionMode], frozenset[Command]] = {
    (PopupKind.NONE, InteractionMode.NORMAL): frozenset(
        {
            Command.NAVIGATE_UP,
            Command.NAVIGATE_DOWN,
            Command.NAVIGATE_TO_CHILD,
            Command.NAVIGATE_TO_PARENT,
            Command.TOGGLE_CONFIRM,
            Command.OPEN_RENAME,
            Command.OPEN_CREATE,
            Command.COPY,
            Command.MOVE,
            Command.PASTE,
            Command.DESELECT_ALL,
            Command.ENTER_MULTI_SELECT,
            Command.EXTRACT,
        }
    ),
    (PopupKind.NONE, InteractionMode.MULTI_SELECT): frozenset(
        {
            Command.NAVIGATE_UP,
            Command.NAVIGATE_DOWN,
            Command.TOGGLE_CONFIRM,
            Command.COPY,
            Command.MOVE,
            Command.SELECT_CURRENT,
            Command.EXIT_MULTI_SELECT,
        }
    ),
    (PopupKind.CONFIRM, InteractionMode.NORMAL): frozenset(
        {Command.TOGGLE_CONFIRM, Command.CONFIRM, Command.DELETE_SELECTED, Command.CLOSE_POPUP}
    ),
    (PopupKind.CONFIRM, InteractionMode.MULTI_SELECT): frozenset(
        {Command.TOGGLE_CONFIRM, Command.CONFIRM, Command.DELETE_MULTIPLE, Command.CLOSE_POPUP}
    ),
    (PopupKind.RENAME, InteractionMode.NORMAL): _INPUT_POPUP | {Command.RENAME},
    (PopupKind.RENAME, InteractionMode.MULTI_SELECT): _INPUT_POPUP | {Command.RENAME},
    (PopupKind.CREATE, InteractionMode.NORMAL): _INPUT_POPUP | {Command.CREATE},
    (PopupKind.CREATE, InteractionMode.MULTI_SELECT): _INPUT_POPUP | {Command.CREATE},
}


def permits(popup: PopupKind, mode: InteractionMode, command: Command) -> bool:
    return command in ALLOWED.get((popup, mode), frozenset())
