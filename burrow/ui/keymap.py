from __future__ import annotations

from enum import Enum

from burrow.models.enums import InteractionMode, PopupKind


class KeyAction(str, Enum):
    NONE = "none"
    QUIT = "quit"
    HELP = "help"
    NAVIGATE_UP = "navigate_up"
    NAVIGATE_DOWN = "navigate_down"
    NAVIGATE_TO_PARENT = "navigate_to_parent"
    NAVIGATE_TO_CHILD = "navigate_to_child"
    TOGGLE_CONFIRM = "toggle_confirm"
    CONFIRM = "confirm"
    OPEN_RENAME = "open_rename"
    OPEN_CREATE = "open_create"
    CLOSE_POPUP = "close_popup"
    INPUT_CHAR = "input_char"
    INPUT_BACKSPACE = "input_backspace"
    SUBMIT_INPUT = "submit_input"
    COPY = "copy"
    MOVE = "move"
    PASTE = "paste"
    DESELECT_ALL = "deselect_all"
    SELECT_CURRENT = "select_current"
    ENTER_MULTI_SELECT = "enter_multi_select"
    EXIT_MULTI_SELECT = "exit_multi_select"
    EXTRACT = "extract"


_CONFIRM_KEYS: dict[str, KeyAction] = {
    "y": KeyAction.CONFIRM,
    "n": KeyAction.TOGGLE_CONFIRM,
    "escape": KeyAction.CLOSE_POPUP,
}

_INPUT_KEYS: dict[str, KeyAction] = {
    "enter": KeyAction.SUBMIT_INPUT,
    "escape": KeyAction.CLOSE_POPUP,
    "backspace": KeyAction.INPUT_BACKSPACE,
}

_MOVEMENT_KEYS: dict[str, KeyAction] = {
    "j": KeyAction.NAVIGATE_DOWN,
    "down": KeyAction.NAVIGATE_DOWN,
    "k": KeyAction.NAVIGATE_UP,
    "up": KeyAction.NAVIGATE_UP,
    "d": KeyAction.TOGGLE_CONFIRM,
    "y": KeyAction.COPY,
    "x": KeyAction.MOVE,
    "q": KeyAction.QUIT,
    "ctrl+c": KeyAction.QUIT,
    "question_mark": KeyAction.HELP,
}

_NORMAL_KEYS: dict[str, KeyAction] = {
    **_MOVEMENT_KEYS,
    "h": KeyAction.NAVIGATE_TO_PARENT,
    "left": KeyAction.NAVIGATE_TO_PARENT,
    "l": KeyAction.NAVIGATE_TO_CHILD,
    "right": KeyAction.NAVIGATE_TO_CHILD,
    "r": KeyAction.OPEN_RENAME,
    "a": KeyAction.OPEN_CREATE,
    "p": KeyAction.PASTE,
    "v": KeyAction.ENTER_MULTI_SELECT,
    "e": KeyAction.EXTRACT,
    "escape": KeyAction.DESELECT_ALL,
}

_MULTI_SELECT_KEYS: dict[str, KeyAction] = {
    **_MOVEMENT_KEYS,
    "space": KeyAction.SELECT_CURRENT,
    "escape": KeyAction.EXIT_MULTI_SELECT,
}


def resolve_key(popup: PopupKind, mode: InteractionMode, key: str, character: str | None = None) -> KeyAction:
    """Translate a key press into the single action it triggers in the current state."""
    if popup is PopupKind.CONFIRM:
        return _CONFIRM_KEYS.get(key, KeyAction.NONE)
    if popup in {PopupKind.RENAME, PopupKind.CREATE}:
        action = _INPUT_KEYS.get(key)
        if action is not None:
            return action
        if character and len(character) == 1 and character.isprintable():
            return KeyAction.INPUT_CHAR
        return KeyAction.NONE
    if mode is InteractionMode.MULTI_SELECT:
        return _MULTI_SELECT_KEYS.get(key, KeyAction.NONE)
    return _NORMAL_KEYS.get(key, KeyAction.NONE)
