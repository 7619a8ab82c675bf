from __future__ import annotations

import logging
from typing import Callable

from typing_extensions import override

from result import Err
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import DataTable, Static

from burrow.engine import ExtractJob, Navigator
from burrow.models.entry import BinaryContent, DirectoryPreview, Entry, TextContent
from burrow.models.enums import ClipboardAction, EntryKind, InteractionMode, PopupKind
from burrow.models.errors import FsError, FsErrorCode, FsResult
from burrow.services.file_ops import extract_archive
from burrow.services.formatting import format_bytes, mode_to_string, truncate_path
from burrow.ui.keymap import KeyAction, resolve_key

LOGGER = logging.getLogger(__name__)

_ICONS: dict[EntryKind, str] = {
    EntryKind.DIRECTORY: "📁",
    EntryKind.FILE: "📄",
    EntryKind.SYMLINK: "🔗",
}

_BAR_COLORS: dict[ClipboardAction, str] = {
    ClipboardAction.MOVE: "red",
    ClipboardAction.COPY: "green",
    ClipboardAction.NONE: "yellow",
}


def _entry_lines(entries: list[Entry], cursor: int | None = None) -> Text:
    if not entries:
        return Text("No Files", style="#969896", justify="center")
    text = Text()
    for index, entry in enumerate(entries):
        if index:
            text.append("\n")
        style = "bold #1d1f21 on #81a2be" if index == cursor else ""
        text.append(f"{_ICONS[entry.kind]} {entry.name}", style=style)
    return text


class HelpOverlay(ModalScreen[None]):
    CSS = """
    HelpOverlay {
        align: center middle;
        background: rgba(0,0,0,0.45);
    }
    #help-box {
        width: 70%;
        height: 80%;
        background: #282a2e;
        border: solid #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    """

    @override
    def compose(self) -> ComposeResult:
        content = "\n".join(
            [
                "[b #81a2be]Navigation[/]",
                "  j/k or arrows: Move",
                "  h / Left: Parent directory",
                "  l / Right: Enter directory or follow symlink",
                "",
                "[b #81a2be]Operations[/]",
                "  a: Create (end with / for a directory)",
                "  r: Rename",
                "  d: Delete (confirm with y, cancel with n)",
                "  y / x: Copy / Move selection to clipboard",
                "  p: Paste clipboard here",
                "  e: Extract archive",
                "",
                "[b #81a2be]Selection[/]",
                "  v: Multi-select mode",
                "  Space: Select current (multi-select)",
                "  Esc: Deselect all / leave multi-select",
                "",
                "[b #81a2be]Other[/]",
                "  ?: Toggle help",
                "  q / Ctrl+C: Quit",
            ]
        )
        yield Static(content, id="help-box")

    def key_escape(self) -> None:
        self.dismiss()

    def key_q(self) -> None:
        self.dismiss()

    def key_question_mark(self) -> None:
        self.dismiss()


class PopupOverlay(ModalScreen[None]):
    """Modal view of the engine's active popup; every key goes back to the app."""

    CSS = """
    PopupOverlay {
        align: center middle;
        background: rgba(0,0,0,0.45);
    }
    #popup-box {
        width: 50%;
        height: auto;
        max-height: 80%;
        background: #282a2e;
        border: round #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    #popup-title {
        width: 100%;
        color: #81a2be;
        text-style: bold;
        margin-bottom: 1;
    }
    #popup-hint {
        width: 100%;
        color: #969896;
        margin-top: 1;
    }
    """

    def __init__(self, navigator: Navigator, dispatch: Callable[[str, str | None], None]) -> None:
        super().__init__()
        self.navigator = navigator
        self.popup = navigator.state.popup
        self._dispatch = dispatch

    @override
    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(id="popup-title"),
            Static(id="popup-body"),
            Static(id="popup-hint"),
            id="popup-box",
        )

    def on_mount(self) -> None:
        self.refresh_content()

    def refresh_content(self) -> None:
        state = self.navigator.state
        if self.popup is PopupKind.CONFIRM:
            title = "Confirm your action"
            if state.mode is InteractionMode.MULTI_SELECT:
                body = Text("\n".join(state.selected_paths()) or "(nothing selected)")
            else:
                entry = state.selected_entry
                body = Text(entry.path if entry is not None else "")
            hint = "Delete?  Yes (y)    No (n)"
        else:
            title = "Rename" if self.popup is PopupKind.RENAME else "Create:"
            body = Text(state.input_buffer + "▏", style="bold #c5c8c6")
            hint = "Enter to apply, Escape to cancel"
            if self.popup is PopupKind.CREATE:
                hint += " (end with / for a directory)"
        self.query_one("#popup-title", Static).update(title)
        self.query_one("#popup-body", Static).update(body)
        self.query_one("#popup-hint", Static).update(hint)

    def on_key(self, event) -> None:  # type: ignore[no-untyped-def]
        event.stop()
        event.prevent_default()
        self._dispatch(event.key, event.character)


class BurrowApp(App[None]):
    CSS = """
    #app-grid {
        height: 100%;
        padding: 0 1;
        background: #1d1f21;
        color: #c5c8c6;
    }
    #path-row {
        height: 1;
        color: #81a2be;
    }
    #panes {
        height: 1fr;
    }
    #parent-pane {
        width: 20%;
        border: round #373b41;
        overflow-y: auto;
    }
    #current-pane {
        width: 50%;
        border: round #373b41;
    }
    #preview-pane {
        width: 30%;
        border: round #373b41;
        overflow-y: auto;
    }
    #notification-box {
        height: auto;
        max-height: 5;
        border: round #f0c674;
        color: #f0c674;
    }
    #status-row {
        height: 1;
    }
    """

    def __init__(self, navigator: Navigator) -> None:
        super().__init__()
        self.navigator = navigator
        self._popup_screen: PopupOverlay | None = None
        self._actions: dict[KeyAction, Callable[[], object]] = {
            KeyAction.NAVIGATE_UP: navigator.navigate_up,
            KeyAction.NAVIGATE_DOWN: navigator.navigate_down,
            KeyAction.NAVIGATE_TO_PARENT: navigator.navigate_to_parent,
            KeyAction.NAVIGATE_TO_CHILD: navigator.navigate_to_child,
            KeyAction.TOGGLE_CONFIRM: navigator.toggle_confirmation_popup,
            KeyAction.CONFIRM: navigator.confirm,
            KeyAction.OPEN_RENAME: navigator.open_rename_popup,
            KeyAction.OPEN_CREATE: navigator.open_create_popup,
            KeyAction.CLOSE_POPUP: navigator.close_popup,
            KeyAction.INPUT_BACKSPACE: navigator.input_backspace,
            KeyAction.SUBMIT_INPUT: navigator.submit_input,
            KeyAction.COPY: navigator.copy_selected_entries,
            KeyAction.MOVE: navigator.move_selected_entries,
            KeyAction.PASTE: navigator.paste_clipboard,
            KeyAction.DESELECT_ALL: navigator.deselect_all,
            KeyAction.SELECT_CURRENT: navigator.select_current,
            KeyAction.ENTER_MULTI_SELECT: navigator.enter_multi_select,
            KeyAction.EXIT_MULTI_SELECT: navigator.exit_multi_select,
            KeyAction.EXTRACT: self._start_extract,
        }

    @override
    def compose(self) -> ComposeResult:
        yield Container(
            Static(id="path-row"),
            Horizontal(
                Static(id="parent-pane"),
                DataTable(id="current-pane"),
                Static(id="preview-pane"),
                id="panes",
            ),
            Static(id="notification-box"),
            Static(id="status-row"),
            id="app-grid",
        )

    def on_mount(self) -> None:
        table = self.query_one("#current-pane", DataTable)
        table.cursor_type = "row"
        table.show_header = False
        # Keys are routed through the engine, never through the table's own bindings.
        table.can_focus = False
        table.add_column("SEL", width=1)
        table.add_column("NAME")
        table.add_column("SIZE", width=10)
        self.set_interval(self.navigator.config.tick_interval, self._tick)
        self._refresh_all()

    def on_resize(self) -> None:
        self._refresh_all()

    def _tick(self) -> None:
        if self.navigator.clear_expired_notifications():
            self._render_notification()

    def _refresh_all(self) -> None:
        self._render_path_row()
        self._render_parent_pane()
        self._render_current_pane()
        self._render_preview_pane()
        self._render_notification()
        self._render_status_row()
        self._sync_popup()

    def _render_path_row(self) -> None:
        path = truncate_path(self.navigator.state.current_path, max(20, self.size.width - 4))
        self.query_one("#path-row", Static).update(Text(path, style="bold #81a2be"))

    def _render_parent_pane(self) -> None:
        parent = self.navigator.state.parent_view
        self.query_one("#parent-pane", Static).update(_entry_lines(parent.entries, parent.cursor))

    def _render_current_pane(self) -> None:
        state = self.navigator.state
        table = self.query_one("#current-pane", DataTable)
        table.clear()
        bar_color = _BAR_COLORS[state.clipboard.action]
        for entry in state.entries:
            bar = Text("▌", style=bar_color) if entry.is_selected else Text(" ")
            size = format_bytes(entry.size) if entry.kind is EntryKind.FILE else ""
            # Text cells keep brackets in file names from being parsed as markup.
            table.add_row(bar, Text(f"{_ICONS[entry.kind]} {entry.name}"), size)
        if not state.entries:
            table.add_row(" ", Text("No Files", style="#969896"), "")
        if state.cursor is not None:
            table.move_cursor(row=state.cursor, animate=False)

    def _render_preview_pane(self) -> None:
        preview = self.navigator.state.preview
        pane = self.query_one("#preview-pane", Static)
        if isinstance(preview, DirectoryPreview):
            pane.update(_entry_lines(preview.entries))
        elif isinstance(preview.content, TextContent):
            pane.update(Text(preview.content.text))
        elif isinstance(preview.content, BinaryContent):
            pane.update(Text(preview.content.summary, style="#969896"))

    def _render_notification(self) -> None:
        box = self.query_one("#notification-box", Static)
        notification = self.navigator.state.notification
        if notification is None:
            box.display = False
            return
        box.update(Text(notification.message, justify="center"))
        box.display = True

    def _render_status_row(self) -> None:
        state = self.navigator.state
        if state.mode is InteractionMode.MULTI_SELECT:
            left = "[bold #b5bd68]Mode: Multi-Select[/]"
        else:
            left = "[bold #81a2be]Mode: Normal[/]"
        right = ""
        entry = state.selected_entry
        if entry is not None:
            if entry.kind is EntryKind.FILE:
                left += f" [#b294bb]| Size: {format_bytes(entry.size)}[/]"
            right = f"[#8abeb7]Permissions: {mode_to_string(entry.permissions)}[/]"
        if state.clipboard.is_pending:
            left += f" [#969896]| Clipboard: {state.clipboard.action.value} {len(state.clipboard.paths)}[/]"
        hints = "[#969896]? help | q quit[/]"
        self.query_one("#status-row", Static).update(Text.from_markup(f"{left}    {right}    {hints}"))

    def _sync_popup(self) -> None:
        popup = self.navigator.state.popup
        screen = self._popup_screen
        if screen is not None and screen.popup is not popup:
            self._popup_screen = None
            self.pop_screen()
            screen = None
        if popup is PopupKind.NONE:
            return
        if screen is None:
            self._popup_screen = PopupOverlay(self.navigator, self.dispatch_key)
            self.push_screen(self._popup_screen)
        else:
            screen.refresh_content()

    def _start_extract(self) -> bool:
        job = self.navigator.extract_job()
        if job is None:
            return False
        self.navigator.show_notification(f"Extracting {job.name}...")
        self.run_worker(lambda: self._extract_in_thread(job), thread=True, exclusive=True, group="extract")
        return True

    def _extract_in_thread(self, job: ExtractJob) -> None:
        result: FsResult[None]
        try:
            result = extract_archive(job.archive_path, job.dest_dir)
        except Exception as exc:  # noqa: BLE001
            result = Err(FsError(code=FsErrorCode.IO, path=job.archive_path, message=f"Unhandled failure: {exc}"))
        self.call_from_thread(self._finish_extract, job, result)

    def _finish_extract(self, job: ExtractJob, result: FsResult[None]) -> None:
        self.navigator.apply_extract_result(job, result)
        self._refresh_all()

    def dispatch_key(self, key: str, character: str | None) -> None:
        state = self.navigator.state
        action = resolve_key(state.popup, state.mode, key, character)
        if action is KeyAction.NONE:
            return
        LOGGER.debug("key %s -> %s", key, action.value)
        if action is KeyAction.QUIT:
            self.exit()
            return
        if action is KeyAction.HELP:
            self.push_screen(HelpOverlay())
            return
        if action is KeyAction.INPUT_CHAR:
            self.navigator.input_char(character or "")
        else:
            self._actions[action]()
        self._refresh_all()

    @override
    def on_key(self, event) -> None:  # type: ignore[override]
        if isinstance(self.screen, ModalScreen):
            return
        self.dispatch_key(event.key, event.character)
