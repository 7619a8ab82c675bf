from __future__ import annotations

import logging
import posixpath
import threading
import time
from dataclasses import dataclass
from typing import Callable

from result import Err, Ok

from burrow.config.schema import AppConfig
from burrow.engine.state import EngineState
from burrow.engine.transitions import Command, permits
from burrow.models.entry import DirectoryPreview, Notification, Snapshot
from burrow.models.enums import ClipboardAction, EntryKind, InteractionMode, PopupKind
from burrow.models.errors import FsError, FsErrorCode, FsResult
from burrow.services.file_ops import copy_file, copy_tree, extract_archive, is_archive, move_tree, remove_entry
from burrow.services.fs import DEFAULT_FS, FileSystem
from burrow.services.preview import resolve_link_entry, resolve_preview, resolve_symlink
from burrow.services.snapshot import get_state_data

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]

_RESERVED_NAMES = frozenset({"", ".", ".."})


@dataclass(slots=True, frozen=True)
class ExtractJob:
    archive_path: str
    dest_dir: str
    name: str


class Navigator:
    """Owns the browser state and applies every user-triggered operation to it.

    Each public operation is checked against the popup/mode transition table
    first; rejected operations leave the state untouched and return ``False``.
    Filesystem failures never raise: they are turned into notifications.
    """

    def __init__(
        self,
        state: EngineState,
        fs: FileSystem = DEFAULT_FS,
        config: AppConfig | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.state = state
        self.config = config or AppConfig()
        self._fs = fs
        self._clock = clock

    @classmethod
    def open(
        cls,
        path: str,
        fs: FileSystem = DEFAULT_FS,
        config: AppConfig | None = None,
        clock: Clock = time.monotonic,
    ) -> FsResult[Navigator]:
        start = posixpath.normpath(fs.absolute(path))
        navigator = cls(EngineState(current_path=start), fs=fs, config=config, clock=clock)
        snapshot = navigator._snapshot(start)
        if isinstance(snapshot, Err):
            return snapshot
        navigator._apply_snapshot(start, snapshot.unwrap(), cursor=0)
        navigator.refresh_preview()
        return Ok(navigator)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _permits(self, command: Command) -> bool:
        if permits(self.state.popup, self.state.mode, command):
            return True
        LOGGER.debug("rejected %s (popup=%s, mode=%s)", command.value, self.state.popup.value, self.state.mode.value)
        return False

    def _snapshot(self, path: str) -> FsResult[Snapshot]:
        return get_state_data(
            path,
            self._fs,
            show_hidden=self.config.show_hidden,
            directories_first=self.config.directories_first,
        )

    def _clamp(self, cursor: int | None) -> int | None:
        count = len(self.state.entries)
        if count == 0:
            return None
        if cursor is None:
            return 0
        return max(0, min(cursor, count - 1))

    def _apply_snapshot(
        self,
        path: str,
        snapshot: Snapshot,
        cursor: int | None,
        parent_cursor: int | None = None,
    ) -> None:
        state = self.state
        state.current_path = path
        state.entries = snapshot.entries
        state.parent_view.path = snapshot.parent_path
        state.parent_view.entries = snapshot.parent_entries
        state.cursor = self._clamp(cursor)
        self._sync_parent_cursor(parent_cursor)

    def _sync_parent_cursor(self, fallback: int | None = None) -> None:
        """Point the parent pane's cursor at the current directory."""
        parent = self.state.parent_view
        name = posixpath.basename(self.state.current_path)
        for index, entry in enumerate(parent.entries):
            if entry.name == name:
                parent.cursor = index
                return
        if fallback is not None and 0 <= fallback < len(parent.entries):
            parent.cursor = fallback
        elif not parent.entries:
            parent.cursor = None

    def _reload(self, cursor: int | None = None) -> bool:
        """Re-snapshot the current directory, keeping the cursor in bounds."""
        snapshot = self._snapshot(self.state.current_path)
        if isinstance(snapshot, Err):
            self._notify_error("Failed to list directory", snapshot.unwrap_err())
            return False
        keep = self.state.cursor if cursor is None else cursor
        self._apply_snapshot(self.state.current_path, snapshot.unwrap(), keep, self.state.parent_view.cursor)
        return True

    def _cursor_to(self, name: str) -> None:
        for index, entry in enumerate(self.state.entries):
            if entry.name == name:
                self.state.cursor = index
                return

    def _descend(self, path: str) -> bool:
        snapshot = self._snapshot(path)
        if isinstance(snapshot, Err):
            self._notify_error("Cannot open directory", snapshot.unwrap_err())
            return False
        LOGGER.debug("entering %s", path)
        self._apply_snapshot(path, snapshot.unwrap(), cursor=0, parent_cursor=self.state.cursor)
        self.refresh_preview()
        return True

    def _notify_error(self, prefix: str, error: FsError) -> None:
        LOGGER.debug("%s: %s", prefix, error)
        self.show_notification(f"{prefix}: {error}")

    def _report_batch(self, verb: str, total: int, failures: list[FsError]) -> None:
        if not failures:
            return
        self.show_notification(f"{len(failures)} of {total} {verb} failed: {failures[0]}")

    # ------------------------------------------------------------------
    # Cursor and directory navigation
    # ------------------------------------------------------------------

    def _step(self, command: Command, delta: int) -> bool:
        if not self._permits(command):
            return False
        state = self.state
        if state.cursor is None:
            return False
        if state.mode is InteractionMode.MULTI_SELECT:
            state.entries[state.cursor].is_selected = True
        state.cursor = (state.cursor + delta) % len(state.entries)
        self.refresh_preview()
        return True

    def navigate_down(self) -> bool:
        return self._step(Command.NAVIGATE_DOWN, 1)

    def navigate_up(self) -> bool:
        return self._step(Command.NAVIGATE_UP, -1)

    def navigate_to_child(self) -> bool:
        if not self._permits(Command.NAVIGATE_TO_CHILD):
            return False
        entry = self.state.selected_entry
        if entry is None:
            return False
        if entry.kind is EntryKind.DIRECTORY:
            return self._descend(entry.path)
        if entry.kind is EntryKind.SYMLINK:
            target = resolve_link_entry(entry, self._fs)
            if isinstance(target, Err):
                self.show_notification(str(target.unwrap_err()))
                return False
            if target.unwrap().is_dir:
                return self._descend(target.unwrap().path)
            self.refresh_preview()
            return True
        return False

    def navigate_to_parent(self) -> bool:
        if not self._permits(Command.NAVIGATE_TO_PARENT):
            return False
        parent_path = self.state.parent_view.path
        if parent_path is None:
            return False
        restore = self.state.parent_view.cursor
        snapshot = self._snapshot(parent_path)
        if isinstance(snapshot, Err):
            self._notify_error("Cannot open directory", snapshot.unwrap_err())
            return False
        LOGGER.debug("leaving %s for %s", self.state.current_path, parent_path)
        self._apply_snapshot(parent_path, snapshot.unwrap(), cursor=restore)
        self.refresh_preview()
        return True

    def refresh_preview(self) -> bool:
        state = self.state
        entry = state.selected_entry
        if entry is None:
            state.preview = DirectoryPreview([])
            return True
        preview = resolve_preview(
            entry,
            self._fs,
            max_bytes=self.config.preview_max_bytes,
            hex_bytes=self.config.hex_preview_bytes,
            show_hidden=self.config.show_hidden,
            directories_first=self.config.directories_first,
        )
        if isinstance(preview, Err):
            self.show_notification(str(preview.unwrap_err()))
            return False
        state.preview = preview.unwrap()
        if isinstance(state.preview, DirectoryPreview):
            self._sync_parent_cursor(state.parent_view.cursor)
        return True

    # ------------------------------------------------------------------
    # Popups
    # ------------------------------------------------------------------

    def toggle_confirmation_popup(self) -> bool:
        if not self._permits(Command.TOGGLE_CONFIRM):
            return False
        state = self.state
        if not state.entries:
            return False
        state.popup = PopupKind.NONE if state.popup is PopupKind.CONFIRM else PopupKind.CONFIRM
        return True

    def open_rename_popup(self) -> bool:
        if not self._permits(Command.OPEN_RENAME) or not self.state.entries:
            return False
        self.state.popup = PopupKind.RENAME
        self.state.input_buffer = ""
        return True

    def open_create_popup(self) -> bool:
        if not self._permits(Command.OPEN_CREATE):
            return False
        self.state.popup = PopupKind.CREATE
        self.state.input_buffer = ""
        return True

    def close_popup(self) -> bool:
        if not self._permits(Command.CLOSE_POPUP):
            return False
        self.state.popup = PopupKind.NONE
        self.state.input_buffer = ""
        return True

    def input_char(self, char: str) -> bool:
        if not self._permits(Command.INPUT):
            return False
        self.state.input_buffer += char
        return True

    def input_backspace(self) -> bool:
        if not self._permits(Command.INPUT):
            return False
        self.state.input_buffer = self.state.input_buffer[:-1]
        return True

    def submit_input(self) -> bool:
        if not self._permits(Command.SUBMIT_INPUT):
            return False
        if self.state.popup is PopupKind.RENAME:
            return self.rename_selected(self.state.input_buffer)
        return self.create_entry(self.state.input_buffer)

    def confirm(self) -> bool:
        if not self._permits(Command.CONFIRM):
            return False
        if self.state.mode is InteractionMode.MULTI_SELECT:
            return self.delete_multiple()
        return self.delete_selected()

    # ------------------------------------------------------------------
    # Destructive and constructive operations
    # ------------------------------------------------------------------

    def delete_selected(self) -> bool:
        if not self._permits(Command.DELETE_SELECTED):
            return False
        entry = self.state.selected_entry
        if entry is None:
            return False
        removed = remove_entry(entry.path, self._fs)
        if isinstance(removed, Err):
            self._notify_error(f"Failed to delete {entry.name}", removed.unwrap_err())
            return False
        LOGGER.debug("deleted %s", entry.path)
        self.state.popup = PopupKind.NONE
        self._reload()
        self.refresh_preview()
        return True

    def delete_multiple(self) -> bool:
        if not self._permits(Command.DELETE_MULTIPLE):
            return False
        targets = self.state.selected_paths()
        failures: list[FsError] = []
        for path in targets:
            removed = remove_entry(path, self._fs)
            if isinstance(removed, Err):
                failures.append(removed.unwrap_err())
        LOGGER.debug("deleted %d of %d selected entries", len(targets) - len(failures), len(targets))
        self._report_batch("deletions", len(targets), failures)
        self.state.popup = PopupKind.NONE
        self.state.mode = InteractionMode.NORMAL
        self._reload()
        self.refresh_preview()
        return True

    def rename_selected(self, new_name: str) -> bool:
        if not self._permits(Command.RENAME):
            return False
        state = self.state
        entry = state.selected_entry
        if entry is None:
            return False
        name = new_name.rstrip("/")
        if name in _RESERVED_NAMES:
            self.show_notification(f"Invalid name: '{new_name}'")
            return False
        destination = posixpath.join(state.current_path, name)
        if destination != entry.path and self._fs.exists(destination):
            self.show_notification(f"Already exists: {destination}")
            return False
        try:
            self._fs.rename(entry.path, destination)
        except OSError as exc:
            self._notify_error(f"Failed to rename {entry.name}", FsError.from_os_error(exc, entry.path))
            return False
        LOGGER.debug("renamed %s to %s", entry.path, destination)
        self._reload()
        self._cursor_to(posixpath.basename(destination))
        state.input_buffer = ""
        state.popup = PopupKind.NONE
        self.refresh_preview()
        return True

    def create_entry(self, path_spec: str) -> bool:
        """Create a file, or a directory when *path_spec* ends with ``/``.

        Intermediate segments are created as needed; the final segment must not exist.
        """
        if not self._permits(Command.CREATE):
            return False
        state = self.state
        is_directory = path_spec.endswith("/")
        segments = [segment for segment in path_spec.rstrip("/").split("/") if segment]
        if not segments or any(segment in _RESERVED_NAMES for segment in segments):
            self.show_notification(f"Invalid name: '{path_spec}'")
            return False

        parent = posixpath.join(state.current_path, *segments[:-1])
        target = posixpath.join(parent, segments[-1])
        if len(segments) > 1:
            try:
                self._fs.makedirs(parent)
            except OSError as exc:
                self._notify_error("Error creating directories", FsError.from_os_error(exc, parent))
                return False
        try:
            if is_directory:
                self._fs.mkdir(target)
            else:
                self._fs.create_file(target)
        except OSError as exc:
            self._notify_error("Error creating entry", FsError.from_os_error(exc, target))
            return False

        LOGGER.debug("created %s", target)
        self._reload()
        self.refresh_preview()
        state.input_buffer = ""
        state.popup = PopupKind.NONE
        return True

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def _stage(self, command: Command, action: ClipboardAction) -> bool:
        if not self._permits(command):
            return False
        state = self.state
        if state.mode is InteractionMode.NORMAL and not state.has_selection():
            entry = state.selected_entry
            if entry is None:
                return False
            entry.is_selected = True
            paths = [entry.path]
        else:
            paths = state.selected_paths()
        if not paths:
            return False
        state.clipboard.action = action
        state.clipboard.paths = paths
        LOGGER.debug("clipboard %s: %s", action.value, paths)
        return True

    def copy_selected_entries(self) -> bool:
        return self._stage(Command.COPY, ClipboardAction.COPY)

    def move_selected_entries(self) -> bool:
        return self._stage(Command.MOVE, ClipboardAction.MOVE)

    def _transfer(self, src: str, dst: str, action: ClipboardAction) -> FsResult[None]:
        if self._fs.exists(dst):
            return Err(FsError(code=FsErrorCode.EXISTS, path=dst, message="Destination already exists"))
        try:
            st = self._fs.lstat(src)
        except OSError as exc:
            return Err(FsError.from_os_error(exc, src))
        if not st.is_symlink:
            if action is ClipboardAction.MOVE:
                return move_tree(src, dst, self._fs)
            if st.is_dir:
                return copy_tree(src, dst, self._fs)
            return copy_file(src, dst, self._fs)

        # Links are pasted as copies of their target; moving drops only the link.
        target = resolve_symlink(src, self._fs)
        if isinstance(target, Err):
            return target
        source = target.unwrap()
        try:
            st = self._fs.stat(source)
        except OSError as exc:
            return Err(FsError.from_os_error(exc, source))
        copied = copy_tree(source, dst, self._fs) if st.is_dir else copy_file(source, dst, self._fs)
        if isinstance(copied, Err) or action is not ClipboardAction.MOVE:
            return copied
        return remove_entry(src, self._fs)

    def paste_clipboard(self) -> bool:
        if not self._permits(Command.PASTE):
            return False
        state = self.state
        clipboard = state.clipboard
        if not clipboard.is_pending:
            return False
        action = clipboard.action
        failures: list[FsError] = []
        for src in clipboard.paths:
            dst = posixpath.join(state.current_path, posixpath.basename(src.rstrip("/")))
            transferred = self._transfer(src, dst, action)
            if isinstance(transferred, Err):
                failures.append(transferred.unwrap_err())
        clipboard.action = ClipboardAction.NONE
        LOGGER.debug("pasted %d item(s) with %s, %d failed", len(clipboard.paths), action.value, len(failures))
        self._reload()
        self.refresh_preview()
        if failures:
            self._report_batch("pastes", len(clipboard.paths), failures)
        else:
            verb = "Moved" if action is ClipboardAction.MOVE else "Copied"
            self.show_notification(f"{verb} {len(clipboard.paths)} item(s)")
        return True

    # ------------------------------------------------------------------
    # Selection and modes
    # ------------------------------------------------------------------

    def select_current(self) -> bool:
        if not self._permits(Command.SELECT_CURRENT):
            return False
        entry = self.state.selected_entry
        if entry is None:
            return False
        entry.is_selected = True
        return True

    def deselect_all(self) -> bool:
        if not self._permits(Command.DESELECT_ALL):
            return False
        for entry in self.state.entries:
            entry.is_selected = False
        self._reload()
        self.refresh_preview()
        return True

    def enter_multi_select(self) -> bool:
        if not self._permits(Command.ENTER_MULTI_SELECT):
            return False
        self.state.mode = InteractionMode.MULTI_SELECT
        entry = self.state.selected_entry
        if entry is not None:
            entry.is_selected = True
        return True

    def exit_multi_select(self) -> bool:
        if not self._permits(Command.EXIT_MULTI_SELECT):
            return False
        self.state.mode = InteractionMode.NORMAL
        return True

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def show_notification(self, message: str) -> None:
        self.state.notification = Notification(
            message=message,
            created_at=self._clock(),
            duration=self.config.notification_seconds,
        )

    def clear_expired_notifications(self) -> bool:
        """Drop the notification once its duration has elapsed; poll every tick."""
        notification = self.state.notification
        if notification is None or not notification.is_expired(self._clock()):
            return False
        self.state.notification = None
        return True

    # ------------------------------------------------------------------
    # Archive extraction
    # ------------------------------------------------------------------

    def extract_job(self) -> ExtractJob | None:
        """Describe the extraction for the entry under the cursor, if it is an archive."""
        if not self._permits(Command.EXTRACT):
            return None
        entry = self.state.selected_entry
        if entry is None:
            return None
        if entry.kind is not EntryKind.FILE or not is_archive(entry.name):
            self.show_notification(f"Not an archive: {entry.name}")
            return None
        return ExtractJob(archive_path=entry.path, dest_dir=self.state.current_path, name=entry.name)

    def apply_extract_result(self, job: ExtractJob, result: FsResult[None]) -> bool:
        if isinstance(result, Err):
            self._notify_error(f"Failed to extract {job.name}", result.unwrap_err())
            return False
        self._reload()
        self.refresh_preview()
        self.show_notification(f"Extracted {job.name}")
        return True

    def extract_selected(self) -> bool:
        """Extract the archive under the cursor on a worker thread and wait for it."""
        job = self.extract_job()
        if job is None:
            return False
        result: FsResult[None] | None = None

        def extract_worker() -> None:
            nonlocal result
            try:
                result = extract_archive(job.archive_path, job.dest_dir)
            except Exception as exc:  # noqa: BLE001
                result = Err(FsError(code=FsErrorCode.IO, path=job.archive_path, message=f"Unhandled failure: {exc}"))

        thread = threading.Thread(target=extract_worker, daemon=True)
        thread.start()
        thread.join()
        if result is None:
            result = Err(FsError(code=FsErrorCode.IO, path=job.archive_path, message="Extraction did not complete"))
        return self.apply_extract_result(job, result)
