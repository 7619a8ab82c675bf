from __future__ import annotations

import logging
import mimetypes
from pathlib import PurePosixPath

from result import Err, Ok

from burrow.models.entry import Entry, Snapshot
from burrow.models.enums import EntryKind
from burrow.models.errors import FsError, FsResult
from burrow.services.fs import DEFAULT_FS, DirEntry, FileSystem

LOGGER = logging.getLogger(__name__)


def parent_of(path: str) -> str | None:
    """Return the parent directory of *path*, or ``None`` at the filesystem root."""
    pure = PurePosixPath(path)
    parent = pure.parent
    if parent == pure:
        return None
    return str(parent)


def _entry_from_dir_entry(item: DirEntry) -> Entry | None:
    st = item.stat
    if st is None:
        return None
    if st.is_symlink:
        kind = EntryKind.SYMLINK
    elif st.is_dir:
        kind = EntryKind.DIRECTORY
    else:
        kind = EntryKind.FILE
    mime_type = None
    if kind is EntryKind.FILE:
        mime_type, _ = mimetypes.guess_type(item.name)
    return Entry(
        name=item.name,
        path=item.path,
        kind=kind,
        size=st.size,
        permissions=st.permissions,
        mime_type=mime_type,
    )


def sort_entries(entries: list[Entry], directories_first: bool = False) -> None:
    if directories_first:
        entries.sort(key=lambda e: (not e.is_dir, e.name))
    else:
        entries.sort(key=lambda e: e.name)


def list_directory(
    path: str,
    fs: FileSystem = DEFAULT_FS,
    show_hidden: bool = True,
    directories_first: bool = False,
) -> FsResult[list[Entry]]:
    """List the immediate children of *path*.

    Entries whose metadata cannot be read are skipped.
    """
    try:
        items = list(fs.scandir(path))
    except OSError as exc:
        return Err(FsError.from_os_error(exc, path))

    entries: list[Entry] = []
    for item in items:
        if not show_hidden and item.name.startswith("."):
            continue
        entry = _entry_from_dir_entry(item)
        if entry is None:
            LOGGER.debug("skipping unreadable entry %s", item.path)
            continue
        entries.append(entry)
    sort_entries(entries, directories_first)
    return Ok(entries)


def get_state_data(
    path: str,
    fs: FileSystem = DEFAULT_FS,
    show_hidden: bool = True,
    directories_first: bool = False,
) -> FsResult[Snapshot]:
    """Snapshot *path* and its parent.

    A parent that cannot be listed yields an empty parent listing rather than an error.
    """
    listed = list_directory(path, fs, show_hidden, directories_first)
    if isinstance(listed, Err):
        return listed
    parent_path = parent_of(path)
    parent_entries: list[Entry] = []
    if parent_path is not None:
        parent_listed = list_directory(parent_path, fs, show_hidden, directories_first)
        if isinstance(parent_listed, Ok):
            parent_entries = parent_listed.unwrap()
        else:
            LOGGER.debug("parent listing failed: %s", parent_listed.unwrap_err())
    return Ok(Snapshot(entries=listed.unwrap(), parent_path=parent_path, parent_entries=parent_entries))
