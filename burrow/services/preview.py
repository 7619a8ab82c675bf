from __future__ import annotations

import posixpath

from result import Err, Ok

from burrow.models.entry import (
    BinaryContent,
    DirectoryPreview,
    Entry,
    FilePreview,
    PreviewContent,
    TextContent,
)
from burrow.models.enums import EntryKind
from burrow.models.errors import FsError, FsErrorCode, FsResult
from burrow.services.fs import DEFAULT_FS, FileSystem
from burrow.services.formatting import format_bytes, hex_dump
from burrow.services.snapshot import list_directory

EMPTY_FILE_TEXT = "Empty File"

DEFAULT_MAX_BYTES = 64 * 1024
DEFAULT_HEX_BYTES = 256


def resolve_symlink(path: str, fs: FileSystem = DEFAULT_FS) -> FsResult[str]:
    """Return the canonical target of the symlink at *path*.

    Relative targets are joined against the directory containing the link.
    """
    try:
        target = fs.readlink(path)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, path))
    if not posixpath.isabs(target):
        target = posixpath.join(posixpath.dirname(path), target)
    try:
        return Ok(fs.realpath(target))
    except OSError:
        return Err(
            FsError(
                code=FsErrorCode.BROKEN_SYMLINK,
                path=path,
                message=f"Broken symlink -> {target}",
            )
        )


def resolve_link_entry(entry: Entry, fs: FileSystem = DEFAULT_FS) -> FsResult[Entry]:
    """Build an entry describing the final target of a symlink entry."""
    resolved = resolve_symlink(entry.path, fs)
    if isinstance(resolved, Err):
        return resolved
    target = resolved.unwrap()
    try:
        st = fs.stat(target)
    except OSError:
        return Err(
            FsError(
                code=FsErrorCode.BROKEN_SYMLINK,
                path=entry.path,
                message=f"Broken symlink -> {target}",
            )
        )
    return Ok(
        Entry(
            name=posixpath.basename(target) or target,
            path=target,
            kind=EntryKind.DIRECTORY if st.is_dir else EntryKind.FILE,
            size=st.size,
            permissions=st.permissions,
        )
    )


def _decode_text(data: bytes, truncated: bool) -> str | None:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut off by the read limit is not binary content.
        if truncated and exc.reason == "unexpected end of data":
            return data[: exc.start].decode("utf-8")
        return None


def _file_preview(entry: Entry, fs: FileSystem, max_bytes: int, hex_bytes: int) -> FilePreview:
    try:
        size = fs.stat(entry.path).size
        if size == 0:
            return FilePreview(TextContent(EMPTY_FILE_TEXT))
        data = fs.read_bytes(entry.path, max_bytes)
    except OSError as exc:
        return FilePreview(TextContent(str(FsError.from_os_error(exc, entry.path))))

    text = _decode_text(data, truncated=size > len(data))
    if text is not None:
        return FilePreview(TextContent(text))

    summary = f"Binary file ({format_bytes(size)})\n\n{hex_dump(data[:hex_bytes])}"
    if size > hex_bytes:
        summary += "\n..."
    return FilePreview(BinaryContent(summary))


def resolve_preview(
    entry: Entry,
    fs: FileSystem = DEFAULT_FS,
    max_bytes: int = DEFAULT_MAX_BYTES,
    hex_bytes: int = DEFAULT_HEX_BYTES,
    show_hidden: bool = True,
    directories_first: bool = False,
) -> FsResult[PreviewContent]:
    """Compute the preview pane content for *entry*.

    Only a broken symlink is reported as an error; other failures become
    preview text.
    """
    if entry.kind is EntryKind.SYMLINK:
        target = resolve_link_entry(entry, fs)
        if isinstance(target, Err):
            return target
        entry = target.unwrap()

    if entry.kind is EntryKind.DIRECTORY:
        listed = list_directory(entry.path, fs, show_hidden, directories_first)
        if isinstance(listed, Err):
            return Ok(FilePreview(TextContent(str(listed.unwrap_err()))))
        return Ok(DirectoryPreview(listed.unwrap()))

    return Ok(_file_preview(entry, fs, max_bytes, hex_bytes))
