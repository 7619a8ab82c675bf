from __future__ import annotations

import logging
import posixpath
import shutil
import tarfile
import zipfile
from collections import deque
from dataclasses import dataclass

from result import Err, Ok

from burrow.models.errors import FsError, FsErrorCode, FsResult
from burrow.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)

SUPPORTED_ARCHIVE_EXTENSIONS: tuple[str, ...] = tuple(
    ext for _, exts, _ in shutil.get_unpack_formats() for ext in exts
)


@dataclass(slots=True, frozen=True)
class _CopyTask:
    src: str
    dst: str


def is_archive(name: str) -> bool:
    return name.lower().endswith(SUPPORTED_ARCHIVE_EXTENSIONS)


def is_within(path: str, ancestor: str) -> bool:
    """True when *path* equals *ancestor* or lies below it."""
    path = posixpath.normpath(path)
    ancestor = posixpath.normpath(ancestor)
    return path == ancestor or path.startswith(ancestor.rstrip("/") + "/")


def copy_file(src: str, dst: str, fs: FileSystem = DEFAULT_FS) -> FsResult[None]:
    try:
        fs.copy_file(src, dst)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, src))
    return Ok(None)


def copy_tree(src: str, dst: str, fs: FileSystem = DEFAULT_FS) -> FsResult[None]:
    """Copy the directory *src* to the new directory *dst*.

    Works through a queue of ``(src_dir, dst_dir)`` pairs; each destination
    directory is created before its children are copied. The first failure
    stops the copy and is returned.
    """
    if is_within(dst, src):
        return Err(
            FsError(
                code=FsErrorCode.INVALID_INPUT,
                path=src,
                message="Cannot copy a directory into itself",
            )
        )

    pending: deque[_CopyTask] = deque([_CopyTask(src, dst)])
    while pending:
        task = pending.popleft()
        try:
            fs.mkdir(task.dst)
            children = list(fs.scandir(task.src))
        except OSError as exc:
            return Err(FsError.from_os_error(exc, task.src))

        for child in children:
            target = posixpath.join(task.dst, child.name)
            st = child.stat
            if st is None:
                return Err(FsError(code=FsErrorCode.IO, path=child.path, message="Cannot read metadata"))
            if st.is_dir and not st.is_symlink:
                pending.append(_CopyTask(child.path, target))
                continue
            try:
                if st.is_symlink:
                    fs.symlink(fs.readlink(child.path), target)
                else:
                    fs.copy_file(child.path, target)
            except OSError as exc:
                return Err(FsError.from_os_error(exc, child.path))
    return Ok(None)


def remove_tree(path: str, fs: FileSystem = DEFAULT_FS) -> FsResult[None]:
    """Remove the directory *path* and everything below it without recursion."""
    visit: list[str] = [path]
    directories: list[str] = []
    while visit:
        current = visit.pop()
        directories.append(current)
        try:
            children = list(fs.scandir(current))
        except OSError as exc:
            return Err(FsError.from_os_error(exc, current))
        for child in children:
            st = child.stat
            if st is not None and st.is_dir and not st.is_symlink:
                visit.append(child.path)
                continue
            try:
                fs.remove_file(child.path)
            except OSError as exc:
                return Err(FsError.from_os_error(exc, child.path))

    # Parents are discovered before their children.
    for directory in reversed(directories):
        try:
            fs.remove_dir(directory)
        except OSError as exc:
            return Err(FsError.from_os_error(exc, directory))
    return Ok(None)


def remove_entry(path: str, fs: FileSystem = DEFAULT_FS) -> FsResult[None]:
    """Unlink a file or symlink, or remove a directory tree."""
    try:
        st = fs.lstat(path)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, path))
    if st.is_dir and not st.is_symlink:
        return remove_tree(path, fs)
    try:
        fs.remove_file(path)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, path))
    return Ok(None)


def move_tree(src: str, dst: str, fs: FileSystem = DEFAULT_FS) -> FsResult[None]:
    """Copy *src* to *dst*, then remove *src*.

    The source is only removed after the copy succeeded.
    """
    try:
        st = fs.lstat(src)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, src))

    if st.is_dir and not st.is_symlink:
        copied = copy_tree(src, dst, fs)
        if isinstance(copied, Err):
            return copied
        return remove_tree(src, fs)

    copied = copy_file(src, dst, fs)
    if isinstance(copied, Err):
        return copied
    try:
        fs.remove_file(src)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, src))
    return Ok(None)


def extract_archive(archive_path: str, dest_dir: str) -> FsResult[None]:
    """Extract a zip or tar archive into *dest_dir*.

    Blocking; callers running a UI loop should call this from a worker thread.
    """
    LOGGER.debug("extracting %s into %s", archive_path, dest_dir)
    try:
        if zipfile.is_zipfile(archive_path):
            with zipfile.ZipFile(archive_path) as zf:
                zf.extractall(dest_dir)
        elif tarfile.is_tarfile(archive_path):
            with tarfile.open(archive_path) as tf:
                tf.extractall(dest_dir, filter="data")
        else:
            return Err(
                FsError(
                    code=FsErrorCode.UNSUPPORTED,
                    path=archive_path,
                    message="Unsupported archive format",
                )
            )
    except (zipfile.BadZipFile, tarfile.TarError) as exc:
        return Err(FsError(code=FsErrorCode.IO, path=archive_path, message=str(exc)))
    except OSError as exc:
        return Err(FsError.from_os_error(exc, archive_path))
    return Ok(None)
