from __future__ import annotations

import os
import shutil
import stat as statmod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol


@dataclass(slots=True, frozen=True)
class StatResult:
    size: int
    mode: int
    is_dir: bool
    is_symlink: bool = False

    @property
    def permissions(self) -> int:
        return statmod.S_IMODE(self.mode)


@dataclass(slots=True, frozen=True)
class DirEntry:
    path: str
    name: str
    stat: StatResult | None = None


class FileSystem(Protocol):
    def expanduser(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def absolute(self, path: str) -> str: ...

    def stat(self, path: str) -> StatResult: ...

    def lstat(self, path: str) -> StatResult: ...

    def scandir(self, path: str) -> Iterable[DirEntry]: ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str: ...

    def read_bytes(self, path: str, limit: int | None = None) -> bytes: ...

    def readlink(self, path: str) -> str: ...

    def realpath(self, path: str) -> str: ...

    def makedirs(self, path: str) -> None: ...

    def mkdir(self, path: str) -> None: ...

    def create_file(self, path: str) -> None: ...

    def copy_file(self, src: str, dst: str) -> None: ...

    def symlink(self, target: str, path: str) -> None: ...

    def rename(self, src: str, dst: str) -> None: ...

    def remove_file(self, path: str) -> None: ...

    def remove_dir(self, path: str) -> None: ...


def _to_stat_result(st: os.stat_result) -> StatResult:
    return StatResult(
        size=st.st_size,
        mode=st.st_mode,
        is_dir=statmod.S_ISDIR(st.st_mode),
        is_symlink=statmod.S_ISLNK(st.st_mode),
    )


class OsFileSystem:
    def expanduser(self, path: str) -> str:
        return str(Path(path).expanduser())

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def absolute(self, path: str) -> str:
        return str(Path(path).absolute())

    def stat(self, path: str) -> StatResult:
        return _to_stat_result(os.stat(path))

    def lstat(self, path: str) -> StatResult:
        return _to_stat_result(os.stat(path, follow_symlinks=False))

    def scandir(self, path: str) -> Iterable[DirEntry]:
        with os.scandir(path) as entries:
            for e in entries:
                try:
                    sr = _to_stat_result(e.stat(follow_symlinks=False))
                except OSError:
                    sr = None
                yield DirEntry(path=e.path, name=e.name, stat=sr)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def read_bytes(self, path: str, limit: int | None = None) -> bytes:
        with open(path, "rb") as fh:
            return fh.read() if limit is None else fh.read(limit)

    def readlink(self, path: str) -> str:
        return os.readlink(path)

    def realpath(self, path: str) -> str:
        return os.path.realpath(path, strict=True)

    def makedirs(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def mkdir(self, path: str) -> None:
        os.mkdir(path)

    def create_file(self, path: str) -> None:
        with open(path, "x"):
            pass

    def copy_file(self, src: str, dst: str) -> None:
        shutil.copy2(src, dst, follow_symlinks=False)

    def symlink(self, target: str, path: str) -> None:
        os.symlink(target, path)

    def rename(self, src: str, dst: str) -> None:
        os.rename(src, dst)

    def remove_file(self, path: str) -> None:
        os.unlink(path)

    def remove_dir(self, path: str) -> None:
        os.rmdir(path)


DEFAULT_FS: FileSystem = OsFileSystem()
