from __future__ import annotations

import errno
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from result import Result

T = TypeVar("T")


class FsErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    EXISTS = "exists"
    NOT_DIRECTORY = "not_directory"
    IS_DIRECTORY = "is_directory"
    INVALID_INPUT = "invalid_input"
    BROKEN_SYMLINK = "broken_symlink"
    UNSUPPORTED = "unsupported"
    IO = "io"


_ERRNO_CODES: dict[int, FsErrorCode] = {
    errno.ENOENT: FsErrorCode.NOT_FOUND,
    errno.EACCES: FsErrorCode.PERMISSION_DENIED,
    errno.EPERM: FsErrorCode.PERMISSION_DENIED,
    errno.EEXIST: FsErrorCode.EXISTS,
    errno.ENOTEMPTY: FsErrorCode.EXISTS,
    errno.ENOTDIR: FsErrorCode.NOT_DIRECTORY,
    errno.EISDIR: FsErrorCode.IS_DIRECTORY,
    errno.ELOOP: FsErrorCode.BROKEN_SYMLINK,
}


@dataclass(slots=True, frozen=True)
class FsError:
    code: FsErrorCode
    path: str
    message: str

    @classmethod
    def from_os_error(cls, exc: OSError, path: str) -> FsError:
        code = _ERRNO_CODES.get(exc.errno or 0, FsErrorCode.IO)
        message = exc.strerror or str(exc)
        return cls(code=code, path=path, message=message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}: {self.path}"
        return self.message


FsResult = Result[T, FsError]
