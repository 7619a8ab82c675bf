from __future__ import annotations

import stat as statmod

UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]

_PERMISSION_BITS: tuple[tuple[int, str], ...] = (
    (statmod.S_IRUSR, "r"),
    (statmod.S_IWUSR, "w"),
    (statmod.S_IXUSR, "x"),
    (statmod.S_IRGRP, "r"),
    (statmod.S_IWGRP, "w"),
    (statmod.S_IXGRP, "x"),
    (statmod.S_IROTH, "r"),
    (statmod.S_IWOTH, "w"),
    (statmod.S_IXOTH, "x"),
)


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(UNITS) - 1:
        value /= 1024.0
        unit += 1
    if unit == 0:
        return f"{int(value)} {UNITS[unit]}"
    return f"{value:.1f} {UNITS[unit]}"


def mode_to_string(permissions: int) -> str:
    """Render permission bits as ``rwxr-xr-x``."""
    return "".join(char if permissions & bit else "-" for bit, char in _PERMISSION_BITS)


def hex_dump(data: bytes, width: int = 16) -> str:
    """Format *data* like ``hexdump -C``: offset, hex columns, printable ASCII."""
    lines: list[str] = []
    for offset in range(0, len(data), width):
        chunk = data[offset : offset + width]
        hex_part = " ".join(f"{byte:02x}" for byte in chunk)
        ascii_part = "".join(chr(byte) if 32 <= byte < 127 else "." for byte in chunk)
        lines.append(f"{offset:08x}  {hex_part:<{width * 3 - 1}}  |{ascii_part}|")
    return "\n".join(lines)


def truncate_path(path: str, max_width: int = 110) -> str:
    if len(path) <= max_width:
        return path
    keep = max_width - 3
    return f"...{path[-keep:]}"
