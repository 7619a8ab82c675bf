from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class AppConfig:
    notification_seconds: float = 3.0
    tick_interval: float = 0.016
    preview_max_bytes: int = 64 * 1024
    hex_preview_bytes: int = 256
    show_hidden: bool = True
    directories_first: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "notificationSeconds": self.notification_seconds,
            "tickInterval": self.tick_interval,
            "previewMaxBytes": self.preview_max_bytes,
            "hexPreviewBytes": self.hex_preview_bytes,
            "showHidden": self.show_hidden,
            "directoriesFirst": self.directories_first,
        }


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    return AppConfig(
        notification_seconds=max(0.5, float(data.get("notificationSeconds", defaults.notification_seconds))),
        tick_interval=max(0.005, float(data.get("tickInterval", defaults.tick_interval))),
        preview_max_bytes=max(1024, int(data.get("previewMaxBytes", defaults.preview_max_bytes))),
        hex_preview_bytes=max(16, int(data.get("hexPreviewBytes", defaults.hex_preview_bytes))),
        show_hidden=bool(data.get("showHidden", defaults.show_hidden)),
        directories_first=bool(data.get("directoriesFirst", defaults.directories_first)),
    )
