from __future__ import annotations

from burrow.config.schema import AppConfig


def default_config() -> AppConfig:
    return AppConfig()
