from __future__ import annotations

import json
import logging

from result import Err, Ok, Result

from burrow.config.defaults import default_config
from burrow.config.schema import AppConfig, from_dict
from burrow.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)

CONFIG_PATH = "~/.config/burrow/config.json"


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    """Read the optional JSON config; a missing file means built-in defaults.

    Unknown keys are ignored.
    """
    resolved = fs.expanduser(path or CONFIG_PATH)
    if not fs.exists(resolved):
        LOGGER.debug("no config at %s, using defaults", resolved)
        return Ok(default_config())

    try:
        raw = fs.read_text(resolved)
    except OSError as exc:
        return Err(f"Cannot read config at {resolved}: {exc.strerror or exc}.")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        return Err(f"Config at {resolved} is not valid JSON (line {exc.lineno}, column {exc.colno}).")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")

    defaults = default_config()
    unknown = sorted(set(payload) - set(defaults.to_dict()))
    if unknown:
        LOGGER.debug("ignoring unknown config keys in %s: %s", resolved, ", ".join(unknown))
    try:
        return Ok(from_dict(payload, defaults))
    except (TypeError, ValueError) as exc:
        return Err(f"Config at {resolved} has an invalid value: {exc}.")


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
