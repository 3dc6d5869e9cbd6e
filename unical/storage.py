"""
Persistent storage for the user's configuration.

This module manages the file:

    config/blocklist.yaml

with the schema:

    origin_url: https://...
    blocklist:
      - Some Event Title
    notes:
      some event title: free text

Rules:
- a missing file is a first run -> empty configuration, not an error
- blocklist order is preserved (stable diffs), duplicates are dropped
- note keys are always lower-cased, empty notes are dropped
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from unical.errors import ConfigError, OutputError
from unical.model import CalendarConfig

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """
    Return the config path: $UNICAL_CONFIG if set, otherwise config/blocklist.yaml
    relative to the working directory.
    """
    env = os.environ.get("UNICAL_CONFIG", "").strip()
    if env:
        return Path(env)
    return Path("config") / "blocklist.yaml"


def _normalize_blocklist(items: Any) -> list[str]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ConfigError("'blocklist' must be a list of titles")
    out: list[str] = []
    for x in items:
        if x is None:
            continue
        title = str(x)
        if title and title not in out:
            out.append(title)
    return out


def _normalize_notes(items: Any) -> dict[str, str]:
    if items is None:
        return {}
    if not isinstance(items, dict):
        raise ConfigError("'notes' must be a mapping of title -> note")
    out: dict[str, str] = {}
    for k, v in items.items():
        key = str(k).lower()
        note = "" if v is None else str(v).strip()
        if key and note:
            out[key] = note
    return out


def config_from_dict(data: Any) -> CalendarConfig:
    if data is None:
        return CalendarConfig()
    if not isinstance(data, dict):
        raise ConfigError("Configuration document must be a mapping")

    url = data.get("origin_url") or ""
    if not isinstance(url, str):
        raise ConfigError("'origin_url' must be a string")

    return CalendarConfig(
        origin_url=url.strip(),
        blocklist=_normalize_blocklist(data.get("blocklist")),
        notes=_normalize_notes(data.get("notes")),
    )


def config_to_dict(config: CalendarConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "origin_url": config.origin_url,
        "blocklist": _normalize_blocklist(list(config.blocklist)),
    }
    notes = _normalize_notes(dict(config.notes))
    if notes:
        payload["notes"] = notes
    return payload


def load_config(path: str | Path | None = None) -> CalendarConfig:
    """
    Load the configuration.

    Returns an empty configuration if the file does not exist.
    Raises ConfigError if the file exists but cannot be read or parsed.
    """
    config_path = Path(path) if path is not None else default_config_path()

    # First run: nothing saved yet
    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return CalendarConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    return config_from_dict(data)


def load_config_or_default(path: str | Path | None = None) -> CalendarConfig:
    """
    Interactive variant of load_config: never raises, so the session stays
    usable and the user can fix the URL.
    """
    try:
        return load_config(path)
    except ConfigError as exc:
        logger.warning("%s - starting with an empty configuration", exc)
        return CalendarConfig()


def save_config(config: CalendarConfig, path: str | Path | None = None) -> Path:
    """
    Save the configuration, replacing the whole file.

    Creates parent directories if needed. Raises OutputError on failure;
    the passed config object is never modified.
    """
    config_path = Path(path) if path is not None else default_config_path()
    text = yaml.safe_dump(config_to_dict(config), sort_keys=False, allow_unicode=True)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        mode = config_path.stat().st_mode & 0o777 if config_path.exists() else 0o644
        fd, tmp_name = tempfile.mkstemp(prefix=".blocklist-", suffix=".tmp", dir=config_path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            # mkstemp creates 0600; keep the permissions of the file being replaced
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, config_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise OutputError(f"Cannot write {config_path}: {exc}") from exc

    logger.debug("Saved config to %s", config_path)
    return config_path
