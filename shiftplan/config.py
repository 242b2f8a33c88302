"""Configuration loading (YAML or JSON) for the scheduling core."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import yaml

from shiftplan.exceptions import ValidationError


@dataclass
class SchedulerConfig:
    """Runtime settings threaded through services instead of process-wide globals."""

    timezone: str = "Europe/Bucharest"
    db_url: str = "sqlite:///shiftplan.db"
    admin_role: str = "admin"
    atomic_batch: bool = True  # bulk/copy: all-or-nothing vs. per-row commits
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        validate_timezone(self.timezone)
        if not isinstance(self.atomic_batch, bool):
            raise ValidationError(f"atomic_batch must be a boolean, got {self.atomic_batch!r}")
        if not self.admin_role:
            raise ValidationError("admin_role must not be empty")


def validate_timezone(tz: str) -> str:
    """Return ``tz`` unchanged if it names a known IANA zone, else raise ValidationError."""
    try:
        pd.Timestamp("2000-01-01").tz_localize(tz)
    except (KeyError, ValueError, TypeError) as e:
        raise ValidationError(f"Unknown timezone {tz!r}") from e
    return tz


def _read_raw(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Config {path} must contain a mapping at top level")
    return data


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Path to the config file. ``None`` returns the defaults.

    Returns:
        SchedulerConfig

    Raises:
        ValidationError: On unknown keys or invalid values
        FileNotFoundError: If the path does not exist
    """
    if path is None:
        return SchedulerConfig()

    raw = _read_raw(Path(path))

    # The YAML file may nest everything under a "shiftplan" section
    if set(raw) == {"shiftplan"} and isinstance(raw["shiftplan"], dict):
        raw = raw["shiftplan"]

    known = {f.name for f in fields(SchedulerConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValidationError(f"Unknown config keys: {', '.join(unknown)}")

    return SchedulerConfig(**raw)
