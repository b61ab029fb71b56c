"""Runtime settings for the command-line interface."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    strict: bool = True  # reject leftover formula text
    log_level: str = "WARNING"
    indent: int = 2  # JSON output indentation


def _parse_settings(data: Dict[str, Any]) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")

    log_level = str(data.get("log_level", Settings.log_level)).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {log_level}")

    return Settings(
        strict=bool(data.get("strict", Settings.strict)),
        log_level=log_level,
        indent=int(data.get("indent", Settings.indent)),
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a JSON file; defaults when no path is given."""
    if path is None:
        return Settings()
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")
    return _parse_settings(data)
