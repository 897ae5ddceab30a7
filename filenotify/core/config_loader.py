"""
file-notify - Configuration loader.

Loads config.yaml, applies defaults and clamps, then layers explicit
command-line overrides on top. The result is a plain dict threaded into
each component at construction.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "collector_host": "127.0.0.1",
    "collector_port": 6000,
    "connect_attempts": 2,
    "connect_interval_seconds": 2.0,
    "connect_timeout_seconds": 10.0,
    "rules_path": "file-watch.rules",
    "poll_minutes": 1.0,
    "stagger_seconds": 30.0,
    "log_path": "file-watch.log",
    "debug": False,
}


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
    base_dir: Optional[Path] = None,
) -> dict[str, Any]:
    """
    Load YAML config and resolve paths relative to base_dir (default: CWD).

    Args:
        config_path: Path to config.yaml, or None for built-in defaults only.
        overrides: Flat keys (as in DEFAULTS) whose non-None values win over the file.
        base_dir: Base for relative rule and log paths.

    Returns:
        Config dict with defaults applied and values clamped.
    """
    raw: dict[str, Any] = {}
    if config_path is not None:
        path = config_path.resolve()
        if not path.is_file():
            raise FileNotFoundError(f"Config not found: {path}")
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    collector = raw.get("collector", {}) or {}
    audit = raw.get("audit", {}) or {}
    logging_raw = raw.get("logging", {}) or {}

    merged = {
        "collector_host": collector.get("host", DEFAULTS["collector_host"]),
        "collector_port": collector.get("port", DEFAULTS["collector_port"]),
        "connect_attempts": collector.get("connect_attempts", DEFAULTS["connect_attempts"]),
        "connect_interval_seconds": collector.get(
            "connect_interval_seconds", DEFAULTS["connect_interval_seconds"]
        ),
        "connect_timeout_seconds": collector.get(
            "connect_timeout_seconds", DEFAULTS["connect_timeout_seconds"]
        ),
        "rules_path": audit.get("rules_file", DEFAULTS["rules_path"]),
        "poll_minutes": audit.get("poll_minutes", DEFAULTS["poll_minutes"]),
        "stagger_seconds": audit.get("stagger_seconds", DEFAULTS["stagger_seconds"]),
        "log_path": logging_raw.get("log_path", DEFAULTS["log_path"]),
        "debug": logging_raw.get("debug", DEFAULTS["debug"]),
    }
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    root = base_dir or Path.cwd()

    def resolve(p: str) -> Path:
        path_obj = Path(p)
        return (root / path_obj).resolve() if not path_obj.is_absolute() else path_obj

    log_path = merged["log_path"]
    return {
        "collector_host": str(merged["collector_host"]),
        "collector_port": max(1, min(65535, int(merged["collector_port"]))),
        "connect_attempts": max(1, int(merged["connect_attempts"])),
        "connect_interval_seconds": max(0.0, float(merged["connect_interval_seconds"])),
        "connect_timeout_seconds": max(0.1, float(merged["connect_timeout_seconds"])),
        "rules_path": resolve(str(merged["rules_path"])),
        "poll_minutes": max(1e-3, float(merged["poll_minutes"])),
        "stagger_seconds": max(0.0, float(merged["stagger_seconds"])),
        "log_path": resolve(str(log_path)) if log_path else None,
        "debug": bool(merged["debug"]),
    }
