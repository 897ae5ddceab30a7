# ruff: noqa: S101
"""Tests for configuration loading and overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from filenotify.core.config_loader import DEFAULTS, load_config

PACKAGE_CONFIG = Path(__file__).resolve().parents[1] / "filenotify" / "config" / "config.yaml"


def test_defaults_without_file(tmp_path: Path) -> None:
    config = load_config(None, base_dir=tmp_path)

    assert config["collector_host"] == DEFAULTS["collector_host"]
    assert config["collector_port"] == 6000
    assert config["connect_attempts"] == 2
    assert config["connect_interval_seconds"] == 2.0
    assert config["poll_minutes"] == 1.0
    assert config["stagger_seconds"] == 30.0
    assert config["rules_path"] == (tmp_path / "file-watch.rules").resolve()
    assert config["log_path"] == (tmp_path / "file-watch.log").resolve()
    assert config["debug"] is False


def test_package_config_matches_defaults(tmp_path: Path) -> None:
    assert load_config(PACKAGE_CONFIG, base_dir=tmp_path) == load_config(None, base_dir=tmp_path)


def test_yaml_values_are_applied(tmp_path: Path) -> None:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "collector:\n"
        "  host: siem.example.net\n"
        "  port: 1514\n"
        "  connect_attempts: 5\n"
        "audit:\n"
        "  rules_file: /etc/file-notify/rules\n"
        "  poll_minutes: 5\n"
        "logging:\n"
        "  debug: true\n",
        encoding="utf-8",
    )

    config = load_config(cfg, base_dir=tmp_path)

    assert config["collector_host"] == "siem.example.net"
    assert config["collector_port"] == 1514
    assert config["connect_attempts"] == 5
    assert config["rules_path"] == Path("/etc/file-notify/rules")
    assert config["poll_minutes"] == 5.0
    assert config["debug"] is True


def test_overrides_win_and_none_is_ignored(tmp_path: Path) -> None:
    cfg = tmp_path / "config.yaml"
    cfg.write_text("collector:\n  host: from-file\n  port: 1514\n", encoding="utf-8")

    config = load_config(
        cfg,
        overrides={"collector_host": "from-cli", "collector_port": None, "rules_path": "r.rules"},
        base_dir=tmp_path,
    )

    assert config["collector_host"] == "from-cli"
    assert config["collector_port"] == 1514
    assert config["rules_path"] == (tmp_path / "r.rules").resolve()


def test_values_are_clamped(tmp_path: Path) -> None:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "collector:\n  port: 99999\n  connect_attempts: 0\n  connect_interval_seconds: -3\n"
        "audit:\n  poll_minutes: 0\n  stagger_seconds: -1\n",
        encoding="utf-8",
    )

    config = load_config(cfg, base_dir=tmp_path)

    assert config["collector_port"] == 65535
    assert config["connect_attempts"] == 1
    assert config["connect_interval_seconds"] == 0.0
    assert config["poll_minutes"] > 0
    assert config["stagger_seconds"] == 0.0


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    cfg = tmp_path / "config.yaml"
    cfg.write_text("", encoding="utf-8")

    assert load_config(cfg, base_dir=tmp_path) == load_config(None, base_dir=tmp_path)


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")
