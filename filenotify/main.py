#!/usr/bin/env python3
"""
file-notify - CLI entry point.

Exposed as the 'file-notify' console command via pyproject.toml.
"""

import argparse
import logging
import os
import signal
import sys
import time
from pathlib import Path
from typing import Any, Optional

from filenotify import __version__
from filenotify.core.alerts import colored_alert
from filenotify.core.models import TOOL_NAME

logger = logging.getLogger(__name__)

ENV_COMMIT = "FILE_NOTIFY_COMMIT"
ENV_BRANCH = "FILE_NOTIFY_BRANCH"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def version_string() -> str:
    """Tool name and version, with build metadata from the environment when set."""
    commit = os.environ.get(ENV_COMMIT, "").strip()
    branch = os.environ.get(ENV_BRANCH, "").strip()
    if commit:
        return f"{TOOL_NAME} v{__version__} (commit: {commit}, branch: {branch})"
    return f"{TOOL_NAME} v{__version__}"


def setup_logging(debug: bool = False, log_path: Optional[Path] = None) -> None:
    """Configure the process-wide log sink: append to log_path (UTC times), else stderr."""
    level = logging.DEBUG if debug else logging.INFO
    handler: logging.Handler = logging.StreamHandler(sys.stderr)
    open_error: Optional[OSError] = None
    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            open_error = e
    formatter = logging.Formatter(LOG_FORMAT)
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[handler], force=True)
    if open_error is not None:
        logger.error("Cannot open log file %s: %s; logging to stderr", log_path, open_error)


def fatal(message: str) -> int:
    """Report a startup-fatal condition to the log and stderr; return the exit status."""
    logger.critical("fatal error: %s", message)
    colored_alert(f"fatal error: {message}", "CRITICAL")
    return 1


def get_config(args: argparse.Namespace) -> dict[str, Any]:
    """Load config from file; explicit command-line flags win over file values."""
    from filenotify.core.config_loader import load_config

    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_path
    overrides = {
        "collector_host": args.dst,
        "collector_port": args.dport,
        "poll_minutes": args.poll,
        "rules_path": args.rules,
        "log_path": args.log,
        "debug": True if args.debug else None,
    }
    return load_config(config_path.resolve(), overrides=overrides)


def cmd_run(config: dict[str, Any]) -> int:
    """Build audit jobs from the rules and run them until SIGINT/SIGTERM."""
    from filenotify.core.detector import ChangeDetector
    from filenotify.core.dispatcher import AlertDispatcher
    from filenotify.core.errors import RuleFileError
    from filenotify.core.inventory import assemble_jobs
    from filenotify.core.rules import load_rules
    from filenotify.core.scheduler import AuditRunner, AuditScheduler

    rules_path = Path(config["rules_path"])
    try:
        plans = load_rules(rules_path)
    except RuleFileError as e:
        return fatal(str(e))

    jobs = assemble_jobs(plans, rules_name=rules_path.name)
    if not jobs:
        return fatal(f"no audit jobs could be built from {rules_path}")

    runner = AuditRunner(
        ChangeDetector(debug=config["debug"]),
        AlertDispatcher.from_config(config),
    )
    scheduler = AuditScheduler(
        runner,
        poll_minutes=config["poll_minutes"],
        stagger_seconds=config["stagger_seconds"],
        debug=config["debug"],
    )

    def on_signal(signum, _frame) -> None:
        logger.info("Received signal %d, stopping audit jobs", signum)
        scheduler.stop()

    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)

    started = scheduler.start(jobs)
    logger.info("%d audit jobs started (destination %s:%d)",
                started, config["collector_host"], config["collector_port"])
    scheduler.wait()
    logger.info("%s stopped.", TOOL_NAME)
    return 0


def build_parser() -> argparse.ArgumentParser:
    default_config = Path(__file__).resolve().parent / "config" / "config.yaml"
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="File integrity audit agent - report mtime drift and deletions to a remote collector.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(default_config),
        help="Path to config.yaml (default: package config; use CWD-relative or absolute)",
    )
    parser.add_argument("--dst", type=str, default=None, help="Destination hostname or IP address (default 127.0.0.1)")
    parser.add_argument("--dport", type=int, default=None, help="Destination port (default 6000)")
    parser.add_argument("--poll", type=float, default=None, help="Poll interval in minutes (default 1)")
    parser.add_argument("--rules", type=str, default=None, help="Rules file (default file-watch.rules)")
    parser.add_argument("--log", type=str, default=None, help="Log file (default file-watch.log)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="store_true", help="Display version and exit")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI logic."""
    args = build_parser().parse_args(argv)
    if args.version:
        print(version_string())
        return 0

    try:
        config = get_config(args)
    except FileNotFoundError as e:
        colored_alert(str(e), "CRITICAL")
        return 1
    except Exception as e:
        colored_alert(f"Failed to load config: {e}", "CRITICAL")
        return 1

    setup_logging(debug=config["debug"], log_path=config["log_path"])
    logger.info("%s v%s starting", TOOL_NAME, __version__)
    logger.info("debug: %s", config["debug"])
    logger.info("poll: %gm", config["poll_minutes"])
    return cmd_run(config)


def cli() -> None:
    """Entry point for the file-notify console command."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
