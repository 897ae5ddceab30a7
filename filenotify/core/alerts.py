"""
file-notify - Console alerts for startup-time failures.

Uses colorama for cross-platform colored output on stderr. Audit alerts
themselves go to the collector and the log, never to the console.
"""

import sys
from typing import Optional, TextIO

import colorama
from colorama import Fore

# Lazy init of colorama (once per process)
_colorama_init_done = False


def _ensure_colorama() -> None:
    global _colorama_init_done
    if not _colorama_init_done:
        colorama.init(autoreset=True)
        _colorama_init_done = True


def colored_alert(message: str, level: str, stream: Optional[TextIO] = None) -> None:
    """
    Print a message in color to stderr (or stream).

    level: "CRITICAL" (red), "WARNING" (yellow), "INFO" or "OK" (green).
    """
    _ensure_colorama()
    level_upper = level.upper()
    if level_upper == "CRITICAL":
        prefix = Fore.RED
    elif level_upper == "WARNING":
        prefix = Fore.YELLOW
    else:
        prefix = Fore.GREEN
    print(f"{prefix}{message}", file=stream or sys.stderr)
