"""
file-notify - Rule file ingestion.

Each non-comment line is nine tab-separated fields:
kind, presence, mode, atime, ctime, mtime, hash, path, prune.
Malformed integer fields fall back to their defaults; they never drop the line.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from filenotify.core.errors import RuleFileError
from filenotify.core.models import AuditPlan

logger = logging.getLogger(__name__)

RULE_FIELDS = 9
RULE_KINDS = ("d", "f")

# field name -> default used when the value is not an integer
_INT_DEFAULTS = (
    ("presence", 1),
    ("mode", 0),
    ("atime", 0),
    ("ctime", 0),
    ("mtime", 1),
)

# optional sign and ASCII digits only; padding, underscores and other numerals are malformed
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _parse_int(value: str, default: int) -> int:
    if not _DECIMAL.fullmatch(value):
        return default
    return int(value)


def parse_rule_line(line: str, lineno: int = 0) -> Optional[AuditPlan]:
    """Parse one rule line; return None for comments, blanks and unknown kinds."""
    line = line.rstrip("\r\n")
    if not line or line.startswith("#"):
        return None
    if line[0] not in RULE_KINDS:
        return None
    fields = line.split("\t")
    if len(fields) < RULE_FIELDS:
        logger.warning("rules line %d: %d of %d fields present", lineno, len(fields), RULE_FIELDS)
        fields += [""] * (RULE_FIELDS - len(fields))

    ints = {
        name: _parse_int(fields[i], default)
        for i, (name, default) in enumerate(_INT_DEFAULTS, start=1)
    }
    return AuditPlan(
        kind=fields[0],
        hash=fields[6],
        path=fields[7],
        prune=fields[8],
        lineno=lineno,
        **ints,
    )


def parse_rules(lines: Iterable[str]) -> list[AuditPlan]:
    plans: list[AuditPlan] = []
    for lineno, line in enumerate(lines, start=1):
        plan = parse_rule_line(line, lineno)
        if plan is not None:
            plans.append(plan)
    return plans


def load_rules(rules_path: Path) -> list[AuditPlan]:
    """
    Load audit plans from a rule file.

    Raises:
        RuleFileError: the file cannot be opened or read.
    """
    try:
        with open(rules_path, encoding="utf-8", errors="replace") as f:
            plans = parse_rules(f)
    except OSError as e:
        raise RuleFileError(str(rules_path), e) from e
    logger.info("audit plans loaded: %d", len(plans))
    return plans
