"""
file-notify - Shared data models (plans, snapshots, jobs, alerts).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

TOOL_NAME = "file-notify"


def format_mtime(mtime_ns: int) -> str:
    """Render a nanosecond timestamp as RFC3339 UTC, keeping full precision."""
    seconds, nanos = divmod(mtime_ns, 1_000_000_000)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return "%s.%09dZ" % (dt.strftime("%Y-%m-%dT%H:%M:%S"), nanos)


def job_tag(job_no: int) -> str:
    return "job[%d]:" % job_no


class AlertKind(str, Enum):
    """Conditions the change detector reports."""

    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class AuditPlan:
    """One rule line: which path to watch and which attributes to check."""

    kind: str
    presence: int = 1
    mode: int = 0
    atime: int = 0
    ctime: int = 0
    mtime: int = 1
    hash: str = ""
    path: str = ""
    prune: str = ""
    lineno: int = 0

    @property
    def checks_mtime(self) -> bool:
        return self.mtime == 1


@dataclass(frozen=True)
class FileSnapshot:
    """A file's path and modification time as seen when the baseline was taken."""

    path: str
    mtime_ns: int


@dataclass(frozen=True)
class AuditJob:
    """
    An audit plan paired with the baseline captured for it at startup.

    The baseline is fixed for the job's lifetime: a file that changed and was
    not reverted keeps alerting on every pass.
    """

    plan: AuditPlan
    baseline: tuple[FileSnapshot, ...]

    rebaselines = False


@dataclass(frozen=True)
class AuditAlert:
    """One detected deletion or modification for one file of one job."""

    kind: AlertKind
    job_no: int
    path: str
    previous_mtime_ns: int
    current_mtime_ns: Optional[int] = None
    reason: str = ""

    def __str__(self) -> str:
        tag = job_tag(self.job_no)
        if self.kind == AlertKind.DELETED:
            return "%s file deletion: file=%s error=%s" % (tag, self.path, self.reason)
        return "%s mtime change: file=%s mtime1=%s mtime0=%s" % (
            tag,
            self.path,
            format_mtime(self.current_mtime_ns or 0),
            format_mtime(self.previous_mtime_ns),
        )
