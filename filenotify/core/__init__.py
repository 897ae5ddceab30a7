"""
file-notify - Audit engine core.

Provides rule ingestion, baseline inventories, change detection,
per-job scheduling and alert delivery to a remote collector.
"""

from filenotify.core.detector import ChangeDetector
from filenotify.core.dispatcher import AlertDispatcher
from filenotify.core.inventory import InventoryBuilder, assemble_jobs, build_inventory
from filenotify.core.models import AlertKind, AuditAlert, AuditJob, AuditPlan, FileSnapshot
from filenotify.core.rules import load_rules, parse_rules
from filenotify.core.scheduler import AuditRunner, AuditScheduler

__all__ = [
    "AlertDispatcher",
    "AlertKind",
    "AuditAlert",
    "AuditJob",
    "AuditPlan",
    "AuditRunner",
    "AuditScheduler",
    "ChangeDetector",
    "FileSnapshot",
    "InventoryBuilder",
    "assemble_jobs",
    "build_inventory",
    "load_rules",
    "parse_rules",
]
