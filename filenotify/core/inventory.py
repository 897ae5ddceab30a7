"""
file-notify - Inventory builder and job assembly.

Walks a rule's path and records every regular file with its modification
time. The resulting inventory becomes the job's fixed baseline.
"""

import logging
import os
import stat
import sys
from typing import Iterable

from filenotify.core.alerts import colored_alert
from filenotify.core.errors import WalkFailure
from filenotify.core.models import AuditJob, AuditPlan, FileSnapshot, format_mtime

logger = logging.getLogger(__name__)


class InventoryBuilder:
    """
    Recursively scans a rule's root path and produces the list of
    FileSnapshot entries in walk order (entries sorted by name per directory).
    """

    def __init__(self, prune: str = "") -> None:
        self.prune = prune

    def _add(self, path: str, st: os.stat_result, inventory: list[FileSnapshot]) -> None:
        snapshot = FileSnapshot(path=path, mtime_ns=st.st_mtime_ns)
        inventory.append(snapshot)
        logger.info("add: mtime=%s file=%s", format_mtime(snapshot.mtime_ns), path)

    def _walk(self, directory: str, inventory: list[FileSnapshot]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise WalkFailure(directory, e) from e

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if self.prune and entry.name == self.prune:
                        logger.info("skip: %s", entry.path)
                        continue
                    self._walk(entry.path, inventory)
                    continue
                if not entry.is_file():
                    logger.debug("ignoring non-regular entry %s", entry.path)
                    continue
                st = entry.stat()
            except OSError as e:
                raise WalkFailure(entry.path, e) from e
            self._add(entry.path, st, inventory)

    def build(self, root: str) -> list[FileSnapshot]:
        """
        Build the inventory for root.

        A root that is a regular file yields a one-entry inventory. A root
        directory whose own name is the prune name yields an empty one.

        Raises:
            WalkFailure: any traversal error; no partial inventory is returned.
        """
        try:
            st = os.stat(root)
        except OSError as e:
            raise WalkFailure(root, e) from e

        inventory: list[FileSnapshot] = []
        if stat.S_ISREG(st.st_mode):
            self._add(root, st, inventory)
        elif stat.S_ISDIR(st.st_mode):
            if self.prune and os.path.basename(root.rstrip(os.sep)) == self.prune:
                logger.info("skip: %s", root)
                return inventory
            self._walk(root, inventory)
        else:
            logger.warning("Neither a file nor a directory: %s", root)
        return inventory


def build_inventory(plan: AuditPlan) -> list[FileSnapshot]:
    return InventoryBuilder(prune=plan.prune).build(plan.path)


def assemble_jobs(plans: Iterable[AuditPlan], rules_name: str = "rules file") -> list[AuditJob]:
    """
    Pair each plan with its baseline inventory.

    Plans whose walk fails are logged, echoed to stderr and skipped; the
    rest keep their input order.
    """
    jobs: list[AuditJob] = []
    for plan in plans:
        try:
            baseline = build_inventory(plan)
        except WalkFailure as e:
            logger.error("%s", e)
            msg = "skipping line %d of %s. check rules and file system path" % (plan.lineno, rules_name)
            logger.warning(msg)
            colored_alert(msg, "WARNING", stream=sys.stderr)
            continue
        jobs.append(AuditJob(plan=plan, baseline=tuple(baseline)))
    return jobs
