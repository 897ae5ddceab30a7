"""
file-notify - Change detection against the startup baseline.

Re-stats every file of a job's baseline and reports DELETED and MODIFIED
conditions as AuditAlert objects.
"""

import logging
import os

from filenotify.core.models import AlertKind, AuditAlert, AuditJob, job_tag

logger = logging.getLogger(__name__)


class ChangeDetector:
    """
    Compares the live state of a job's files with its baseline.

    Modification times are compared for exact equality, so backdated or
    skewed timestamps are reported as well as forward changes. The baseline
    is never updated here.
    """

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def detect(self, job: AuditJob, job_no: int) -> list[AuditAlert]:
        """Run one pass for job; return this pass's alerts in baseline order."""
        tag = job_tag(job_no)
        alerts: list[AuditAlert] = []
        for snapshot in job.baseline:
            if self.debug:
                logger.debug("%s audit %s", tag, snapshot.path)

            try:
                st = os.stat(snapshot.path)
            except OSError as e:
                alert = AuditAlert(
                    kind=AlertKind.DELETED,
                    job_no=job_no,
                    path=snapshot.path,
                    previous_mtime_ns=snapshot.mtime_ns,
                    reason=e.strerror or str(e),
                )
                logger.warning("%s", alert)
                alerts.append(alert)
                continue

            if not job.plan.checks_mtime or st.st_mtime_ns == snapshot.mtime_ns:
                continue
            alert = AuditAlert(
                kind=AlertKind.MODIFIED,
                job_no=job_no,
                path=snapshot.path,
                previous_mtime_ns=snapshot.mtime_ns,
                current_mtime_ns=st.st_mtime_ns,
            )
            logger.warning("%s", alert)
            alerts.append(alert)

        logger.info("%s %d alerts", tag, len(alerts))
        return alerts
