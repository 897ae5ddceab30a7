"""
file-notify - Alert delivery to the remote collector.

AlertDispatcher opens one TCP connection per batch (with bounded retry on
connection refused), writes each alert behind a syslog-style header, and
closes the connection. Failures are logged; a batch that cannot be
delivered is dropped.
"""

import errno
import logging
import os
import socket
import time
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from filenotify.core.errors import ConnectionAttemptsExhausted
from filenotify.core.models import TOOL_NAME, AuditAlert

logger = logging.getLogger(__name__)

# <105> = facility 13 (log audit), severity 1 (alert)
SYSLOG_PRIORITY = "<105>"
DEFAULT_ATTEMPTS = 2
DEFAULT_INTERVAL_SECONDS = 2.0
DEFAULT_TIMEOUT_SECONDS = 10.0


def _is_refused(exc: OSError) -> bool:
    return isinstance(exc, ConnectionRefusedError) or exc.errno == errno.ECONNREFUSED


class AlertDispatcher:
    """
    Delivers alert batches to host:port over TCP.

    connect and sleep are injectable so retry behavior can be observed
    without a network or a wall clock.
    """

    def __init__(
        self,
        host: str,
        port: int,
        attempts: int = DEFAULT_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        tool: str = TOOL_NAME,
        connect: Callable[..., Any] = socket.create_connection,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.address = (host, port)
        self.attempts = max(1, attempts)
        self.interval = max(0.0, interval)
        self.timeout = timeout
        self.tool = tool
        self._connect = connect
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "AlertDispatcher":
        return cls(
            host=config["collector_host"],
            port=config["collector_port"],
            attempts=config["connect_attempts"],
            interval=config["connect_interval_seconds"],
            timeout=config["connect_timeout_seconds"],
        )

    def header(self, now: Optional[datetime] = None) -> str:
        """Syslog-style prefix: <105>RFC3339 hostname tool[pid] ."""
        now = now or datetime.now().astimezone()
        stamp = now.isoformat(timespec="seconds")
        if stamp.endswith("+00:00"):
            stamp = stamp[:-6] + "Z"
        return "%s%s %s %s[%d] " % (
            SYSLOG_PRIORITY,
            stamp,
            socket.gethostname(),
            self.tool,
            os.getpid(),
        )

    def connect(self) -> Any:
        """
        Open a connection to the collector.

        Only ECONNREFUSED is retried, pausing `interval` seconds between
        attempts. Any other OSError propagates immediately.

        Raises:
            ConnectionAttemptsExhausted: every attempt was refused.
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return self._connect(self.address, self.timeout)
            except OSError as e:
                if not _is_refused(e):
                    raise
                logger.warning("TCP connection attempt %d: ECONNREFUSED: %s", attempt, e)
                if attempt == self.attempts:
                    break
            self._sleep(self.interval)
        raise ConnectionAttemptsExhausted(self.address, self.attempts)

    def dispatch(self, alerts: Sequence[AuditAlert]) -> int:
        """Send one pass's alerts; return the number of lines written."""
        if not alerts:
            return 0
        hdr = self.header()
        try:
            conn = self.connect()
        except ConnectionAttemptsExhausted as e:
            logger.error("%s; dropping %d alerts", e, len(alerts))
            return 0
        except OSError as e:
            logger.error("TCP connection to %s:%d failed: %s; dropping %d alerts",
                         self.address[0], self.address[1], e, len(alerts))
            return 0

        sent = 0
        try:
            for alert in alerts:
                try:
                    conn.sendall((hdr + str(alert)).encode("utf-8"))
                    sent += 1
                except OSError as e:
                    logger.error("Failed to send alert for %s: %s", alert.path, e)
        finally:
            conn.close()
        logger.info("dispatched %d/%d alerts to %s:%d", sent, len(alerts), *self.address)
        return sent
