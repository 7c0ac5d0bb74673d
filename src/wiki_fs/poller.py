"""Background thread that periodically synchronizes a mounted wiki."""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5 * 60


class SyncPoller(threading.Thread):
    """Runs ``filesystem.synchronize()`` every ``interval`` seconds.

    The poller owns its stop event. ``stop()`` sets it; a pass in progress
    finishes its current item and returns, and the thread exits before the
    next wait. A failing pass is logged and the loop continues.

    Example:
        >>> poller = SyncPoller(fs, interval=300)
        >>> poller.start()
        >>> ...
        >>> poller.stop()
    """

    def __init__(self, filesystem, interval: float = DEFAULT_POLL_INTERVAL):
        super().__init__(name="wikifs-sync", daemon=True)
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._filesystem = filesystem
        self.interval = interval
        self.stop_event = threading.Event()
        self.passes = 0

    def run(self) -> None:
        logger.debug(f"Sync poller started (every {self.interval}s)")
        while not self.stop_event.wait(self.interval):
            self.poll_once()
        logger.debug("Sync poller stopped")

    def poll_once(self) -> None:
        """Run one synchronization pass, logging any failure."""
        try:
            report = self._filesystem.synchronize(self.stop_event)
        except Exception:
            logger.exception("Synchronization pass failed")
            return
        finally:
            self.passes += 1
        if not report.completed and not self.stop_event.is_set():
            logger.warning(f"Synchronization incomplete, retrying from marker {report.marker}")

    def stop(self, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if self.is_alive():
            self.join(timeout)
