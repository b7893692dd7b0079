import logging
from typing import List, Optional

from telemetry.capture import LCP_ENTRY_TYPE, latest_lcp, measure_performance
from telemetry.errors import CaptureUnavailable
from telemetry.reporter import MetricReporter
from telemetry.source import PerformanceEntry, PerformanceSource, Unsubscribe

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Binds capture and reporting to one page view.

    ``mount`` sets capture up at most once per monitor; a second mount,
    even after ``unmount``, does nothing. Setup failures are logged and
    swallowed, and are not retried.
    """

    def __init__(self, source: PerformanceSource, reporter: MetricReporter, page_url: str):
        self.source = source
        self.reporter = reporter
        self.page_url = page_url

        self._mounted_once = False
        self._metrics_sent = False
        self._disconnect: Optional[Unsubscribe] = None
        self._cancel_load: Optional[Unsubscribe] = None

    @property
    def active(self) -> bool:
        return self._disconnect is not None or self._cancel_load is not None

    def mount(self) -> bool:
        if self._mounted_once:
            logger.debug(f"Capture already attempted for {self.page_url}")
            return False
        self._mounted_once = True

        try:
            self._disconnect = self.source.observe([LCP_ENTRY_TYPE], self._on_lcp_entries)
            self._cancel_load = self.source.when_loaded(self._on_load)
        except CaptureUnavailable as e:
            logger.warning(f"Performance capture unavailable: {e}")
            self.unmount()
            return False
        except Exception:
            logger.exception("Failed to set up performance capture")
            self.unmount()
            return False

        return True

    def unmount(self):
        disconnect, cancel_load = self._disconnect, self._cancel_load
        self._disconnect = self._cancel_load = None

        for release in (disconnect, cancel_load):
            if release is None:
                continue
            try:
                release()
            except Exception:
                logger.exception("Failed to release performance observer")

    def _on_lcp_entries(self, entries: List[PerformanceEntry]):
        entry = latest_lcp(entries)
        if entry is None:
            return
        try:
            self.reporter.report_lcp(entry.start_time, self.page_url)
        except Exception:
            logger.exception("Failed to report LCP")

    def _on_load(self):
        if self._metrics_sent:
            return
        self._metrics_sent = True

        try:
            metrics = measure_performance(self.source)
        except CaptureUnavailable as e:
            logger.warning(f"Navigation timing unavailable: {e}")
            return
        except Exception:
            logger.exception("Failed to read navigation timing")
            return

        if not metrics:
            return

        try:
            self.reporter.report_metrics(metrics, self.page_url)
        except Exception:
            logger.exception("Failed to report performance metrics")
