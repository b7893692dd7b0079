import asyncio
import logging
from typing import Any, Dict, Optional, Set

import httpx

from telemetry.errors import TransportFailure

logger = logging.getLogger(__name__)

LCP_PATH = "/api/performance/lcp"
METRICS_PATH = "/api/performance"


class MetricReporter:
    """Best-effort delivery of captured metrics to the ingestion endpoints.

    Every report is posted from a detached task and the call returns at
    once. Delivery is not guaranteed: a failed send is logged and lost, with
    no retry, no queue and no buffering between page views. Callers must not
    depend on a report arriving.
    """

    def __init__(self, client: httpx.AsyncClient, enabled: bool = True):
        self._client = client
        self.enabled = enabled
        self._pending: Set[asyncio.Task] = set()

    def report_lcp(self, value: float, url: str) -> None:
        self._fire(LCP_PATH, {"value": value, "url": url})

    def report_metrics(self, metrics: Dict[str, Any], page_url: Optional[str] = None) -> None:
        # The server takes the page url from Referer, not from the body
        headers = {"Referer": page_url} if page_url else None
        self._fire(METRICS_PATH, metrics, headers)

    def _fire(self, path: str, payload: Any, headers: Optional[Dict[str, str]] = None):
        if not self.enabled:
            logger.debug(f"Reporting disabled, skipped {path}")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, report to {path} dropped")
            return

        task = loop.create_task(self._send(path, payload, headers))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, path: str, payload: Any, headers: Optional[Dict[str, str]]):
        try:
            response = await self._client.post(path, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(str(TransportFailure(path, e)))
        except Exception:
            logger.exception(f"Unexpected error reporting to {path}")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self):
        """Wait for in-flight reports. Never raises."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
