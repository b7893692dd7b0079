import argparse
import asyncio
import logging
from typing import List, Optional

import httpx

from telemetry.monitor import PerformanceMonitor
from telemetry.reporter import MetricReporter
from telemetry.source import SnapshotSource

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send a recorded page performance snapshot to the ingestion API."
    )
    parser.add_argument("--snapshot", required=True, help="JSON file with timing and entries")
    parser.add_argument("--endpoint", required=True, help="Base URL, e.g. https://example.com")
    parser.add_argument("--page-url", required=True, help="URL of the page that was measured")
    parser.add_argument("--timeout", type=float, default=5.0, help="HTTP timeout in seconds")
    return parser.parse_args(argv)


async def replay(
    snapshot: str,
    endpoint: str,
    page_url: str,
    timeout: float = 5.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    source = SnapshotSource.from_file(snapshot)

    async with httpx.AsyncClient(
        base_url=endpoint, timeout=timeout, transport=transport
    ) as client:
        reporter = MetricReporter(client)
        monitor = PerformanceMonitor(source, reporter, page_url)
        started = monitor.mount()
        await reporter.drain()
        monitor.unmount()

    return started


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)

    try:
        started = asyncio.run(
            replay(args.snapshot, args.endpoint, args.page_url, args.timeout)
        )
    except (OSError, ValueError, KeyError) as e:
        # json.JSONDecodeError is a ValueError; a missing entryType is a KeyError
        logger.error(f"Could not read snapshot {args.snapshot}: {e!r}")
        return 1

    if not started:
        logger.warning("Nothing was captured from the snapshot")
        return 1

    logger.info("Snapshot replayed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
