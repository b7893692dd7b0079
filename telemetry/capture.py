from typing import Dict, Iterable, Optional

from telemetry.source import PerformanceEntry, PerformanceSource

LCP_ENTRY_TYPE = "largest-contentful-paint"
PAINT_ENTRY_TYPE = "paint"
FIRST_CONTENTFUL_PAINT = "first-contentful-paint"

# metric -> (start mark, end mark) in performance.timing
TIMING_SPANS = {
    "dnsLookup": ("domainLookupStart", "domainLookupEnd"),
    "tcpConnection": ("connectStart", "connectEnd"),
    "serverResponse": ("requestStart", "responseEnd"),
    "domProcessing": ("domLoading", "domComplete"),
    "pageLoad": ("navigationStart", "loadEventEnd"),
    "domContentLoaded": ("navigationStart", "domContentLoadedEventEnd"),
    "domInteractive": ("navigationStart", "domInteractive"),
    "loadEventEnd": ("navigationStart", "loadEventEnd"),
    "ttfb": ("requestStart", "responseStart"),
}


def measure_performance(source: PerformanceSource) -> Optional[Dict[str, float]]:
    """One-shot read of navigation timing, in milliseconds.

    Returns None when the source has no timing data at all.
    """
    timing = source.navigation_timing()
    if not timing:
        return None

    metrics: Dict[str, float] = {}
    for name, (start_mark, end_mark) in TIMING_SPANS.items():
        start, end = timing.get(start_mark), timing.get(end_mark)
        if start is None or end is None:
            continue
        # An end mark of 0 means that phase has not happened yet
        if not end or end < start:
            continue
        metrics[name] = end - start

    for entry in source.get_entries_by_type(PAINT_ENTRY_TYPE):
        if entry.name == FIRST_CONTENTFUL_PAINT:
            metrics["fcp"] = entry.start_time
            break

    return metrics


def latest_lcp(entries: Iterable[PerformanceEntry]) -> Optional[PerformanceEntry]:
    lcp_entries = [e for e in entries if e.entry_type == LCP_ENTRY_TYPE]
    return lcp_entries[-1] if lcp_entries else None
