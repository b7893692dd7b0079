import logging

from telemetry.errors import CaptureUnavailable
from telemetry.monitor import PerformanceMonitor
from telemetry.source import PerformanceEntry, SnapshotSource

PAGE = "https://site.example/blog/post"

TIMING = {
    "navigationStart": 0,
    "requestStart": 10,
    "responseStart": 60,
    "responseEnd": 80,
    "loadEventEnd": 900,
}

LCP_ENTRIES = [
    PerformanceEntry("", "largest-contentful-paint", 400.0),
    PerformanceEntry("", "largest-contentful-paint", 650.0),
]


class FakeReporter:
    def __init__(self):
        self.lcp = []
        self.bundles = []

    def report_lcp(self, value, url):
        self.lcp.append((value, url))

    def report_metrics(self, metrics, page_url=None):
        self.bundles.append((metrics, page_url))


class PendingPageSource(SnapshotSource):
    """Page that has not fired ``load`` yet; tracks listener cleanup."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.load_listeners = []
        self.disconnected = False

    def observe(self, entry_types, callback):
        super().observe(entry_types, callback)

        def disconnect():
            self.disconnected = True

        return disconnect

    def when_loaded(self, callback):
        self.load_listeners.append(callback)
        return lambda: self.load_listeners.remove(callback)

    def fire_load(self):
        for callback in list(self.load_listeners):
            callback()


def test_mount_reports_latest_lcp_and_bundle_once():
    reporter = FakeReporter()
    monitor = PerformanceMonitor(
        SnapshotSource(timing=TIMING, entries=LCP_ENTRIES), reporter, PAGE
    )

    assert monitor.mount() is True

    assert reporter.lcp == [(650.0, PAGE)]
    assert len(reporter.bundles) == 1
    metrics, page_url = reporter.bundles[0]
    assert page_url == PAGE
    assert metrics["ttfb"] == 50
    assert metrics["pageLoad"] == 900


def test_second_mount_does_not_capture_again():
    reporter = FakeReporter()
    monitor = PerformanceMonitor(
        SnapshotSource(timing=TIMING, entries=LCP_ENTRIES), reporter, PAGE
    )
    monitor.mount()
    monitor.unmount()

    assert monitor.mount() is False
    assert len(reporter.lcp) == 1
    assert len(reporter.bundles) == 1


def test_bundle_waits_for_load_event():
    reporter = FakeReporter()
    source = PendingPageSource(timing=TIMING)
    monitor = PerformanceMonitor(source, reporter, PAGE)

    monitor.mount()
    assert reporter.bundles == []

    source.fire_load()
    source.fire_load()

    assert len(reporter.bundles) == 1


def test_unmount_releases_observer_and_load_listener():
    source = PendingPageSource(timing=TIMING)
    monitor = PerformanceMonitor(source, FakeReporter(), PAGE)
    monitor.mount()
    assert monitor.active

    monitor.unmount()

    assert source.disconnected
    assert source.load_listeners == []
    assert not monitor.active


def test_capture_unavailable_is_swallowed(caplog):
    reporter = FakeReporter()
    source = SnapshotSource(timing=TIMING, entries=LCP_ENTRIES, supports_observer=False)
    monitor = PerformanceMonitor(source, reporter, PAGE)

    with caplog.at_level(logging.WARNING):
        assert monitor.mount() is False

    assert reporter.lcp == []
    assert reporter.bundles == []
    assert "unavailable" in caplog.text


def test_broken_source_never_raises():
    class BrokenSource(SnapshotSource):
        def navigation_timing(self):
            raise CaptureUnavailable("performance.timing is blocked")

    reporter = FakeReporter()
    monitor = PerformanceMonitor(BrokenSource(), reporter, PAGE)

    assert monitor.mount() is True
    assert reporter.bundles == []


def test_reporter_errors_do_not_reach_the_page():
    class ExplodingReporter(FakeReporter):
        def report_lcp(self, value, url):
            raise RuntimeError("boom")

    monitor = PerformanceMonitor(
        SnapshotSource(timing=TIMING, entries=LCP_ENTRIES), ExplodingReporter(), PAGE
    )

    assert monitor.mount() is True
