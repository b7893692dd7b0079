import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from telemetry.errors import CaptureUnavailable


@dataclass(frozen=True)
class PerformanceEntry:
    name: str
    entry_type: str
    start_time: float
    duration: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "PerformanceEntry":
        """Accepts the shape of ``PerformanceEntry.toJSON()`` in the browser."""
        return cls(
            name=data.get("name", ""),
            entry_type=data["entryType"],
            start_time=float(data.get("startTime", 0.0)),
            duration=float(data.get("duration", 0.0)),
        )


EntriesCallback = Callable[[List[PerformanceEntry]], None]
Unsubscribe = Callable[[], None]


class PerformanceSource(ABC):
    """What a page exposes of the browser performance API.

    Implementations raise CaptureUnavailable when a capability is missing.
    """

    @abstractmethod
    def navigation_timing(self) -> Dict[str, float]:
        """``performance.timing`` fields, epoch milliseconds."""

    @abstractmethod
    def get_entries_by_type(self, entry_type: str) -> List[PerformanceEntry]:
        ...

    @abstractmethod
    def observe(self, entry_types: Iterable[str], callback: EntriesCallback) -> Unsubscribe:
        """Register a PerformanceObserver; returns its disconnect()."""

    @abstractmethod
    def when_loaded(self, callback: Callable[[], None]) -> Unsubscribe:
        """Run callback on window load, right away if the page already loaded."""


class SnapshotSource(PerformanceSource):
    """A page recorded after load: ``{"timing": {...}, "entries": [...]}``.

    ``timing`` is ``JSON.stringify(performance.timing)``, ``entries`` is
    ``performance.getEntries()`` (LCP entries must be collected with a
    buffered observer, the browser does not list them there).
    """

    def __init__(
        self,
        timing: Optional[Dict[str, float]] = None,
        entries: Iterable[PerformanceEntry] = (),
        supports_observer: bool = True,
    ):
        self._timing = dict(timing or {})
        self._entries = list(entries)
        self.supports_observer = supports_observer

    @classmethod
    def from_dict(cls, snapshot: dict) -> "SnapshotSource":
        entries = [PerformanceEntry.from_dict(e) for e in snapshot.get("entries", [])]
        return cls(timing=snapshot.get("timing"), entries=entries)

    @classmethod
    def from_file(cls, path) -> "SnapshotSource":
        with open(Path(path), "r", encoding="utf-8") as file:
            return cls.from_dict(json.load(file))

    def navigation_timing(self) -> Dict[str, float]:
        return dict(self._timing)

    def get_entries_by_type(self, entry_type: str) -> List[PerformanceEntry]:
        return [e for e in self._entries if e.entry_type == entry_type]

    def observe(self, entry_types: Iterable[str], callback: EntriesCallback) -> Unsubscribe:
        if not self.supports_observer:
            raise CaptureUnavailable("PerformanceObserver is not supported")

        wanted = set(entry_types)
        buffered = [e for e in self._entries if e.entry_type in wanted]
        if buffered:
            callback(buffered)

        return lambda: None

    def when_loaded(self, callback: Callable[[], None]) -> Unsubscribe:
        callback()
        return lambda: None
