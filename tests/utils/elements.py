from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Optional


class ConcurrencyProbe:
    """Tracks how many distance evaluations run at the same time."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.calls = 0
        self._lock = Lock()

    def __enter__(self) -> "ConcurrencyProbe":
        with self._lock:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with self._lock:
            self.active -= 1


@dataclass(frozen=True)
class ProbedInteger:
    """Integer under absolute difference; slow only when compared with a probed query."""

    value: int
    probe: Optional[ConcurrencyProbe] = field(default=None, compare=False)

    def distance_to(self, other: "ProbedInteger") -> int:
        probe = self.probe or other.probe
        if probe is None:
            return abs(self.value - other.value)
        with probe:
            if probe.delay:
                time.sleep(probe.delay)
            return abs(self.value - other.value)

    def describe(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BrokenElement:
    """Violates the metric contract by returning negative distances."""

    label: str

    def distance_to(self, other: "BrokenElement") -> int:
        return -1

    def describe(self) -> str:
        return self.label
