from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol, Tuple, runtime_checkable

from bktreex import config as bk_config


@runtime_checkable
class MetricElement(Protocol):
    """Value that can be indexed by a BK-tree.

    ``distance_to`` must be a true metric over integers (non-negative,
    symmetric, zero only for indiscernible values, triangle inequality).
    The tree relies on this for routing and pruning and never checks it.
    """

    def distance_to(self, other: Any) -> int:
        ...

    def describe(self) -> str:
        ...


def levenshtein(lhs: str, rhs: str) -> int:
    """Edit distance with unit cost insert/delete/substitute."""

    if lhs == rhs:
        return 0
    if len(lhs) < len(rhs):
        lhs, rhs = rhs, lhs
    if not rhs:
        return len(lhs)
    previous = list(range(len(rhs) + 1))
    for i, left in enumerate(lhs, start=1):
        current = [i]
        for j, right in enumerate(rhs, start=1):
            cost = 0 if left == right else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def hamming(lhs: int, rhs: int) -> int:
    return bin(lhs ^ rhs).count("1")


@dataclass(frozen=True)
class Word:
    """String element under Levenshtein distance."""

    text: str

    def distance_to(self, other: "Word") -> int:
        return levenshtein(self.text, other.text)

    def describe(self) -> str:
        return self.text


@dataclass(frozen=True)
class HammingCode:
    """Fixed-width fingerprint (e.g. a perceptual hash) under Hamming distance."""

    value: int
    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits <= 0:
            raise ValueError("HammingCode width must be positive.")
        if self.value < 0 or self.value >= (1 << self.bits):
            raise ValueError(
                f"Value {self.value} does not fit in {self.bits} bits."
            )

    def distance_to(self, other: "HammingCode") -> int:
        if other.bits != self.bits:
            raise ValueError(
                f"Cannot compare {self.bits}-bit and {other.bits}-bit fingerprints."
            )
        return hamming(self.value, other.value)

    def describe(self) -> str:
        width = (self.bits + 3) // 4
        return f"{self.value:0{width}x}"

    @classmethod
    def from_hex(cls, text: str, *, bits: int = 64) -> "HammingCode":
        return cls(int(text.strip(), 16), bits=bits)


@dataclass(frozen=True)
class Integer:
    """Integer element under absolute difference."""

    value: int

    def distance_to(self, other: "Integer") -> int:
        return abs(self.value - other.value)

    def describe(self) -> str:
        return str(self.value)


ElementParser = Callable[[str], MetricElement]


@dataclass(frozen=True)
class ElementMetric:
    """Named metric together with a parser turning text into elements."""

    name: str
    parse: ElementParser
    description: str = ""


class MetricRegistry:
    """Minimal registry for runtime-selectable metrics."""

    def __init__(self) -> None:
        self._metrics: Dict[str, ElementMetric] = {}

    def register(self, metric: ElementMetric, *, overwrite: bool = False) -> None:
        name = metric.name.lower()
        if not overwrite and name in self._metrics:
            raise ValueError(f"Metric '{metric.name}' already registered.")
        self._metrics[name] = metric

    def get(self, name: str) -> ElementMetric:
        key = name.lower()
        if key not in self._metrics:
            raise KeyError(f"Metric '{name}' not registered.")
        return self._metrics[key]

    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._metrics.keys()))


def _load_default_registry() -> MetricRegistry:
    registry = MetricRegistry()
    registry.register(
        ElementMetric(
            name="levenshtein",
            parse=lambda text: Word(text),
            description="Edit distance between strings.",
        )
    )
    registry.register(
        ElementMetric(
            name="hamming",
            parse=lambda text: HammingCode.from_hex(text),
            description="Bit distance between 64-bit hexadecimal fingerprints.",
        )
    )
    registry.register(
        ElementMetric(
            name="absolute",
            parse=lambda text: Integer(int(text.strip())),
            description="Absolute difference between integers.",
        )
    )
    return registry


_REGISTRY = _load_default_registry()


def get_metric(name: str | None = None) -> ElementMetric:
    """Return a registered metric, defaulting to the runtime-selected metric."""

    if name is None:
        name = bk_config.runtime_config().metric
    return _REGISTRY.get(name)


def register_metric(metric: ElementMetric, *, overwrite: bool = False) -> None:
    _REGISTRY.register(metric, overwrite=overwrite)


def available_metrics() -> Tuple[str, ...]:
    return _REGISTRY.names()


__all__ = [
    "ElementMetric",
    "HammingCode",
    "Integer",
    "MetricElement",
    "MetricRegistry",
    "Word",
    "available_metrics",
    "get_metric",
    "hamming",
    "levenshtein",
    "register_metric",
]
