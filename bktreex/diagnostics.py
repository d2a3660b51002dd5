from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

import psutil

from bktreex import config as bk_config


@dataclass
class _ResourceSnapshot:
    cpu_user: float
    cpu_system: float
    rss_bytes: int

    @classmethod
    def capture(cls, process: psutil.Process) -> "_ResourceSnapshot":
        times = process.cpu_times()
        return cls(
            cpu_user=float(times.user),
            cpu_system=float(times.system),
            rss_bytes=int(process.memory_info().rss),
        )


@dataclass
class OperationLog:
    """Mutable record handed to the body of :func:`log_operation`."""

    op: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, **values: Any) -> None:
        for key, value in values.items():
            self.metadata[str(key)] = value


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def _render(
    op_log: OperationLog,
    *,
    wall_ms: float,
    status: str,
    before: _ResourceSnapshot | None,
    after: _ResourceSnapshot | None,
) -> str:
    parts = [f"op={op_log.op}", f"status={status}", f"wall_ms={wall_ms:.3f}"]
    if before is not None and after is not None:
        parts.append(f"cpu_user_ms={(after.cpu_user - before.cpu_user) * 1e3:.3f}")
        parts.append(f"cpu_system_ms={(after.cpu_system - before.cpu_system) * 1e3:.3f}")
        parts.append(f"rss_delta={after.rss_bytes - before.rss_bytes}")
    else:
        parts.extend(("cpu_user_ms=NA", "cpu_system_ms=NA", "rss_delta=NA"))
    for key, value in op_log.metadata.items():
        parts.append(f"{key}={_format_value(value)}")
    return " ".join(parts)


@contextmanager
def log_operation(
    logger: logging.Logger,
    op: str,
    *,
    level: int = logging.INFO,
) -> Iterator[OperationLog]:
    """Time the wrapped block and emit one ``op=<name>`` summary line.

    Resource figures are sampled through psutil only when the logger would
    emit the record and diagnostics are enabled; otherwise they render as
    ``NA``. The line is emitted on failure too, tagged ``status=error``.
    """

    op_log = OperationLog(op=op)
    enabled = logger.isEnabledFor(level)
    process: psutil.Process | None = None
    before: _ResourceSnapshot | None = None
    if enabled and bk_config.runtime_config().enable_diagnostics:
        process = psutil.Process()
        before = _ResourceSnapshot.capture(process)
    start = time.perf_counter()
    status = "ok"
    try:
        yield op_log
    except BaseException:
        status = "error"
        raise
    finally:
        if enabled:
            wall_ms = (time.perf_counter() - start) * 1e3
            after = _ResourceSnapshot.capture(process) if process is not None else None
            logger.log(
                level,
                _render(op_log, wall_ms=wall_ms, status=status, before=before, after=after),
            )


__all__ = ["OperationLog", "log_operation"]
