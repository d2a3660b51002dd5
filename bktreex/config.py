from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

_LOGGER = logging.getLogger("bktreex")

_SUPPORTED_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
_DEFAULT_METRIC = "levenshtein"
_DEFAULT_ASYNC_BUDGET_MS = 50.0


def _bool_from_env(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_optional_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value '{raw}'") from exc


def _parse_optional_float(raw: str | None, *, default: float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid float value '{raw}'") from exc


def _normalise_log_level(value: str | None) -> str:
    if value is None or value.strip() == "":
        return "INFO"
    level = value.strip().upper()
    if level not in _SUPPORTED_LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level '{value}'. Expected one of {sorted(_SUPPORTED_LOG_LEVELS)}."
        )
    return level


def _default_async_workers() -> int:
    return os.cpu_count() or 1


def _parse_async_workers(raw: str | None) -> int:
    workers = _parse_optional_int(raw)
    if workers is None:
        return _default_async_workers()
    if workers <= 0:
        raise ValueError(f"BKTREEX_ASYNC_WORKERS must be positive, got {workers}.")
    return workers


def _parse_async_budget(raw: str | None) -> float:
    budget = _parse_optional_float(raw, default=_DEFAULT_ASYNC_BUDGET_MS)
    if budget <= 0:
        raise ValueError(f"BKTREEX_ASYNC_BUDGET_MS must be positive, got {budget}.")
    return budget


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str
    enable_diagnostics: bool
    metric: str
    sorted_expansion: bool
    async_workers: int
    async_budget_ms: float

    @property
    def async_budget_seconds(self) -> float:
        return self.async_budget_ms / 1e3

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        log_level = _normalise_log_level(os.getenv("BKTREEX_LOG_LEVEL"))
        enable_diagnostics = _bool_from_env(
            os.getenv("BKTREEX_ENABLE_DIAGNOSTICS"), default=True
        )
        metric = (
            os.getenv("BKTREEX_METRIC", _DEFAULT_METRIC).strip().lower() or _DEFAULT_METRIC
        )
        sorted_expansion = _bool_from_env(
            os.getenv("BKTREEX_SORTED_EXPANSION"), default=False
        )
        async_workers = _parse_async_workers(os.getenv("BKTREEX_ASYNC_WORKERS"))
        async_budget_ms = _parse_async_budget(os.getenv("BKTREEX_ASYNC_BUDGET_MS"))
        return cls(
            log_level=log_level,
            enable_diagnostics=enable_diagnostics,
            metric=metric,
            sorted_expansion=sorted_expansion,
            async_workers=async_workers,
            async_budget_ms=async_budget_ms,
        )


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("bktreex")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@lru_cache(maxsize=None)
def runtime_config() -> RuntimeConfig:
    config = RuntimeConfig.from_env()
    _configure_logging(config.log_level)
    return config


def reset_runtime_config_cache() -> None:
    runtime_config.cache_clear()


def describe_runtime() -> Dict[str, Any]:
    """Return a serialisable view of the active runtime configuration."""

    config = runtime_config()
    return {
        "log_level": config.log_level,
        "enable_diagnostics": config.enable_diagnostics,
        "metric": config.metric,
        "sorted_expansion": config.sorted_expansion,
        "async_workers": config.async_workers,
        "async_budget_ms": config.async_budget_ms,
    }


__all__ = [
    "RuntimeConfig",
    "describe_runtime",
    "reset_runtime_config_cache",
    "runtime_config",
]
