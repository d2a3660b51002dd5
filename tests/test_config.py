import os

import pytest

from bktreex import config as bk_config


def _reload(monkeypatch: pytest.MonkeyPatch, **env: str) -> bk_config.RuntimeConfig:
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    bk_config.reset_runtime_config_cache()
    return bk_config.runtime_config()


def test_defaults():
    config = bk_config.runtime_config()

    assert config.log_level == "INFO"
    assert config.enable_diagnostics is True
    assert config.metric == "levenshtein"
    assert config.sorted_expansion is False
    assert config.async_workers == (os.cpu_count() or 1)
    assert config.async_budget_ms == pytest.approx(50.0)
    assert config.async_budget_seconds == pytest.approx(0.05)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    config = _reload(
        monkeypatch,
        BKTREEX_LOG_LEVEL="debug",
        BKTREEX_ENABLE_DIAGNOSTICS="off",
        BKTREEX_METRIC=" Hamming ",
        BKTREEX_SORTED_EXPANSION="yes",
        BKTREEX_ASYNC_WORKERS="3",
        BKTREEX_ASYNC_BUDGET_MS="12.5",
    )

    assert config.log_level == "DEBUG"
    assert config.enable_diagnostics is False
    assert config.metric == "hamming"
    assert config.sorted_expansion is True
    assert config.async_workers == 3
    assert config.async_budget_seconds == pytest.approx(0.0125)


def test_runtime_config_is_cached(monkeypatch: pytest.MonkeyPatch):
    first = bk_config.runtime_config()
    monkeypatch.setenv("BKTREEX_METRIC", "absolute")

    assert bk_config.runtime_config() is first
    bk_config.reset_runtime_config_cache()
    assert bk_config.runtime_config().metric == "absolute"


def test_unrecognised_boolean_falls_back_to_default(monkeypatch: pytest.MonkeyPatch):
    config = _reload(monkeypatch, BKTREEX_ENABLE_DIAGNOSTICS="maybe")

    assert config.enable_diagnostics is True


@pytest.mark.parametrize(
    "key, value",
    [
        ("BKTREEX_LOG_LEVEL", "verbose"),
        ("BKTREEX_ASYNC_WORKERS", "0"),
        ("BKTREEX_ASYNC_WORKERS", "many"),
        ("BKTREEX_ASYNC_BUDGET_MS", "-1"),
        ("BKTREEX_ASYNC_BUDGET_MS", "soon"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, key: str, value: str):
    monkeypatch.setenv(key, value)
    bk_config.reset_runtime_config_cache()

    with pytest.raises(ValueError):
        bk_config.runtime_config()


def test_describe_runtime(monkeypatch: pytest.MonkeyPatch):
    _reload(monkeypatch, BKTREEX_ASYNC_WORKERS="2")

    description = bk_config.describe_runtime()

    assert description == {
        "log_level": "INFO",
        "enable_diagnostics": True,
        "metric": "levenshtein",
        "sorted_expansion": False,
        "async_workers": 2,
        "async_budget_ms": 50.0,
    }
