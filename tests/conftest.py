import os

import pytest

from bktreex import config as bk_config


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch: pytest.MonkeyPatch):
    for key in list(os.environ):
        if key.startswith("BKTREEX_"):
            monkeypatch.delenv(key, raising=False)
    bk_config.reset_runtime_config_cache()
    yield
    bk_config.reset_runtime_config_cache()
