from __future__ import annotations

import tests._path_setup  # noqa: F401

import logging
import os

import pytest

from tempguard import config


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Start every test from defaults: no TEMPGUARD_* env, fresh config cache, quiet logger."""
    for key in list(os.environ):
        if key.startswith("TEMPGUARD_"):
            monkeypatch.delenv(key, raising=False)
    config.current.cache_clear()
    pkg = logging.getLogger("tempguard")
    saved = (list(pkg.handlers), pkg.level, pkg.propagate)
    pkg.handlers.clear()
    pkg.propagate = True
    pkg.setLevel(logging.NOTSET)
    yield
    for handler in pkg.handlers:
        handler.close()
    pkg.handlers[:] = saved[0]
    pkg.setLevel(saved[1])
    pkg.propagate = saved[2]
    config.current.cache_clear()
