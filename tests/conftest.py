"""Root test configuration: isolate cwd, MDSITE_* env vars, and CLI log handlers"""

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def isolate(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory with no MDSITE_* overrides."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)
    yield
    logger = logging.getLogger("mdsite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
