from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    # audit.log and config.yaml are resolved relative to the working directory
    monkeypatch.chdir(tmp_path)
