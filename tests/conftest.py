# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from omado.core import TodoList
from omado.models import Task

from .fakes import FakeStorage


@pytest.fixture()
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Point XDG directories at tmp_path so nothing touches the real home."""
    values = {
        "HOME": str(tmp_path / "home"),
        "XDG_DATA_HOME": str(tmp_path / "data"),
        "XDG_CONFIG_HOME": str(tmp_path / "config"),
    }
    for k, v in values.items():
        monkeypatch.setenv(k, v)
    monkeypatch.delenv("OMADO_LOG_LEVEL", raising=False)
    return values


@pytest.fixture()
def sample_tasks() -> list[Task]:
    return [
        Task("fix bug", done=False, project="work"),
        Task("ship release", done=True, project="work"),
        Task("buy milk", done=False, project=None),
        Task("call mom", done=False, project="home"),
    ]


@pytest.fixture()
def storage(sample_tasks: list[Task]) -> FakeStorage:
    return FakeStorage(sample_tasks)


@pytest.fixture()
def todo(storage: FakeStorage) -> TodoList:
    t = TodoList(storage)
    t.load()
    return t
