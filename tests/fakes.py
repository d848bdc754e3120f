# tests/fakes.py

from __future__ import annotations

import curses
from dataclasses import replace

from omado.models import Task


class FakeStorage:
    """
    In-memory TaskStorage for TodoList tests.

    Keeps copies of every save so tests can assert on what was persisted
    without touching the filesystem.
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks = [replace(t) for t in (tasks or [])]
        self.saves: list[list[Task]] = []

    def load(self) -> list[Task]:
        return [replace(t) for t in self.tasks]

    def save(self, tasks: list[Task]) -> None:
        self.tasks = [replace(t) for t in tasks]
        self.saves.append(self.tasks)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWindow:
    """
    Curses window stand-in that fails like curses does.

    Writing or moving past the right edge raises curses.error, so a test
    catches any drawing that ignores the window width.
    """

    def __init__(self, height: int, width: int) -> None:
        self.height = height
        self.width = width
        self.rows: dict[int, str] = {}
        self.cursor = (0, 0)

    def _check(self, y: int, x: int) -> None:
        if not (0 <= y < self.height and 0 <= x < self.width):
            raise curses.error("position outside window")

    def addnstr(self, y: int, x: int, text: str, n: int, attr: int = 0) -> None:
        self._check(y, x)
        text = text[:n]
        if x + len(text) > self.width:
            raise curses.error("addnstr() returned ERR")
        row = self.rows.get(y, "").ljust(x)
        self.rows[y] = row[:x] + text + row[x + len(text) :]

    def move(self, y: int, x: int) -> None:
        self._check(y, x)
        self.cursor = (y, x)

    def erase(self) -> None:
        self.rows.clear()

    def border(self) -> None:
        pass

    def refresh(self) -> None:
        pass


class FakeScreen:
    """stdscr stand-in replaying a fixed sequence of get_wch() keys."""

    def __init__(self, keys: list[str | int], height: int = 24, width: int = 80) -> None:
        self.keys = list(keys)
        self.height = height
        self.width = width
        self.timeouts: list[int] = []

    def get_wch(self) -> str | int:
        return self.keys.pop(0)

    def timeout(self, ms: int) -> None:
        self.timeouts.append(ms)

    def getmaxyx(self) -> tuple[int, int]:
        return self.height, self.width
