"""Data models and constants for omado."""

import enum
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Union

APP_NAME = "omado"
TASK_FILE = "todo.txt"

PENDING_MARK = "[ ] "
DONE_MARK = "[x] "


@dataclass
class Task:
    """A single to-do item; identified only by its position in the list."""

    text: str
    done: bool = False
    project: Optional[str] = None


class StatusFilter(enum.Enum):
    ALL = "All"
    ACTIVE = "Active"
    DONE = "Done"

    def next(self) -> "StatusFilter":
        """All -> Active -> Done -> All."""
        order = list(StatusFilter)
        return order[(order.index(self) + 1) % len(order)]

    def matches(self, task: Task) -> bool:
        if self is StatusFilter.ACTIVE:
            return not task.done
        if self is StatusFilter.DONE:
            return task.done
        return True


class ProjectScope(enum.Enum):
    ALL = "All"
    NO_PROJECT = "No project"


# A project filter is either a scope or a specific project name.
ProjectFilter = Union[ProjectScope, str]


def project_filter_name(pf: ProjectFilter) -> str:
    return pf.value if isinstance(pf, ProjectScope) else pf


def project_filter_matches(pf: ProjectFilter, task: Task) -> bool:
    if pf is ProjectScope.ALL:
        return True
    if pf is ProjectScope.NO_PROJECT:
        return task.project is None
    return task.project == pf


def data_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return $XDG_DATA_HOME/omado, falling back to ~/.local/share/omado."""
    env = os.environ if environ is None else environ
    base = env.get("XDG_DATA_HOME")
    if not base:
        base = os.path.join(env.get("HOME") or ".", ".local", "share")
    return os.path.join(base, APP_NAME)


def default_task_path(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the task file path, creating its directory when possible.

    Falls back to ./todo.txt if the data directory cannot be created.
    """
    directory = data_dir(environ)
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError:
        directory = "."
    return os.path.join(directory, TASK_FILE)


def theme_config_path(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the conventional Alacritty config path (it may not exist)."""
    env = os.environ if environ is None else environ
    base = env.get("XDG_CONFIG_HOME")
    if not base:
        home = env.get("HOME")
        if not home:
            return None
        base = os.path.join(home, ".config")
    return os.path.join(base, "alacritty", "alacritty.toml")
