"""omado - keyboard-driven todo list with Alacritty-derived colors."""

__version__ = "1.0.0"

from .models import Task, StatusFilter, ProjectScope
from .storage import read_file, write_file, parse_task_text, append_task
from .core import TodoList
from .theme import Theme, ThemeResolver, resolve_theme, project_color

__all__ = [
    "Task",
    "StatusFilter",
    "ProjectScope",
    "read_file",
    "write_file",
    "parse_task_text",
    "append_task",
    "TodoList",
    "Theme",
    "ThemeResolver",
    "resolve_theme",
    "project_color",
]
