"""Task list state: filters, selection, edit buffer and two-phase delete.

The list never holds on to (index, task) pairs from filtered_view() across
commands; deleting shifts indices, so every command recomputes the view.
"""

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Protocol, Tuple

from .models import (
    ProjectFilter,
    ProjectScope,
    StatusFilter,
    Task,
    project_filter_matches,
)
from .storage import format_task_text, parse_task_text

logger = logging.getLogger(__name__)


class TaskStorage(Protocol):
    def load(self) -> List[Task]: ...

    def save(self, tasks: List[Task]) -> None: ...


@dataclass
class EditBuffer:
    """In-progress text; index == len(tasks) means a new task."""

    index: int
    text: str


class PaletteOption(NamedTuple):
    label: str
    filter: ProjectFilter
    open_count: int


class TodoList:
    """Ordered tasks plus the view state the UI drives one command at a time."""

    def __init__(self, storage: TaskStorage):
        self.storage = storage
        self.tasks: List[Task] = []
        self.selected = 0
        self.status_filter = StatusFilter.ALL
        self.project_filter: ProjectFilter = ProjectScope.ALL
        self.search = ""
        self.edit: Optional[EditBuffer] = None
        self.delete_armed = False

    # -------------------- persistence --------------------
    def load(self) -> None:
        self.tasks = self.storage.load()
        self.disarm_delete()
        self.clamp_selection()
        logger.debug("Loaded %d tasks from %r", len(self.tasks), self.storage)

    def save(self) -> None:
        self.storage.save(self.tasks)

    # -------------------- queries --------------------
    def filtered_view(self) -> List[Tuple[int, Task]]:
        """(real index, task) pairs passing status, project and search filters."""
        needle = self.search.lower()
        out = []
        for i, t in enumerate(self.tasks):
            if not self.status_filter.matches(t):
                continue
            if not project_filter_matches(self.project_filter, t):
                continue
            if needle and needle not in t.text.lower() and not (
                t.project is not None and needle in t.project.lower()
            ):
                continue
            out.append((i, t))
        return out

    def selected_entry(self) -> Optional[Tuple[int, Task]]:
        view = self.filtered_view()
        if 0 <= self.selected < len(view):
            return view[self.selected]
        return None

    def projects(self) -> List[str]:
        """Distinct project names, sorted ascending."""
        return sorted({t.project for t in self.tasks if t.project is not None})

    def project_counts(self, project: Optional[str]) -> Tuple[int, int]:
        """Return (open, total) for a project, or for project-less tasks if None."""
        matching = [t for t in self.tasks if t.project == project]
        return sum(1 for t in matching if not t.done), len(matching)

    def palette_options(self, query: str = "") -> List[PaletteOption]:
        """Project filter choices for the palette, narrowed by query."""
        options = [
            PaletteOption(
                ProjectScope.ALL.value,
                ProjectScope.ALL,
                sum(1 for t in self.tasks if not t.done),
            ),
            PaletteOption(
                ProjectScope.NO_PROJECT.value,
                ProjectScope.NO_PROJECT,
                self.project_counts(None)[0],
            ),
        ]
        for name in self.projects():
            options.append(PaletteOption(name, name, self.project_counts(name)[0]))
        q = query.lower()
        return [o for o in options if q in o.label.lower()]

    # -------------------- selection --------------------
    def clamp_selection(self) -> None:
        n = len(self.filtered_view())
        self.selected = max(0, min(self.selected, n - 1))

    def move_down(self) -> None:
        self.disarm_delete()
        n = len(self.filtered_view())
        if n:
            self.selected = min(self.selected + 1, n - 1)

    def move_up(self) -> None:
        self.disarm_delete()
        if self.selected > 0:
            self.selected -= 1

    def go_top(self) -> None:
        self.disarm_delete()
        self.selected = 0

    def go_bottom(self) -> None:
        self.disarm_delete()
        n = len(self.filtered_view())
        if n:
            self.selected = n - 1

    # -------------------- filters --------------------
    def cycle_status_filter(self) -> None:
        self.disarm_delete()
        self.status_filter = self.status_filter.next()
        self.selected = 0

    def cycle_project_filter(self) -> None:
        """All -> No project -> each project (sorted) -> All."""
        self.disarm_delete()
        projects = self.projects()
        pf = self.project_filter
        if pf is ProjectScope.ALL:
            self.project_filter = ProjectScope.NO_PROJECT
        elif pf is ProjectScope.NO_PROJECT:
            self.project_filter = projects[0] if projects else ProjectScope.ALL
        elif pf in projects and projects.index(pf) + 1 < len(projects):
            self.project_filter = projects[projects.index(pf) + 1]
        else:
            self.project_filter = ProjectScope.ALL
        self.selected = 0

    def set_project_filter(self, pf: ProjectFilter) -> None:
        self.disarm_delete()
        self.project_filter = pf
        self.selected = 0

    def set_search(self, text: str) -> None:
        self.disarm_delete()
        self.search = text
        self.selected = 0

    def clear_search(self) -> None:
        self.set_search("")

    def clear_all_filters(self) -> None:
        self.disarm_delete()
        self.status_filter = StatusFilter.ALL
        self.project_filter = ProjectScope.ALL
        self.search = ""
        self.selected = 0

    # -------------------- editing --------------------
    def begin_edit(self) -> Optional[EditBuffer]:
        """Open the edit buffer on the selected task ("project: text")."""
        self.disarm_delete()
        entry = self.selected_entry()
        if entry is None:
            return None
        idx, task = entry
        self.edit = EditBuffer(idx, format_task_text(task))
        return self.edit

    def begin_add(self) -> EditBuffer:
        """Open the edit buffer for a new task, seeded with the project filter."""
        self.disarm_delete()
        pf = self.project_filter
        seed = f"{pf}: " if isinstance(pf, str) else ""
        self.edit = EditBuffer(len(self.tasks), seed)
        return self.edit

    def cancel_edit(self) -> None:
        self.disarm_delete()
        self.edit = None

    def commit_edit(self, raw_text: Optional[str] = None) -> Optional[Task]:
        """Apply the edit buffer; blank text discards it.

        Returns the created or modified task, or None if nothing changed.
        """
        self.disarm_delete()
        buf, self.edit = self.edit, None
        if buf is None:
            return None
        raw = buf.text if raw_text is None else raw_text
        if not raw.strip():
            return None
        text, project = parse_task_text(raw.strip())
        if buf.index < len(self.tasks):
            task = self.tasks[buf.index]
            task.text = text
            task.project = project
        elif buf.index == len(self.tasks):
            task = Task(text=text, done=False, project=project)
            self.tasks.append(task)
        else:
            logger.debug("Stale edit index %d dropped", buf.index)
            return None
        self.save()
        self.clamp_selection()
        return task

    # -------------------- mutations --------------------
    def toggle(self) -> Optional[Task]:
        self.disarm_delete()
        entry = self.selected_entry()
        if entry is None:
            return None
        task = self.tasks[entry[0]]
        task.done = not task.done
        self.save()
        self.clamp_selection()
        return task

    def delete(self) -> Optional[Task]:
        """First call arms; a second consecutive call removes the selection."""
        if not self.delete_armed:
            self.delete_armed = True
            return None
        self.delete_armed = False
        view = self.filtered_view()
        if not 0 <= self.selected < len(view):
            return None
        idx = view[self.selected][0]
        removed = self.tasks.pop(idx)
        if self.selected >= len(view) - 1 and self.selected > 0:
            self.selected -= 1
        self.save()
        self.clamp_selection()
        return removed

    def disarm_delete(self) -> None:
        self.delete_armed = False
