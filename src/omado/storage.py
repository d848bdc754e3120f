"""File I/O for omado task lists."""

import logging
import os
from typing import List, Optional, Tuple

from .models import DONE_MARK, PENDING_MARK, Task

logger = logging.getLogger(__name__)


def parse_task_text(text: str) -> Tuple[str, Optional[str]]:
    """Split "project: text" on the first colon.

    Both sides must be non-empty after trimming; otherwise the input is
    returned verbatim with no project.
    """
    head, sep, tail = text.partition(":")
    if sep:
        project, body = head.strip(), tail.strip()
        if project and body:
            return body, project
    return text, None


def format_task_text(task: Task) -> str:
    """Inverse of parse_task_text: "project: text" or just the text."""
    if task.project is not None:
        return f"{task.project}: {task.text}"
    return task.text


def parse_line(line: str) -> Optional[Task]:
    """Parse one stored line, or return None if it is not a task line."""
    line = line.strip()
    if line.startswith(PENDING_MARK):
        done = False
    elif line.startswith(DONE_MARK):
        done = True
    else:
        return None
    text, project = parse_task_text(line[len(PENDING_MARK):])
    return Task(text=text, done=done, project=project)


def format_line(task: Task) -> str:
    mark = "[x]" if task.done else "[ ]"
    return f"{mark} {format_task_text(task)}"


def parse_lines(content: str) -> List[Task]:
    tasks: List[Task] = []
    for line in content.splitlines():
        task = parse_line(line)
        if task is not None:
            tasks.append(task)
    return tasks


def read_file(path: str) -> List[Task]:
    """Load tasks from path.

    Unrecognized lines are skipped. A file that cannot be read (missing,
    permissions, bad encoding) yields an empty list.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return []
    return parse_lines(content)


def write_file(path: str, tasks: List[Task]) -> None:
    """Rewrite the file from in-memory state. Errors propagate."""
    with open(path, "w", encoding="utf-8") as f:
        for t in tasks:
            f.write(format_line(t) + "\n")


class TaskFile:
    """Backing store for a TodoList: a plain text file, best-effort writes."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[Task]:
        return read_file(self.path)

    def save(self, tasks: List[Task]) -> None:
        try:
            write_file(self.path, tasks)
        except OSError as e:
            # Non-fatal; the next mutation tries again
            logger.warning("Could not save %s: %s", self.path, e)

    def __repr__(self) -> str:
        return f"TaskFile({self.path!r})"


def append_task(path: str, raw_text: str) -> Task:
    """Append one pending task parsed from raw_text and rewrite the file.

    Used by the `add` command; a write failure raises OSError.
    """
    tasks = read_file(path)
    text, project = parse_task_text(raw_text.strip())
    task = Task(text=text, done=False, project=project)
    tasks.append(task)
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    write_file(path, tasks)
    logger.info("Appended task to %s", path)
    return task
