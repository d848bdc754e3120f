"""omado curses-based terminal user interface."""

import curses
import logging
from typing import List, Optional, Tuple, Union

from .core import TodoList
from .models import (
    StatusFilter,
    project_filter_name,
    theme_config_path,
)
from .storage import TaskFile
from .theme import (
    Theme,
    ThemeResolver,
    effective_font_size,
    project_color_index,
    project_colors,
    rgb_to_xterm256,
)

logger = logging.getLogger(__name__)

HELP_TEXT = [
    "omado - Keymap",
    "Movement:  up/k up   down/j down   g top   G bottom",
    "Actions:   a add   Enter edit   x toggle done   d d delete",
    "Filters:   f status   p next project   P project palette",
    "           S or / search   Esc clear search   c clear all filters",
    "System:    R reload file   ? help   q quit",
    "",
    "Prompts: Enter submits, ESC cancels",
    "'project: text' files a task under a project.",
]

FOOTER = "j/k: Move | Enter: Edit | a: Add | x: Toggle | dd: Delete | f: Filter | p/P: Project | S: Search | c: Clear"

# Color pair ids
PAIR_NORMAL = 1
PAIR_ACCENT = 2
PAIR_BORDER = 3
PAIR_DONE = 4
PAIR_WARN = 5
PAIR_PROJECT_BASE = 10

WARN_RGB = (255, 100, 100)
BASIC_CYCLE = [
    curses.COLOR_BLUE,
    curses.COLOR_RED,
    curses.COLOR_GREEN,
    curses.COLOR_YELLOW,
    curses.COLOR_MAGENTA,
    curses.COLOR_CYAN,
]
POLL_MS = 500


class LineEditor:
    """Single-line edit buffer with a cursor and a horizontal scroll offset."""

    def __init__(self, text: str = ""):
        self.text = text
        self.cursor = len(text)
        self.offset = 0

    def handle(self, key: Union[str, int]) -> None:
        """Apply one key from get_wch(): a character or a KEY_* code."""
        if key in (curses.KEY_BACKSPACE, "\x7f", "\b", 127, 8):
            if self.cursor > 0:
                self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
                self.cursor -= 1
        elif key == curses.KEY_DC:
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]
        elif key == curses.KEY_LEFT:
            self.cursor = max(0, self.cursor - 1)
        elif key == curses.KEY_RIGHT:
            self.cursor = min(len(self.text), self.cursor + 1)
        elif key in (curses.KEY_HOME, "\x01"):
            self.cursor = 0
        elif key in (curses.KEY_END, "\x05"):
            self.cursor = len(self.text)
        elif isinstance(key, str) and key.isprintable():
            self.text = self.text[: self.cursor] + key + self.text[self.cursor :]
            self.cursor += len(key)

    def view(self, width: int) -> Tuple[str, int]:
        """Return the visible slice for a field `width` columns wide and the cursor column in it."""
        width = max(1, width)
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + width:
            self.offset = self.cursor - width + 1
        return self.text[self.offset : self.offset + width], self.cursor - self.offset


class TUI:
    """Curses TUI over a single omado task file."""

    def __init__(self, stdscr, path: str, resolver: ThemeResolver):
        self.stdscr = stdscr
        self.path = path
        self.resolver = resolver
        self.todo = TodoList(TaskFile(path))
        self.todo.load()
        self.scroll = 0
        self.status = "Press ? for help. a to add; x to toggle; dd to delete."
        curses.curs_set(0)
        self.stdscr.keypad(True)
        self.stdscr.timeout(POLL_MS)
        self.height, self.width = self.stdscr.getmaxyx()

        self.has_colors = curses.has_colors()
        self.default_fg, self.default_bg = -1, -1
        if self.has_colors:
            curses.start_color()
            try:
                curses.use_default_colors()
            except curses.error:
                self.default_fg, self.default_bg = curses.COLOR_WHITE, curses.COLOR_BLACK
        self.apply_theme(self.resolver.theme)

    # -------------------- colors --------------------
    def apply_theme(self, theme: Theme) -> None:
        """(Re)build color pairs from the theme."""
        self.theme = theme
        n_projects = len(project_colors(theme))
        if not self.has_colors:
            self.COL_NORMAL = curses.A_NORMAL
            self.COL_ACCENT = curses.A_BOLD
            self.COL_BORDER = curses.A_NORMAL
            self.COL_DONE = curses.A_DIM
            self.COL_WARN = curses.A_BOLD
            self.project_attrs: List[int] = [curses.A_BOLD] * n_projects
            return

        if curses.COLORS >= 256:
            bg = rgb_to_xterm256(theme.background)
            fgs = {
                PAIR_NORMAL: rgb_to_xterm256(theme.foreground),
                PAIR_ACCENT: rgb_to_xterm256(theme.accent),
                PAIR_BORDER: rgb_to_xterm256(theme.border),
                PAIR_DONE: rgb_to_xterm256(theme.done_color),
                PAIR_WARN: rgb_to_xterm256(WARN_RGB),
            }
            project_fgs = [rgb_to_xterm256(c) for c in project_colors(theme)]
        else:
            # 8-color terminals: keep the terminal background, approximate hues
            bg = self.default_bg
            fgs = {
                PAIR_NORMAL: self.default_fg,
                PAIR_ACCENT: curses.COLOR_BLUE,
                PAIR_BORDER: curses.COLOR_WHITE,
                PAIR_DONE: curses.COLOR_CYAN,
                PAIR_WARN: curses.COLOR_RED,
            }
            project_fgs = [BASIC_CYCLE[i % len(BASIC_CYCLE)] for i in range(n_projects)]

        for pid, fg in fgs.items():
            curses.init_pair(pid, fg, bg)
        for i, fg in enumerate(project_fgs):
            curses.init_pair(PAIR_PROJECT_BASE + i, fg, bg)

        self.COL_NORMAL = curses.color_pair(PAIR_NORMAL)
        self.COL_ACCENT = curses.color_pair(PAIR_ACCENT) | curses.A_BOLD
        self.COL_BORDER = curses.color_pair(PAIR_BORDER)
        self.COL_DONE = curses.color_pair(PAIR_DONE)
        self.COL_WARN = curses.color_pair(PAIR_WARN)
        self.project_attrs = [
            curses.color_pair(PAIR_PROJECT_BASE + i) | curses.A_BOLD for i in range(n_projects)
        ]
        self.stdscr.bkgd(" ", self.COL_NORMAL)

    def project_attr(self, project: str) -> int:
        return self.project_attrs[project_color_index(self.theme, project)]

    # -------------------- drawing --------------------
    def put(self, y: int, x: int, text: str, attrs: int = curses.A_NORMAL) -> int:
        """addnstr clipped to the window; returns the next x."""
        room = self.width - 1 - x
        if room <= 0 or y >= self.height:
            return x
        try:
            self.stdscr.addnstr(y, x, text, room, attrs)
        except curses.error:
            pass
        return x + min(len(text), room)

    def draw(self):
        """Render header, task list, footer and status line."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()
        todo = self.todo

        self.put(0, 0, "OMADO", self.COL_ACCENT)
        info = (
            f"Filter: {todo.status_filter.value} | "
            f"Project: {project_filter_name(todo.project_filter)}"
        )
        if todo.search:
            info += f" | /{todo.search}"
        self.put(0, max(6, self.width - 1 - len(info)), info, self.COL_DONE)
        self.stdscr.hline(1, 0, curses.ACS_HLINE | self.COL_BORDER, self.width)

        top = 2
        body_h = self.height - top - 3
        if body_h < 1:
            self.stdscr.refresh()
            return

        view = todo.filtered_view()
        if not view:
            if todo.search:
                msg = "No matching todos found."
            elif todo.status_filter is StatusFilter.ACTIVE:
                msg = "No active todos."
            elif todo.status_filter is StatusFilter.DONE:
                msg = "No completed todos."
            else:
                msg = "No todos yet. Press 'a' to add one!"
            self.put(top + body_h // 3, max(0, (self.width - len(msg)) // 2), msg, self.COL_DONE)
        else:
            if todo.selected < self.scroll:
                self.scroll = todo.selected
            elif todo.selected >= self.scroll + body_h:
                self.scroll = todo.selected - body_h + 1
            self.scroll = max(0, min(self.scroll, len(view) - 1))

            for pos in range(self.scroll, min(self.scroll + body_h, len(view))):
                _, t = view[pos]
                y = top + (pos - self.scroll)
                sel = curses.A_REVERSE if pos == todo.selected else 0
                x = self.put(y, 0, "[x] " if t.done else "[ ] ", (self.COL_ACCENT if t.done else self.COL_BORDER) | sel)
                if t.project is not None:
                    x = self.put(y, x, f"{t.project}: ", self.project_attr(t.project) | sel)
                self.put(y, x, t.text, (self.COL_DONE if t.done else self.COL_NORMAL) | sel)

        self.stdscr.hline(self.height - 3, 0, curses.ACS_HLINE | self.COL_BORDER, self.width)
        self.put(self.height - 2, 0, FOOTER, self.COL_NORMAL)
        if todo.delete_armed:
            self.put(self.height - 1, 0, "Press 'd' again to delete selected item", self.COL_WARN)
        else:
            self.put(self.height - 1, 0, self.status, self.COL_DONE)

        self.stdscr.refresh()

    def prompt(self, prompt: str, initial: str = "") -> Optional[str]:
        """Inline text input (Enter submits, ESC cancels).

        The field scrolls horizontally, so text of any length can be edited.
        """
        curses.curs_set(1)
        win = curses.newwin(3, self.width, self.height - 4, 0)
        editor = LineEditor(initial)
        field_x = len(prompt) + 3
        field_w = max(1, self.width - field_x - 2)
        self.stdscr.timeout(-1)
        try:
            while True:
                win.erase()
                win.border()
                win.addnstr(0, 2, " Input (Enter submits, ESC cancels) ", self.width - 4, curses.A_DIM)
                win.addnstr(1, 2, prompt, self.width - 4)
                visible, cx = editor.view(field_w)
                win.addnstr(1, field_x, visible, field_w)
                win.move(1, field_x + cx)
                win.refresh()

                key = self.stdscr.get_wch()
                if key in ("\x1b", 27):
                    return None
                if key in ("\n", "\r", 10, 13, curses.KEY_ENTER):
                    return editor.text.strip()
                editor.handle(key)
        finally:
            self.stdscr.timeout(POLL_MS)
            curses.curs_set(0)

    def message(self, text: str):
        self.status = text

    # -------------------- actions --------------------
    def reload(self):
        """Reload tasks from disk."""
        self.todo.load()
        self.message("Reloaded from disk.")

    def add_task(self):
        buf = self.todo.begin_add()
        s = self.prompt("New:", buf.text)
        if s is None:
            self.todo.cancel_edit()
            self.message("Add cancelled.")
            return
        task = self.todo.commit_edit(s)
        self.message(f"Added: {task.text}" if task else "Add cancelled.")

    def edit_task(self):
        buf = self.todo.begin_edit()
        if buf is None:
            return
        s = self.prompt("Edit:", buf.text)
        if s is None:
            self.todo.cancel_edit()
            self.message("Edit cancelled.")
            return
        task = self.todo.commit_edit(s)
        self.message("Edited." if task else "Edit discarded.")

    def toggle_task(self):
        task = self.todo.toggle()
        if task is not None:
            self.message(f"{'Done' if task.done else 'Reopened'}: {task.text}")

    def delete_task(self):
        removed = self.todo.delete()
        if removed is not None:
            self.message(f"Deleted: {removed.text}")

    def search_mode(self):
        s = self.prompt("Search:", self.todo.search)
        if s is None:
            self.message("Search cleared." if self.todo.search else "Search cancelled.")
            self.todo.clear_search()
            return
        self.todo.set_search(s)
        self.message(f"Search: /{s}" if s else "Search cleared.")

    def project_palette(self):
        """Pick a project filter; type to narrow, Enter selects, ESC cancels."""
        self.todo.disarm_delete()
        query = ""
        cursor = 0
        self.stdscr.timeout(-1)
        try:
            while True:
                options = self.todo.palette_options(query)
                cursor = max(0, min(cursor, len(options) - 1))

                win_w = min(max(40, max((len(o.label) for o in options), default=0) + 16), self.width - 2)
                list_h = max(1, min(len(options), self.height - 8))
                win_h = list_h + 5
                y0 = max(0, (self.height - win_h) // 2)
                x0 = max(0, (self.width - win_w) // 2)
                win = curses.newwin(win_h, win_w, y0, x0)
                win.bkgd(" ", self.COL_NORMAL)
                win.border()
                win.addnstr(0, 2, " Project Palette ", win_w - 4, self.COL_ACCENT)
                win.addnstr(1, 2, f"> {query}", win_w - 4)

                scroll = max(0, cursor - list_h + 1)
                for i, opt in enumerate(options[scroll : scroll + list_h]):
                    idx = scroll + i
                    count = f"{opt.open_count} open"
                    label = ("> " if idx == cursor else "  ") + opt.label
                    line = label[: win_w - 6 - len(count)].ljust(win_w - 5 - len(count)) + count
                    attrs = curses.A_REVERSE if idx == cursor else curses.A_NORMAL
                    win.addnstr(2 + i, 2, line, win_w - 4, attrs)
                win.addnstr(win_h - 2, 2, "up/down: Move | Enter: Select | Esc: Cancel", win_w - 4, self.COL_DONE)
                win.refresh()

                ch = self.stdscr.getch()
                if ch == 27:
                    return
                if ch in (10, 13, curses.KEY_ENTER):
                    if options:
                        self.todo.set_project_filter(options[cursor].filter)
                        self.message(f"Project: {options[cursor].label}")
                    return
                if ch == curses.KEY_UP:
                    cursor = max(0, cursor - 1)
                elif ch == curses.KEY_DOWN:
                    cursor = min(len(options) - 1, cursor + 1)
                elif ch in (curses.KEY_BACKSPACE, 127, 8):
                    query = query[:-1]
                    cursor = 0
                elif 32 <= ch < 127:
                    query += chr(ch)
                    cursor = 0
                self.draw()
        finally:
            self.stdscr.timeout(POLL_MS)

    def help_popup(self):
        lines = HELP_TEXT + [
            "",
            f"Theme: {self.resolver.config_path or '(built-in)'}",
            f"Font: {self.theme.font_family or 'terminal'} {effective_font_size(self.theme):g}pt",
            f"File: {self.path}",
        ]
        h, w = self.height, self.width
        win_h = min(len(lines) + 2, h - 2)
        win_w = min(max(len(line) for line in lines) + 4, w - 2)
        win = curses.newwin(win_h, win_w, (h - win_h) // 2, (w - win_w) // 2)
        win.bkgd(" ", self.COL_NORMAL)
        win.border()
        for i, line in enumerate(lines[: win_h - 2], start=1):
            win.addnstr(i, 2, line, win_w - 4)
        win.addnstr(win_h - 1, 2, "Press any key...", win_w - 4, curses.A_DIM)
        win.refresh()
        win.getch()

    def tick(self) -> None:
        """Periodic work between keystrokes."""
        if self.resolver.maybe_reload():
            self.apply_theme(self.resolver.theme)

    def run(self):
        """Main event loop."""
        todo = self.todo
        while True:
            self.tick()
            self.draw()
            ch = self.stdscr.getch()

            if ch == -1 or ch == curses.KEY_RESIZE:
                continue
            elif ch == ord("q"):
                break
            elif ch in (curses.KEY_DOWN, ord("j")):
                todo.move_down()
            elif ch in (curses.KEY_UP, ord("k")):
                todo.move_up()
            elif ch == ord("g"):
                todo.go_top()
            elif ch == ord("G"):
                todo.go_bottom()
            elif ch in (10, 13, curses.KEY_ENTER):
                self.edit_task()
            elif ch == ord("a"):
                self.add_task()
            elif ch == ord("x"):
                self.toggle_task()
            elif ch == ord("d"):
                self.delete_task()
            elif ch == ord("f"):
                todo.cycle_status_filter()
            elif ch == ord("p"):
                todo.cycle_project_filter()
            elif ch == ord("P"):
                self.project_palette()
            elif ch in (ord("S"), ord("/")):
                self.search_mode()
            elif ch == ord("c"):
                todo.clear_all_filters()
                self.message("Filters cleared.")
            elif ch == 27:
                todo.clear_search()
            elif ch == ord("R"):
                self.reload()
            elif ch == ord("?"):
                todo.disarm_delete()
                self.help_popup()
            else:
                todo.disarm_delete()


def start_curses(path: str, resolver: ThemeResolver):
    """Initialize curses and run TUI."""

    def _main(stdscr):
        tui = TUI(stdscr, path, resolver)
        tui.run()

    curses.wrapper(_main)


def main(path: str) -> None:
    """TUI entry point."""
    resolver = ThemeResolver(theme_config_path())
    logger.debug("Starting TUI on %s (theme %s)", path, resolver.config_path)
    start_curses(path, resolver)
