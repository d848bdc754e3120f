# tests/test_core.py

from __future__ import annotations

from omado.core import TodoList
from omado.models import ProjectScope, StatusFilter, Task

from .fakes import FakeStorage


def texts(todo: TodoList) -> list[str]:
    return [t.text for _, t in todo.filtered_view()]


def test_load_clamps_selection(storage: FakeStorage) -> None:
    todo = TodoList(storage)
    todo.selected = 10
    todo.load()
    assert todo.selected == len(storage.tasks) - 1


def test_filtered_view_keeps_real_indices(todo: TodoList) -> None:
    todo.status_filter = StatusFilter.ACTIVE
    assert [i for i, _ in todo.filtered_view()] == [0, 2, 3]


def test_filter_composition() -> None:
    a = Task("A", done=False, project="x")
    b = Task("B", done=True, project="x")
    c = Task("C", done=False, project=None)
    todo = TodoList(FakeStorage([a, b, c]))
    todo.load()
    todo.status_filter = StatusFilter.ACTIVE
    todo.project_filter = "x"
    assert texts(todo) == ["A"]

    todo.project_filter = ProjectScope.NO_PROJECT
    assert texts(todo) == ["C"]

    todo.status_filter = StatusFilter.DONE
    todo.project_filter = ProjectScope.ALL
    assert texts(todo) == ["B"]


def test_search_matches_text_and_project_case_insensitively(todo: TodoList) -> None:
    todo.set_search("MILK")
    assert texts(todo) == ["buy milk"]
    todo.set_search("Wor")
    assert texts(todo) == ["fix bug", "ship release"]
    todo.set_search("zzz")
    assert texts(todo) == []


def test_selection_clamped_when_view_shrinks(todo: TodoList) -> None:
    todo.status_filter = StatusFilter.ACTIVE
    todo.go_bottom()
    assert todo.selected == 2
    # toggling hides the selected task from the Active view
    todo.toggle()
    assert len(todo.filtered_view()) == 2
    assert todo.selected == 1

    todo.set_search("milk")
    todo.clamp_selection()
    assert todo.selected == 0


def test_selection_clamped_from_two_to_zero() -> None:
    todo = TodoList(FakeStorage([Task("a"), Task("b"), Task("c", project="p")]))
    todo.load()
    todo.go_bottom()
    assert todo.selected == 2
    todo.project_filter = "p"
    todo.clamp_selection()
    assert len(todo.filtered_view()) == 1
    assert todo.selected == 0


def test_movement_is_clamped(todo: TodoList) -> None:
    todo.move_up()
    assert todo.selected == 0
    for _ in range(10):
        todo.move_down()
    assert todo.selected == 3
    todo.go_top()
    assert todo.selected == 0


def test_movement_on_empty_view_is_noop() -> None:
    todo = TodoList(FakeStorage())
    todo.load()
    todo.move_down()
    todo.go_bottom()
    todo.move_up()
    assert todo.selected == 0


def test_cycle_status_filter(todo: TodoList) -> None:
    todo.selected = 2
    seen = []
    for _ in range(3):
        todo.cycle_status_filter()
        seen.append(todo.status_filter)
        assert todo.selected == 0
    assert seen == [StatusFilter.ACTIVE, StatusFilter.DONE, StatusFilter.ALL]


def test_cycle_project_filter(todo: TodoList) -> None:
    seen = []
    for _ in range(4):
        todo.cycle_project_filter()
        seen.append(todo.project_filter)
    assert seen == [ProjectScope.NO_PROJECT, "home", "work", ProjectScope.ALL]


def test_cycle_project_filter_without_projects() -> None:
    todo = TodoList(FakeStorage([Task("plain")]))
    todo.load()
    todo.cycle_project_filter()
    assert todo.project_filter is ProjectScope.NO_PROJECT
    todo.cycle_project_filter()
    assert todo.project_filter is ProjectScope.ALL


def test_cycle_project_filter_from_vanished_project(todo: TodoList) -> None:
    todo.project_filter = "gone"
    todo.cycle_project_filter()
    assert todo.project_filter is ProjectScope.ALL


def test_clear_all_filters(todo: TodoList) -> None:
    todo.status_filter = StatusFilter.DONE
    todo.project_filter = "work"
    todo.search = "ship"
    todo.selected = 3
    todo.clear_all_filters()
    assert todo.status_filter is StatusFilter.ALL
    assert todo.project_filter is ProjectScope.ALL
    assert todo.search == ""
    assert todo.selected == 0


def test_commit_new_task_appends_and_saves(todo: TodoList, storage: FakeStorage) -> None:
    todo.begin_add()
    task = todo.commit_edit("errands: post letter")
    assert task == Task("post letter", done=False, project="errands")
    assert todo.tasks[-1] is task
    assert todo.edit is None
    assert storage.tasks[-1] == Task("post letter", project="errands")


def test_begin_add_seeds_project_filter(todo: TodoList) -> None:
    assert todo.begin_add().text == ""
    todo.project_filter = "work"
    buf = todo.begin_add()
    assert buf.text == "work: "
    assert buf.index == len(todo.tasks)


def test_commit_blank_discards(todo: TodoList, storage: FakeStorage) -> None:
    todo.begin_add()
    assert todo.commit_edit("   ") is None
    assert len(todo.tasks) == 4
    assert storage.saves == []
    assert todo.edit is None


def test_edit_overwrites_in_place_and_keeps_done(todo: TodoList, storage: FakeStorage) -> None:
    todo.selected = 1
    buf = todo.begin_edit()
    assert buf is not None
    assert buf.index == 1
    assert buf.text == "work: ship release"
    task = todo.commit_edit("ship v2")
    assert task is todo.tasks[1]
    assert todo.tasks[1] == Task("ship v2", done=True, project=None)
    assert len(storage.saves) == 1


def test_edit_uses_filtered_position(todo: TodoList) -> None:
    todo.set_project_filter("home")
    buf = todo.begin_edit()
    assert buf is not None
    assert buf.index == 3


def test_cancel_edit(todo: TodoList, storage: FakeStorage) -> None:
    todo.begin_edit()
    todo.cancel_edit()
    assert todo.edit is None
    assert todo.commit_edit("ignored") is None
    assert storage.saves == []


def test_begin_edit_on_empty_view() -> None:
    todo = TodoList(FakeStorage())
    todo.load()
    assert todo.begin_edit() is None
    assert todo.edit is None


def test_toggle_flips_and_saves(todo: TodoList, storage: FakeStorage) -> None:
    todo.selected = 2
    task = todo.toggle()
    assert task is not None and task.done
    assert storage.tasks[2].done
    todo.toggle()
    assert not storage.tasks[2].done
    assert len(storage.saves) == 2


def test_single_delete_never_removes(todo: TodoList, storage: FakeStorage) -> None:
    assert todo.delete() is None
    assert todo.delete_armed
    assert len(todo.tasks) == 4
    assert storage.saves == []


def test_double_delete_removes_exactly_one(todo: TodoList, storage: FakeStorage) -> None:
    todo.selected = 1
    todo.delete()
    removed = todo.delete()
    assert removed == Task("ship release", done=True, project="work")
    assert [t.text for t in todo.tasks] == ["fix bug", "buy milk", "call mom"]
    assert not todo.delete_armed
    assert storage.tasks == todo.tasks


def test_intervening_command_disarms_delete(todo: TodoList) -> None:
    todo.delete()
    todo.move_down()
    assert not todo.delete_armed
    todo.delete()
    assert len(todo.tasks) == 4


def test_explicit_disarm(todo: TodoList) -> None:
    todo.delete()
    todo.disarm_delete()
    todo.delete()
    assert len(todo.tasks) == 4


def test_reload_disarms_delete(todo: TodoList) -> None:
    todo.delete()
    todo.load()
    assert not todo.delete_armed
    todo.delete()
    assert len(todo.tasks) == 4


def test_delete_last_item_decrements_selection(todo: TodoList) -> None:
    todo.go_bottom()
    todo.delete()
    todo.delete()
    assert todo.selected == 2
    assert [t.text for t in todo.tasks] == ["fix bug", "ship release", "buy milk"]


def test_delete_within_filter_removes_real_task(todo: TodoList) -> None:
    todo.set_project_filter(ProjectScope.NO_PROJECT)
    todo.delete()
    todo.delete()
    assert "buy milk" not in [t.text for t in todo.tasks]
    assert todo.filtered_view() == []
    assert todo.selected == 0


def test_projects_and_counts(todo: TodoList) -> None:
    assert todo.projects() == ["home", "work"]
    assert todo.project_counts("work") == (1, 2)
    assert todo.project_counts(None) == (1, 1)
    assert todo.project_counts("missing") == (0, 0)


def test_palette_options(todo: TodoList) -> None:
    opts = todo.palette_options()
    assert [(o.label, o.filter, o.open_count) for o in opts] == [
        ("All", ProjectScope.ALL, 3),
        ("No project", ProjectScope.NO_PROJECT, 1),
        ("home", "home", 1),
        ("work", "work", 1),
    ]
    assert [o.label for o in todo.palette_options("O")] == ["No project", "home", "work"]
    assert [o.label for o in todo.palette_options("wor")] == ["work"]
