from __future__ import annotations

import datetime as dt
import json

from rich.console import Console

from procrastinot import render
from procrastinot.search import SearchMode, build_view
from procrastinot.tree import TaskForest


def _everything(forest: TaskForest):
    return build_view(forest, lambda task: True, SearchMode.LAX)


def test_format_task_line_plain_task() -> None:
    forest = TaskForest()
    task = forest.create("Essay")
    assert render.format_task_line(task) == "- [ ] Essay"


def test_format_task_line_with_all_attributes() -> None:
    forest = TaskForest()
    task = forest.create("Essay", priority="HI", deadline=dt.date(2024, 1, 1))
    task.tags.update({"uni", "english"})
    task.done = True
    assert render.format_task_line(task, 2) == "    - [x] Essay [HI]: (english, uni) --> 2024-01-01"


def test_format_task_line_separator_only_with_tags_or_deadline() -> None:
    forest = TaskForest()
    task = forest.create("Essay", priority="LO")
    assert render.format_task_line(task) == "- [ ] Essay [LO]"
    task.deadline = dt.date(2024, 3, 9)
    assert render.format_task_line(task) == "- [ ] Essay [LO]: --> 2024-03-09"


def test_render_tree_plain_nests_and_sorts_siblings() -> None:
    forest = TaskForest()
    root = forest.create("root")
    low = forest.create("low", priority="LO")
    plain = forest.create("plain")
    high = forest.create("high", priority="HI")
    medium = forest.create("medium", priority="MD")
    grandchild = forest.create("grandchild")
    for child in (low, plain, high, medium):
        forest.assign_subtask(child, root)
    forest.assign_subtask(grandchild, high)

    output = render.render_tree_plain(forest, _everything(forest))
    assert output.splitlines() == [
        "- [ ] root",
        "  - [ ] high [HI]",
        "    - [ ] grandchild",
        "  - [ ] medium [MD]",
        "  - [ ] low [LO]",
        "  - [ ] plain",
    ]


def test_render_tree_plain_respects_indent_width() -> None:
    forest = TaskForest()
    parent = forest.create("parent")
    forest.assign_subtask(forest.create("child"), parent)
    output = render.render_tree_plain(forest, _everything(forest), indent_width=4)
    assert output.splitlines()[1] == "    - [ ] child"


def test_render_tree_plain_skips_invisible_and_deleted_children() -> None:
    forest = TaskForest()
    parent = forest.create("parent")
    done = forest.create("done")
    gone = forest.create("gone")
    forest.assign_subtask(done, parent)
    forest.assign_subtask(gone, parent)
    forest.toggle_done(done)
    forest.set_deleted(gone, True)

    view = build_view(forest, lambda task: task.name == "parent", SearchMode.STRICT)
    assert render.render_tree_plain(forest, view).splitlines() == [
        "- [ ] parent",
        "  - [x] done",
    ]


def test_render_tree_json_lists_tasks_in_tree_order() -> None:
    forest = TaskForest()
    parent = forest.create("parent", deadline=dt.date(2024, 5, 1))
    child = forest.create("child")
    sibling = forest.create("sibling", priority="HI")
    child.tags.add("b")
    forest.assign_subtask(child, parent)

    payload = json.loads(render.render_tree_json(forest, _everything(forest)))
    assert [(item["name"], item["depth"]) for item in payload] == [
        ("sibling", 0),
        ("parent", 0),
        ("child", 1),
    ]
    assert payload[1]["deadline"] == "2024-05-01"
    assert payload[2]["tags"] == ["b"]
    assert payload[2]["parent_id"] == parent.task_id
    assert sibling.task_id == payload[0]["task_id"]


def test_render_tree_json_empty_view_is_empty_array() -> None:
    forest = TaskForest()
    forest.create("a")
    view = build_view(forest, lambda task: False, SearchMode.LAX)
    assert json.loads(render.render_tree_json(forest, view)) == []


def test_deep_chain_renders_every_level() -> None:
    forest = TaskForest()
    tasks = [forest.create(f"t{index}") for index in range(1600)]
    for parent, child in zip(tasks, tasks[1:]):
        forest.assign_subtask(child, parent)

    lines = render.render_tree_plain(forest, _everything(forest), indent_width=1).splitlines()
    assert len(lines) == 1600
    assert lines[-1] == " " * 1599 + "- [ ] t1599"


def test_render_tree_rich_contains_task_names() -> None:
    forest = TaskForest()
    parent = forest.create("parent", priority="HI")
    forest.assign_subtask(forest.create("child"), parent)

    console = Console(record=True, width=80)
    console.print(render.render_tree_rich(forest, _everything(forest)))
    text = console.export_text()
    assert "parent" in text
    assert "[HI]" in text
    assert "child" in text
