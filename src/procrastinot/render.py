"""Renderers for filtered task trees."""

from __future__ import annotations

import json
from typing import Iterator

from .models import Task, task_sort_key
from .search import TaskView
from .tree import TaskForest

CHECKBOX_DONE = "- [x] "
CHECKBOX_TODO = "- [ ] "
DEADLINE_PREFIX = " --> "
DEFAULT_INDENT_WIDTH = 2


def _priority_style(priority: str | None) -> str:
    return {
        "HI": "bold red",
        "MD": "bold yellow",
        "LO": "cyan",
    }.get(priority or "", "white")


def _visible_children(forest: TaskForest, task: Task, view: TaskView) -> list[Task]:
    children = [
        child
        for child in forest.children_of(task)
        if not child.deleted and view.is_visible(child)
    ]
    return sorted(children, key=task_sort_key)


def walk_view(forest: TaskForest, view: TaskView) -> Iterator[tuple[Task, int]]:
    """Yield visible tasks depth-first with their depth, siblings in sort order."""
    stack = [(root, 0) for root in reversed(view.roots)]
    while stack:
        task, level = stack.pop()
        yield task, level
        children = _visible_children(forest, task, view)
        stack.extend((child, level + 1) for child in reversed(children))


def format_task_line(task: Task, level: int = 0, *, indent_width: int = DEFAULT_INDENT_WIDTH) -> str:
    parts = [" " * (indent_width * level), CHECKBOX_DONE if task.done else CHECKBOX_TODO, task.name]
    if task.priority:
        parts.append(f" [{task.priority}]")
    if task.tags or task.deadline:
        parts.append(":")
    if task.tags:
        parts.append(f" ({', '.join(sorted(task.tags))})")
    if task.deadline:
        parts.append(f"{DEADLINE_PREFIX}{task.deadline.isoformat()}")
    return "".join(parts)


def render_tree_plain(
    forest: TaskForest,
    view: TaskView,
    *,
    indent_width: int = DEFAULT_INDENT_WIDTH,
) -> str:
    lines = [
        format_task_line(task, level, indent_width=indent_width)
        for task, level in walk_view(forest, view)
    ]
    return "\n".join(lines)


def _task_label_rich(task: Task):
    from rich.text import Text

    label = Text()
    label.append("✓ " if task.done else "○ ", style="green" if task.done else "magenta")
    label.append(task.name, style="dim" if task.done else "bold")
    label.append(f" #{task.task_id}", style="dim")
    if task.priority:
        label.append(" ")
        label.append(f"[{task.priority}]", style=_priority_style(task.priority))
    if task.tags:
        label.append(f" ({', '.join(sorted(task.tags))})", style="blue")
    if task.deadline:
        label.append(f"{DEADLINE_PREFIX}{task.deadline.isoformat()}", style="yellow")
    return label


def render_tree_rich(forest: TaskForest, view: TaskView):
    from rich.console import Group
    from rich.tree import Tree

    trees = []
    for root in view.roots:
        tree = Tree(_task_label_rich(root), guide_style="bright_black")
        stack = [(tree, root)]
        while stack:
            node, task = stack.pop()
            for child in _visible_children(forest, task, view):
                stack.append((node.add(_task_label_rich(child)), child))
        trees.append(tree)
    return Group(*trees)


def render_tree_json(forest: TaskForest, view: TaskView) -> str:
    payload = []
    for task, level in walk_view(forest, view):
        item = task.to_dict()
        item["depth"] = level
        payload.append(item)
    return json.dumps(payload, indent=2)
