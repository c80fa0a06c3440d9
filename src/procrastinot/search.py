"""Visibility rules for filtered tree views.

A query marks its direct hits, expands them down into their subtrees, and
renders only the visible tasks that have no visible ancestor as top-level
entries. Two expansion policies exist:

- ``STRICT``: a hit under a done parent is dropped, and a done hit is shown
  without its subtree. Finished branches stay collapsed.
- ``LAX``: every hit is kept and always shows its whole subtree.
"""

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Callable, Iterable

from .models import Task, task_sort_key
from .tree import TaskForest

TaskPredicate = Callable[[Task], bool]


class SearchMode(enum.Enum):
    STRICT = "strict"
    LAX = "lax"


@dataclass(frozen=True, slots=True)
class TaskView:
    roots: list[Task]
    visible_ids: frozenset[int]

    @property
    def is_empty(self) -> bool:
        return not self.roots

    def is_visible(self, task: Task) -> bool:
        return task.task_id in self.visible_ids


def visible_ids(forest: TaskForest, criteria: TaskPredicate, mode: SearchMode) -> set[int]:
    visible: set[int] = set()
    for task in forest:
        if task.deleted or not criteria(task):
            continue
        if mode is SearchMode.STRICT:
            parent = forest.parent_of(task)
            if parent is not None and parent.done:
                continue
        visible.add(task.task_id)

        if mode is SearchMode.LAX or not task.done:
            visible.update(descendant.task_id for descendant in forest.descendants(task))
    return visible


def create_visibility_filter(
    forest: TaskForest,
    criteria: TaskPredicate,
    mode: SearchMode,
) -> TaskPredicate:
    ids = visible_ids(forest, criteria, mode)
    return lambda task: task.task_id in ids


def filter_roots(forest: TaskForest, ids: Iterable[int]) -> list[Task]:
    """Return visible tasks with no visible ancestor, in arena order."""
    id_set = set(ids)
    roots: list[Task] = []
    for task_id in forest.tasks:
        if task_id not in id_set:
            continue
        task = forest.tasks[task_id]
        if not any(ancestor.task_id in id_set for ancestor in forest.ancestors(task)):
            roots.append(task)
    return roots


def build_view(forest: TaskForest, criteria: TaskPredicate, mode: SearchMode) -> TaskView:
    ids = visible_ids(forest, criteria, mode)
    roots = sorted(filter_roots(forest, ids), key=task_sort_key)
    return TaskView(roots=roots, visible_ids=frozenset(ids))
