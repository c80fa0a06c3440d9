"""Near-duplicate detection over name and deadline."""

from __future__ import annotations

from typing import Iterable

from .models import Task


def is_duplicate(first: Task, second: Task) -> bool:
    """Same name, and the deadlines do not contradict each other.

    A missing deadline is compatible with any deadline.
    """
    if first.name != second.name:
        return False
    if first.deadline is None or second.deadline is None:
        return True
    return first.deadline == second.deadline


def find_duplicates(tasks: Iterable[Task]) -> list[int]:
    """Return sorted ids of every task that is part of a duplicate pair."""
    task_list = list(tasks)
    duplicate_ids: set[int] = set()
    for index, first in enumerate(task_list):
        for second in task_list[index + 1 :]:
            if is_duplicate(first, second):
                duplicate_ids.add(first.task_id)
                duplicate_ids.add(second.task_id)
    return sorted(duplicate_ids)
