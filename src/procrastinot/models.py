"""Core task models, constants and error kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from typing import Any

VALID_PRIORITIES = ("HI", "MD", "LO")
PRIORITY_SORT = {"HI": 0, "MD": 1, "LO": 2}
UNRANKED_SORT = len(VALID_PRIORITIES)


def task_sort_key(task: Task) -> tuple[int, int]:
    """Order by priority rank (unranked last), then by id."""
    return PRIORITY_SORT.get(task.priority, UNRANKED_SORT), task.task_id


@dataclass(slots=True, eq=False)
class Task:
    task_id: int
    name: str
    priority: str | None = None
    deadline: dt.date | None = None
    tags: set[str] = field(default_factory=set)
    done: bool = False
    deleted: bool = False
    parent_id: int | None = None
    child_ids: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def name_contains(self, text: str) -> bool:
        return text in self.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "name": self.name,
            "priority": self.priority,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "tags": sorted(self.tags),
            "done": self.done,
            "deleted": self.deleted,
            "parent_id": self.parent_id,
        }


@dataclass(slots=True, eq=False)
class TaskList:
    """Named, ordered index of task ids. Holds references, not ownership."""

    name: str
    task_ids: list[int] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.task_ids

    def add_tag(self, tag: str) -> None:
        if tag in self.tags:
            raise DuplicateTagError(f'Tag "{tag}" already exists on list "{self.name}"')
        self.tags.add(tag)

    def add_task(self, task_id: int) -> None:
        if task_id in self.task_ids:
            raise AlreadyInListError(f'Task #{task_id} is already in list "{self.name}"')
        self.task_ids.append(task_id)

    def move_to_end(self, task_id: int) -> None:
        if task_id in self.task_ids:
            self.task_ids.remove(task_id)
            self.task_ids.append(task_id)


class TaskError(Exception):
    """Base error for task operations."""

    kind = "error"


class TaskValidationError(TaskError):
    """Raised when command input is malformed."""

    kind = "invalid_input"


class TaskNotFoundError(TaskError):
    """Raised when a task id or list name is unknown."""

    kind = "not_found"


class TaskInactiveError(TaskError):
    """Raised when a deleted task would be mutated."""

    kind = "inactive_task"


class TaskCycleError(TaskError):
    """Raised when re-parenting would make a task its own ancestor."""

    kind = "cycle_detected"


class TaskConflictError(TaskError):
    """Raised for collisions and redundant actions."""

    kind = "conflict"


class DuplicateTagError(TaskConflictError):
    kind = "duplicate_tag"


class DuplicateListError(TaskConflictError):
    kind = "duplicate_list"


class AlreadyInListError(TaskConflictError):
    kind = "already_in_list"


class AlreadyActiveError(TaskConflictError):
    kind = "already_active"
