"""Task arena: id-indexed storage, tree integrity and cascading state changes."""

from __future__ import annotations

import datetime as dt
from typing import Iterator

from .models import (
    AlreadyActiveError,
    DuplicateTagError,
    Task,
    TaskCycleError,
    TaskInactiveError,
    TaskNotFoundError,
)


class TaskForest:
    """Owns every task. Parents and children refer to each other by id.

    Tasks are never removed; deletion is a flag on the task. A task without a
    parent is a root.
    """

    def __init__(self) -> None:
        self.tasks: dict[int, Task] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks.values())

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks

    def create(
        self,
        name: str,
        *,
        priority: str | None = None,
        deadline: dt.date | None = None,
    ) -> Task:
        task = Task(task_id=self._next_id, name=name, priority=priority, deadline=deadline)
        self._next_id += 1
        self.tasks[task.task_id] = task
        return task

    def get(self, task_id: int) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task #{task_id} does not exist")
        return task

    def parent_of(self, task: Task) -> Task | None:
        if task.parent_id is None:
            return None
        return self.tasks[task.parent_id]

    def children_of(self, task: Task) -> list[Task]:
        return [self.tasks[child_id] for child_id in task.child_ids]

    def ancestors(self, task: Task) -> Iterator[Task]:
        parent = self.parent_of(task)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)

    def descendants(self, task: Task, *, include_deleted: bool = False) -> Iterator[Task]:
        """Depth-first, pre-order. Deleted subtrees are skipped unless requested."""
        stack = list(reversed(self.children_of(task)))
        while stack:
            node = stack.pop()
            if node.deleted and not include_deleted:
                continue
            yield node
            stack.extend(reversed(self.children_of(node)))

    def is_ancestor(self, candidate: Task, task: Task) -> bool:
        return any(ancestor is candidate for ancestor in self.ancestors(task))

    def detach(self, task: Task) -> None:
        parent = self.parent_of(task)
        if parent is None:
            return
        parent.child_ids.remove(task.task_id)
        task.parent_id = None

    def assign_subtask(self, child: Task, parent: Task) -> None:
        if child is parent:
            raise TaskCycleError(f"Task #{child.task_id} cannot be its own subtask")
        if self.is_ancestor(child, parent):
            raise TaskCycleError(
                f"Task #{child.task_id} is an ancestor of task #{parent.task_id}"
            )
        for task in (child, parent):
            self._ensure_active(task)

        self.detach(child)
        parent.child_ids.append(child.task_id)
        child.parent_id = parent.task_id

    def toggle_done(self, task: Task) -> int:
        self._ensure_active(task)
        return self._set_done(task, not task.done)

    def set_deleted(self, task: Task, flag: bool) -> int:
        """Subtrees already in the target state are neither visited nor counted."""
        count = 0
        stack = [task]
        while stack:
            node = stack.pop()
            if node.deleted == flag:
                continue
            node.deleted = flag
            count += 1
            stack.extend(self.children_of(node))
        return count

    def restore(self, task: Task) -> int:
        if not task.deleted:
            raise AlreadyActiveError(f"Task #{task.task_id} is not deleted")
        count = self.set_deleted(task, False)

        parent = self.parent_of(task)
        if parent is None:
            return count
        if parent.deleted:
            self.detach(task)
        else:
            parent.child_ids.remove(task.task_id)
            parent.child_ids.append(task.task_id)
        return count

    def add_tag(self, task: Task, tag: str) -> None:
        if task.has_tag(tag):
            raise DuplicateTagError(f'Tag "{tag}" already exists on task #{task.task_id}')
        self._ensure_active(task)
        task.tags.add(tag)

    def set_deadline(self, task: Task, deadline: dt.date | None) -> None:
        self._ensure_active(task)
        task.deadline = deadline

    def set_priority(self, task: Task, priority: str | None) -> None:
        self._ensure_active(task)
        task.priority = priority

    def _set_done(self, task: Task, done: bool) -> int:
        count = 0
        stack = [task]
        while stack:
            node = stack.pop()
            if node.deleted:
                continue
            node.done = done
            count += 1
            stack.extend(self.children_of(node))
        return count

    @staticmethod
    def _ensure_active(task: Task) -> None:
        if task.deleted:
            raise TaskInactiveError(f"Task #{task.task_id} is deleted")
