"""Task registry: mutations and tree queries over one task forest."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import Callable

from . import duplicates
from .models import (
    DuplicateListError,
    Task,
    TaskInactiveError,
    TaskList,
    TaskNotFoundError,
)
from .search import SearchMode, TaskPredicate, TaskView, build_view
from .tree import TaskForest

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_DAYS = 7


class TaskRegistry:
    """Owns all tasks and lists of one session.

    Registries share no state, so several can coexist. ``lock`` is held by
    callers that need a command to be atomic with respect to other threads.
    """

    def __init__(self, *, restore_reorders_lists: bool = True) -> None:
        self.forest = TaskForest()
        self.lists: dict[str, TaskList] = {}
        self.restore_reorders_lists = restore_reorders_lists
        self.lock = threading.RLock()

    def get_task(self, task_id: int) -> Task:
        return self.forest.get(task_id)

    def get_list(self, name: str) -> TaskList:
        task_list = self.lists.get(name)
        if task_list is None:
            raise TaskNotFoundError(f'List "{name}" does not exist')
        return task_list

    def add_task(
        self,
        name: str,
        priority: str | None = None,
        deadline: dt.date | None = None,
    ) -> Task:
        task = self.forest.create(name, priority=priority, deadline=deadline)
        logger.debug("Added task #%d %s", task.task_id, name)
        return task

    def add_list(self, name: str) -> TaskList:
        if name in self.lists:
            raise DuplicateListError(f'List "{name}" already exists')
        task_list = TaskList(name=name)
        self.lists[name] = task_list
        logger.debug("Added list %s", name)
        return task_list

    def tag_task(self, task_id: int, tag: str) -> Task:
        task = self.get_task(task_id)
        self.forest.add_tag(task, tag)
        return task

    def tag_list(self, name: str, tag: str) -> TaskList:
        task_list = self.get_list(name)
        task_list.add_tag(tag)
        return task_list

    def assign_subtask(self, task_id: int, parent_id: int) -> Task:
        child = self.get_task(task_id)
        parent = self.get_task(parent_id)
        self.forest.assign_subtask(child, parent)
        logger.debug("Assigned task #%d under #%d", task_id, parent_id)
        return child

    def assign_to_list(self, task_id: int, list_name: str) -> TaskList:
        task = self.get_task(task_id)
        task_list = self.get_list(list_name)
        task_list.add_task(task.task_id)
        return task_list

    def toggle(self, task_id: int) -> tuple[Task, int]:
        task = self.get_task(task_id)
        affected = self.forest.toggle_done(task)
        logger.debug("Toggled task #%d to done=%s (%d affected)", task_id, task.done, affected)
        return task, affected

    def change_deadline(self, task_id: int, deadline: dt.date | None) -> Task:
        task = self.get_task(task_id)
        self.forest.set_deadline(task, deadline)
        return task

    def change_priority(self, task_id: int, priority: str | None) -> Task:
        task = self.get_task(task_id)
        self.forest.set_priority(task, priority)
        return task

    def delete_task(self, task_id: int) -> tuple[Task, int]:
        task = self.get_task(task_id)
        if task.deleted:
            raise TaskInactiveError(f"Task #{task_id} is already deleted")
        affected = self.forest.set_deleted(task, True)
        logger.debug("Deleted task #%d (%d affected)", task_id, affected)
        return task, affected

    def restore_task(self, task_id: int) -> tuple[Task, int]:
        task = self.get_task(task_id)
        affected = self.forest.restore(task)
        if self.restore_reorders_lists:
            for task_list in self.lists.values():
                task_list.move_to_end(task_id)
        logger.debug(
            "Restored task #%d (%d affected, root=%s)", task_id, affected, task.is_root
        )
        return task, affected

    def _query(self, criteria: TaskPredicate, mode: SearchMode) -> TaskView:
        return build_view(self.forest, criteria, mode)

    def show(self, task_id: int | None = None) -> TaskView:
        if task_id is None:
            return self._query(lambda task: True, SearchMode.LAX)
        target = self.get_task(task_id)
        if target.deleted:
            raise TaskInactiveError(f"Task #{task_id} is deleted")
        return self._query(lambda task: task is target, SearchMode.LAX)

    def todo(self) -> TaskView:
        def _open_work(task: Task) -> bool:
            if not task.done:
                return True
            return any(not descendant.done for descendant in self.forest.descendants(task))

        return self._query(_open_work, SearchMode.LAX)

    def find(self, text: str) -> TaskView:
        return self._query(lambda task: task.name_contains(text), SearchMode.STRICT)

    def has_tag(self, tag: str) -> TaskView:
        return self._query(lambda task: task.has_tag(tag), SearchMode.LAX)

    def search_time(self, condition: Callable[[dt.date], bool]) -> TaskView:
        return self._query(
            lambda task: task.deadline is not None and condition(task.deadline),
            SearchMode.LAX,
        )

    def upcoming(self, start: dt.date, days: int = DEFAULT_UPCOMING_DAYS) -> TaskView:
        end = start + dt.timedelta(days=days - 1)
        return self.search_time(lambda deadline: start <= deadline <= end)

    def before(self, date: dt.date) -> TaskView:
        return self.search_time(lambda deadline: deadline <= date)

    def between(self, start: dt.date, end: dt.date) -> TaskView:
        return self.search_time(lambda deadline: start <= deadline <= end)

    def show_list(self, name: str) -> TaskView:
        task_list = self.get_list(name)
        return self._query(lambda task: task.task_id in task_list, SearchMode.LAX)

    def duplicates(self) -> list[int]:
        return duplicates.find_duplicates(self.forest)
