from __future__ import annotations

import datetime as dt

import pytest

from procrastinot.models import (
    AlreadyActiveError,
    DuplicateTagError,
    Task,
    TaskCycleError,
    TaskInactiveError,
    TaskNotFoundError,
)
from procrastinot.tree import TaskForest


def _forest(*names: str) -> tuple[TaskForest, list[Task]]:
    forest = TaskForest()
    return forest, [forest.create(name) for name in names]


def _chain(forest: TaskForest, tasks: list[Task]) -> None:
    for parent, child in zip(tasks, tasks[1:]):
        forest.assign_subtask(child, parent)


def _no_cycles(forest: TaskForest) -> bool:
    for task in forest:
        seen = {task.task_id}
        for ancestor in forest.ancestors(task):
            if ancestor.task_id in seen:
                return False
            seen.add(ancestor.task_id)
    return True


def test_ids_are_monotonic_per_forest() -> None:
    forest, tasks = _forest("a", "b", "c")
    assert [task.task_id for task in tasks] == [1, 2, 3]
    other = TaskForest()
    assert other.create("x").task_id == 1


def test_get_unknown_id_raises_not_found() -> None:
    forest, _ = _forest("a")
    with pytest.raises(TaskNotFoundError):
        forest.get(42)


def test_assign_subtask_links_both_sides() -> None:
    forest, (essay, draft) = _forest("Essay", "Draft")
    forest.assign_subtask(draft, essay)
    assert draft.parent_id == essay.task_id
    assert essay.child_ids == [draft.task_id]
    assert forest.children_of(essay) == [draft]


def test_assign_subtask_moves_child_from_previous_parent() -> None:
    forest, (a, b, c) = _forest("a", "b", "c")
    forest.assign_subtask(c, a)
    forest.assign_subtask(c, b)
    assert a.child_ids == []
    assert b.child_ids == [c.task_id]
    assert c.parent_id == b.task_id


def test_assign_subtask_keeps_sibling_insertion_order() -> None:
    forest, (root, x, y, z) = _forest("root", "x", "y", "z")
    for child in (z, x, y):
        forest.assign_subtask(child, root)
    assert root.child_ids == [z.task_id, x.task_id, y.task_id]


def test_assign_self_is_a_cycle() -> None:
    forest, (a,) = _forest("a")
    with pytest.raises(TaskCycleError):
        forest.assign_subtask(a, a)


def test_assign_ancestor_under_descendant_is_a_cycle() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    a, _, c = tasks
    with pytest.raises(TaskCycleError):
        forest.assign_subtask(a, c)
    assert a.parent_id is None
    assert _no_cycles(forest)


def test_forest_invariant_after_many_reassignments() -> None:
    forest, tasks = _forest(*"abcdef")
    pairs = [(1, 0), (2, 1), (3, 0), (4, 3), (5, 4), (3, 2), (0, 5), (1, 5)]
    for child_index, parent_index in pairs:
        try:
            forest.assign_subtask(tasks[child_index], tasks[parent_index])
        except TaskCycleError:
            continue
    assert _no_cycles(forest)


def test_assign_with_deleted_task_is_rejected() -> None:
    forest, (a, b) = _forest("a", "b")
    forest.set_deleted(b, True)
    with pytest.raises(TaskInactiveError):
        forest.assign_subtask(b, a)
    with pytest.raises(TaskInactiveError):
        forest.assign_subtask(a, b)
    assert a.parent_id is None


def test_toggle_sets_the_same_value_on_all_descendants() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    a, b, c = tasks
    forest.toggle_done(b)
    assert (a.done, b.done, c.done) == (False, True, True)

    assert forest.toggle_done(a) == 3
    assert all(task.done for task in tasks)

    assert forest.toggle_done(a) == 3
    assert not any(task.done for task in tasks)


def test_toggle_skips_deleted_subtrees() -> None:
    forest, (root, kept, gone, below_gone) = _forest("root", "kept", "gone", "below")
    forest.assign_subtask(kept, root)
    forest.assign_subtask(gone, root)
    forest.assign_subtask(below_gone, gone)
    forest.set_deleted(gone, True)

    assert forest.toggle_done(root) == 2
    assert kept.done
    assert not gone.done
    assert not below_gone.done


def test_toggle_deleted_task_is_rejected() -> None:
    forest, (a,) = _forest("a")
    forest.set_deleted(a, True)
    with pytest.raises(TaskInactiveError):
        forest.toggle_done(a)


def test_set_deleted_is_idempotent() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    assert forest.set_deleted(tasks[0], True) == 3
    assert forest.set_deleted(tasks[0], True) == 0
    assert all(task.deleted for task in tasks)


def test_set_deleted_does_not_recount_converged_subtree() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    forest.set_deleted(tasks[1], True)
    assert forest.set_deleted(tasks[0], True) == 1


def test_restore_child_of_deleted_parent_detaches_it() -> None:
    forest, (parent, child) = _forest("parent", "child")
    forest.assign_subtask(child, parent)
    forest.set_deleted(parent, True)

    assert forest.restore(child) == 1
    assert not child.deleted
    assert child.parent_id is None
    assert parent.deleted
    assert parent.child_ids == []


def test_restore_under_active_parent_moves_to_end_of_children() -> None:
    forest, (root, first, second) = _forest("root", "first", "second")
    forest.assign_subtask(first, root)
    forest.assign_subtask(second, root)
    forest.set_deleted(first, True)

    forest.restore(first)
    assert first.parent_id == root.task_id
    assert root.child_ids == [second.task_id, first.task_id]


def test_restore_brings_back_descendants() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    forest.set_deleted(tasks[0], True)
    assert forest.restore(tasks[0]) == 3
    assert not any(task.deleted for task in tasks)


def test_restore_active_task_is_rejected() -> None:
    forest, (a,) = _forest("a")
    with pytest.raises(AlreadyActiveError):
        forest.restore(a)


def test_add_tag_rejects_duplicates_and_deleted_tasks() -> None:
    forest, (a, b) = _forest("a", "b")
    forest.add_tag(a, "uni")
    with pytest.raises(DuplicateTagError):
        forest.add_tag(a, "uni")
    forest.set_deleted(b, True)
    with pytest.raises(TaskInactiveError):
        forest.add_tag(b, "uni")
    assert b.tags == set()


def test_set_deadline_and_priority_can_clear() -> None:
    forest, (a,) = _forest("a")
    forest.set_deadline(a, dt.date(2024, 1, 1))
    forest.set_priority(a, "HI")
    assert a.deadline == dt.date(2024, 1, 1)
    assert a.priority == "HI"
    forest.set_deadline(a, None)
    forest.set_priority(a, None)
    assert a.deadline is None
    assert a.priority is None


def test_set_deadline_on_deleted_task_is_rejected() -> None:
    forest, (a,) = _forest("a")
    forest.set_deleted(a, True)
    with pytest.raises(TaskInactiveError):
        forest.set_deadline(a, dt.date(2024, 1, 1))
    with pytest.raises(TaskInactiveError):
        forest.set_priority(a, "LO")


def test_descendants_skip_deleted_unless_requested() -> None:
    forest, tasks = _forest("a", "b", "c")
    _chain(forest, tasks)
    forest.set_deleted(tasks[1], True)
    assert list(forest.descendants(tasks[0])) == []
    assert list(forest.descendants(tasks[0], include_deleted=True)) == tasks[1:]
