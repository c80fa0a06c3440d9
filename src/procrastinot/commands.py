"""Command vocabulary: tokenizing, dispatch and user-facing messages."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from . import render
from .config import Settings
from .models import Task, TaskError, TaskValidationError
from .search import TaskView
from .service import TaskRegistry
from .validation import (
    is_id_token,
    parse_date,
    parse_id,
    parse_priority,
    validate_list_name,
    validate_name,
    validate_tag,
)

logger = logging.getLogger(__name__)

NO_MATCHES = "No tasks found."


@dataclass(frozen=True, slots=True)
class CommandResult:
    ok: bool
    message: str
    kind: str | None = None
    view: TaskView | None = None

    @classmethod
    def success(cls, message: str, view: TaskView | None = None) -> CommandResult:
        return cls(ok=True, message=message, view=view)

    @classmethod
    def failure(cls, kind: str, message: str) -> CommandResult:
        return cls(ok=False, message=message, kind=kind)


Handler = Callable[["CommandShell", list[str]], CommandResult]


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    usage: str
    summary: str
    min_args: int
    handler: Handler


COMMANDS: dict[str, CommandSpec] = {}


def _command(name: str, usage: str, summary: str, *, min_args: int = 0):
    def _register(fn: Handler) -> Handler:
        COMMANDS[name] = CommandSpec(name, usage, summary, min_args, fn)
        return fn

    return _register


def _label(task: Task) -> str:
    return f"#{task.task_id} {task.name}"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


class CommandShell:
    """Executes one command line at a time against a registry."""

    def __init__(self, registry: TaskRegistry | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.registry = registry or TaskRegistry(
            restore_reorders_lists=self.settings.restore_reorders_lists
        )
        self.running = True

    def execute(self, line: str) -> CommandResult | None:
        tokens = line.split()
        if not tokens:
            return None
        name, args = tokens[0], tokens[1:]
        spec = COMMANDS.get(name)
        if spec is None:
            logger.info("Rejected unknown command %r", name)
            return CommandResult.failure("unknown_command", f"Unknown command: {name}")
        if len(args) < spec.min_args:
            return CommandResult.failure("invalid_input", f"Usage: {spec.usage}")

        with self.registry.lock:
            try:
                return spec.handler(self, args)
            except TaskError as exc:
                logger.info("Command %s failed (%s): %s", name, exc.kind, exc)
                return CommandResult.failure(exc.kind, str(exc))

    def _view_result(self, view: TaskView, empty_message: str = NO_MATCHES) -> CommandResult:
        if view.is_empty:
            return CommandResult.success(empty_message, view=view)
        text = render.render_tree_plain(
            self.registry.forest,
            view,
            indent_width=self.settings.indent_width,
        )
        return CommandResult.success(text, view=view)

    @_command("add", "add <name> [priority] [YYYY-MM-DD]", "Add a new root task", min_args=1)
    def _add(self, args: list[str]) -> CommandResult:
        name = validate_name(args[0])
        priority = None
        deadline = None
        for token in args[1:]:
            try:
                priority = parse_priority(token)
            except TaskValidationError:
                try:
                    deadline = parse_date(token)
                except TaskValidationError:
                    raise TaskValidationError(f"Invalid parameter: {token}") from None
        task = self.registry.add_task(name, priority, deadline)
        return CommandResult.success(f"Added: {_label(task)}")

    @_command("add-list", "add-list <list>", "Create a named task list", min_args=1)
    def _add_list(self, args: list[str]) -> CommandResult:
        task_list = self.registry.add_list(validate_list_name(args[0]))
        return CommandResult.success(f"Added list: {task_list.name}")

    @_command("tag", "tag <id|list> <tag>", "Tag a task or a list", min_args=2)
    def _tag(self, args: list[str]) -> CommandResult:
        target, tag = args[0], validate_tag(args[1])
        if is_id_token(target):
            task = self.registry.tag_task(parse_id(target), tag)
            return CommandResult.success(f"Tagged {_label(task)} with {tag}")
        task_list = self.registry.tag_list(validate_list_name(target), tag)
        return CommandResult.success(f"Tagged list {task_list.name} with {tag}")

    @_command(
        "assign",
        "assign <id> <parent-id|list>",
        "Make a task a subtask, or add it to a list",
        min_args=2,
    )
    def _assign(self, args: list[str]) -> CommandResult:
        task_id, target = parse_id(args[0]), args[1]
        if is_id_token(target):
            parent = self.registry.get_task(parse_id(target))
            task = self.registry.assign_subtask(task_id, parent.task_id)
            return CommandResult.success(f"Assigned {_label(task)} to {_label(parent)}")
        task_list = self.registry.assign_to_list(task_id, validate_list_name(target))
        return CommandResult.success(f"Assigned #{task_id} to list {task_list.name}")

    @_command("toggle", "toggle <id>", "Flip done state of a task and its subtasks", min_args=1)
    def _toggle(self, args: list[str]) -> CommandResult:
        task, affected = self.registry.toggle(parse_id(args[0]))
        state = "done" if task.done else "not done"
        return CommandResult.success(
            f"Marked {_label(task)} as {state} ({_plural(affected, 'task')} affected)"
        )

    @_command(
        "change-date",
        "change-date <id> [YYYY-MM-DD]",
        "Set or clear a task deadline",
        min_args=1,
    )
    def _change_date(self, args: list[str]) -> CommandResult:
        deadline = parse_date(args[1]) if len(args) > 1 else None
        task = self.registry.change_deadline(parse_id(args[0]), deadline)
        if deadline is None:
            return CommandResult.success(f"Cleared deadline of {_label(task)}")
        return CommandResult.success(f"Changed deadline of {_label(task)} to {deadline.isoformat()}")

    @_command(
        "change-priority",
        "change-priority <id> [HI|MD|LO]",
        "Set or clear a task priority",
        min_args=1,
    )
    def _change_priority(self, args: list[str]) -> CommandResult:
        priority = parse_priority(args[1]) if len(args) > 1 else None
        task = self.registry.change_priority(parse_id(args[0]), priority)
        if priority is None:
            return CommandResult.success(f"Cleared priority of {_label(task)}")
        return CommandResult.success(f"Changed priority of {_label(task)} to {priority}")

    @_command("delete", "delete <id>", "Soft-delete a task and its subtasks", min_args=1)
    def _delete(self, args: list[str]) -> CommandResult:
        task, affected = self.registry.delete_task(parse_id(args[0]))
        return CommandResult.success(f"Deleted {_label(task)} ({_plural(affected, 'task')} affected)")

    @_command("restore", "restore <id>", "Restore a deleted task and its subtasks", min_args=1)
    def _restore(self, args: list[str]) -> CommandResult:
        task, affected = self.registry.restore_task(parse_id(args[0]))
        return CommandResult.success(f"Restored {_label(task)} ({_plural(affected, 'task')} affected)")

    @_command("show", "show [id]", "Show all tasks, or one task with its subtasks")
    def _show(self, args: list[str]) -> CommandResult:
        task_id = parse_id(args[0]) if args else None
        return self._view_result(self.registry.show(task_id))

    @_command("todo", "todo", "Show tasks with open work")
    def _todo(self, args: list[str]) -> CommandResult:
        return self._view_result(self.registry.todo())

    @_command("find", "find <text>", "Find tasks whose name contains text", min_args=1)
    def _find(self, args: list[str]) -> CommandResult:
        return self._view_result(self.registry.find(args[0]))

    @_command("tagged-with", "tagged-with <tag>", "Show tasks carrying a tag", min_args=1)
    def _tagged_with(self, args: list[str]) -> CommandResult:
        return self._view_result(self.registry.has_tag(validate_tag(args[0])))

    @_command("upcoming", "upcoming <YYYY-MM-DD>", "Show deadlines in the window starting at a date", min_args=1)
    def _upcoming(self, args: list[str]) -> CommandResult:
        start = parse_date(args[0])
        return self._view_result(self.registry.upcoming(start, self.settings.upcoming_days))

    @_command("before", "before <YYYY-MM-DD>", "Show deadlines on or before a date", min_args=1)
    def _before(self, args: list[str]) -> CommandResult:
        return self._view_result(self.registry.before(parse_date(args[0])))

    @_command(
        "between",
        "between <YYYY-MM-DD> <YYYY-MM-DD>",
        "Show deadlines within a date range",
        min_args=2,
    )
    def _between(self, args: list[str]) -> CommandResult:
        start, end = parse_date(args[0]), parse_date(args[1])
        if end < start:
            raise TaskValidationError(f"Invalid range: {end.isoformat()} is before {start.isoformat()}")
        return self._view_result(self.registry.between(start, end))

    @_command("list", "list <list>", "Show the tasks of a list", min_args=1)
    def _list(self, args: list[str]) -> CommandResult:
        name = validate_list_name(args[0])
        return self._view_result(self.registry.show_list(name), f'List "{name}" is empty.')

    @_command("duplicates", "duplicates", "Report tasks with the same name and compatible deadline")
    def _duplicates(self, args: list[str]) -> CommandResult:
        ids = self.registry.duplicates()
        if not ids:
            return CommandResult.success("No duplicates found.")
        joined = ", ".join(str(task_id) for task_id in ids)
        return CommandResult.success(f"Found {_plural(len(ids), 'duplicate')}: {joined}")

    @_command("help", "help", "List available commands")
    def _help(self, args: list[str]) -> CommandResult:
        return CommandResult.success(render_command_help())

    @_command("quit", "quit", "Leave the shell")
    def _quit(self, args: list[str]) -> CommandResult:
        self.running = False
        return CommandResult.success("Bye.")


def command_rows() -> list[tuple[str, str]]:
    return [(spec.usage, spec.summary) for spec in COMMANDS.values()]


def render_command_help() -> str:
    rows = command_rows()
    width = max(len(usage) for usage, _ in rows)
    return "\n".join(f"{usage.ljust(width)}  {summary}" for usage, summary in rows)
