# src/taskkeeper/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_api import Result
from ..tasks.task_models import Task, parse_status

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

SHORT_ID_LEN = 8

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console and one-shot CLI (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%s", name, args)
        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def _error(result: Result[Any]) -> str:
    err = result.error
    if err is None:
        return "Error: operation failed."
    return f"Error ({err.kind}): {err}"


def _line(i: int, task: Task) -> str:
    return f"{i}. {task.status.emoji} [{task.id[:SHORT_ID_LEN]}] {task.short_title}"


def _listing(header: str, tasks: list[Task]) -> str:
    if not tasks:
        return f"{header}: none."
    lines = [f"{header} ({len(tasks)}):"]
    lines.extend(_line(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def _resolve_id(state: AppState, token: str) -> str:
    """
    Accept a full id or a unique id prefix (as printed by /list).
    Unknown or ambiguous prefixes are returned unchanged so the store reports not-found.
    """
    if state.task_store.exists_by_id(token):
        return token
    matches = [t.id for t in state.task_store.find_all() if t.id.startswith(token)]
    return matches[0] if len(matches) == 1 else token


def _resolve(state: AppState, token: str) -> Result[str]:
    return task_api.attempt(lambda: _resolve_id(state, token), what="resolve_id")


def _with_id(
    usage: str,
    action: Callable[[AppState, str, list[str]], Result[Task]],
    verb: str,
) -> CommandHandler2:
    def handler(state: AppState, args: list[str]) -> str:
        if not args:
            return f"Usage: {usage}"
        result = _resolve(state, args[0])
        if not result.ok:
            return _error(result)
        res = action(state, result.unwrap(), args[1:])
        if not res.ok:
            return _error(res)
        task = res.unwrap()
        return f"{verb} [{task.id[:SHORT_ID_LEN]}] {task.title} -> {task.status.formatted}"

    return handler


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title>                  -> new pending task
    /add <title> | <description>  -> with description
    """
    raw = " ".join(args)
    title, _, description = raw.partition("|")
    res = task_api.create_task(state.task_store, title.strip(), description.strip())
    if not res.ok:
        return _error(res)
    task = res.unwrap()
    if emit is not None:
        emit(f"Saved to {getattr(state.settings, 'tasks_file_path', '?')}")
    return f"Added [{task.id[:SHORT_ID_LEN]}] {task.title} (full id: {task.id})"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list           -> all tasks
    /list <status>  -> filter by status (pending, in_progress, done, ...)
    """
    if not args:
        res = task_api.list_tasks(state.task_store)
        return _listing("Tasks", res.unwrap()) if res.ok else _error(res)

    parsed = task_api.attempt(lambda: parse_status(" ".join(args)), what="parse_status")
    if not parsed.ok:
        return _error(parsed)
    status = parsed.unwrap()
    res = task_api.list_tasks(state.task_store, status)
    return _listing(f"Tasks {status.formatted}", res.unwrap()) if res.ok else _error(res)


def cmd_find(state: AppState, args: list[str]) -> str:
    res = task_api.search_tasks(state.task_store, " ".join(args))
    if not res.ok:
        return _error(res)
    return _listing(f"Tasks matching {' '.join(args)!r}", res.unwrap())


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    resolved = _resolve(state, args[0])
    if not resolved.ok:
        return _error(resolved)
    res = task_api.get_task(state.task_store, resolved.unwrap())
    return res.unwrap().detailed() if res.ok else _error(res)


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    resolved = _resolve(state, args[0])
    if not resolved.ok:
        return _error(resolved)
    task_id = resolved.unwrap()
    res = task_api.remove_task(state.task_store, task_id)
    if not res.ok:
        return _error(res)
    return f"Deleted {task_id}." if res.unwrap() else f"No task with id {task_id}."


def cmd_clear(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() != "yes":
        return "This removes ALL tasks. Confirm with: /clear yes"
    res = task_api.clear_tasks(state.task_store)
    return "All tasks deleted." if res.ok else _error(res)


def cmd_count(state: AppState, args: list[str]) -> str:
    res = task_api.attempt(state.task_store.count, what="count")
    return f"Total tasks: {res.unwrap()}" if res.ok else _error(res)


cmd_advance = _with_id(
    "/advance <id>", lambda s, tid, _: task_api.advance_task(s.task_store, tid), "Advanced"
)
cmd_revert = _with_id(
    "/revert <id>", lambda s, tid, _: task_api.revert_task(s.task_store, tid), "Reverted"
)
cmd_done = _with_id(
    "/done <id>", lambda s, tid, _: task_api.complete_task(s.task_store, tid), "Completed"
)
cmd_rename = _with_id(
    "/rename <id> <title>",
    lambda s, tid, rest: task_api.rename_task(s.task_store, tid, " ".join(rest)),
    "Renamed",
)
cmd_describe = _with_id(
    "/describe <id> <text>",
    lambda s, tid, rest: task_api.describe_task(s.task_store, tid, " ".join(rest)),
    "Described",
)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| description].", aliases=["new"])
registry.register("list", cmd_list, help_text="List tasks: /list [pending|in_progress|done].", aliases=["ls"])
registry.register("find", cmd_find, help_text="Search titles (case-insensitive): /find <keyword>.")
registry.register("show", cmd_show, help_text="Show one task in detail: /show <id>.")
registry.register("advance", cmd_advance, help_text="Move a task forward: /advance <id>.", aliases=["next"])
registry.register("revert", cmd_revert, help_text="Move a task back: /revert <id>.", aliases=["back"])
registry.register("done", cmd_done, help_text="Mark a task as done: /done <id>.")
registry.register("rename", cmd_rename, help_text="Change a title: /rename <id> <title>.")
registry.register("describe", cmd_describe, help_text="Change a description: /describe <id> <text>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Delete every task: /clear yes.")
registry.register("count", cmd_count, help_text="Count stored tasks.")
