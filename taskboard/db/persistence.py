"""Optimistic mirroring of store transitions to the record store.

The mediator is registered as a store effect.  For each mutating action it
schedules one background write on the running event loop and returns
straight away; the local tree never waits on, or rolls back for, the
record store.  Failed writes are logged and counted, not retried.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from taskboard.actions import (
    MUTATING_ACTIONS,
    Action,
    AddMainTask,
    AddProject,
    AddSubtask,
    DeleteMainTask,
    DeleteProject,
    DeleteSubtask,
    DuplicateMainTask,
    InitProjects,
    ToggleSubtaskComplete,
    UpdateMainTask,
    UpdateProject,
    UpdateSubtask,
)
from taskboard.db.reconstruct import build_project_tree
from taskboard.models import Project, StoreState, Subtask
from taskboard.observability import record_remote_write, record_tree_load, start_span
from taskboard.store.reducer import COPY_SUFFIX

logger = logging.getLogger("taskboard.persistence")


class RecordRepository(Protocol):
    async def select_all(self) -> list[dict]: ...

    async def insert(self, rows: list[dict]) -> None: ...

    async def update(self, record_id: str, fields: dict) -> None: ...

    async def delete(self, record_id: str) -> None: ...


class _Dispatcher(Protocol):
    def dispatch(self, action: Action) -> StoreState: ...


@dataclass(frozen=True)
class RemoteWrite:
    table: str
    operation: str  # insert | update | delete
    record_id: str
    run: Callable[[], Awaitable[None]]


def _find_subtask(state: StoreState, project_id: str, task_id: str, subtask_id: str) -> Subtask | None:
    project = state.find_project(project_id)
    if project is None:
        return None
    for task in project.mainTasks:
        if task.id != task_id:
            continue
        for subtask in task.subtasks:
            if subtask.id == subtask_id:
                return subtask
    return None


class PersistenceMediator:
    """Translates store actions into record store writes."""

    def __init__(
        self,
        project_repo: RecordRepository,
        task_repo: RecordRepository,
        *,
        user_id: str | None = None,
    ):
        self.projects = project_repo
        self.tasks = task_repo
        self.user_id = user_id
        self._pending: set[asyncio.Task] = set()

    # ── Startup load ────────────────────────────────────────────────

    async def load(self) -> list[Project] | None:
        """Read both collections and rebuild the tree; ``None`` if a read fails."""
        started = time.perf_counter()
        with start_span("taskboard.tree_load") as span:
            try:
                project_rows, task_rows = await asyncio.gather(
                    self.projects.select_all(),
                    self.tasks.select_all(),
                )
            except Exception as exc:
                duration_ms = (time.perf_counter() - started) * 1000
                logger.error("Failed to load projects and tasks: %s", exc)
                record_tree_load("error", duration_ms)
                return None

            projects = build_project_tree(project_rows, task_rows)
            if span is not None:
                span.set_attribute("project_rows", len(project_rows))
                span.set_attribute("task_rows", len(task_rows))

        duration_ms = (time.perf_counter() - started) * 1000
        record_tree_load("success", duration_ms)
        logger.info(
            "Loaded %s projects from %s project rows and %s task rows (%.1f ms)",
            len(projects),
            len(project_rows),
            len(task_rows),
            duration_ms,
        )
        return projects

    async def load_into(self, store: _Dispatcher) -> bool:
        projects = await self.load()
        if projects is None:
            return False
        store.dispatch(InitProjects(projects=projects))
        return True

    # ── Mutation mirroring ──────────────────────────────────────────

    def __call__(self, action: Action, previous: StoreState, current: StoreState) -> None:
        if action.type not in MUTATING_ACTIONS or current is previous:
            # View state, or nothing changed locally: nothing to mirror.
            return
        write = self.plan_write(action, current)
        if write is not None:
            self._schedule(write)

    def _task_row(self, **fields: Any) -> dict:
        row = {"estimated_time": 0, "completed": False, "parent_task": None, **fields}
        if self.user_id is not None:
            row["user_id"] = self.user_id
        return row

    def plan_write(self, action: Action, current: StoreState) -> RemoteWrite | None:
        """The single record store write matching ``action``, if it has one."""
        if isinstance(action, AddProject):
            row = {"id": action.id, "title": action.title}
            if self.user_id is not None:
                row["user_id"] = self.user_id
            return RemoteWrite("projects", "insert", action.id, lambda: self.projects.insert([row]))

        if isinstance(action, UpdateProject):
            return RemoteWrite(
                "projects", "update", action.id,
                lambda: self.projects.update(action.id, {"title": action.title}),
            )

        if isinstance(action, DeleteProject):
            # Descendant task rows are left to the record store.
            return RemoteWrite("projects", "delete", action.id, lambda: self.projects.delete(action.id))

        if isinstance(action, AddMainTask):
            row = self._task_row(id=action.id, title=action.title, project_id=action.projectId)
            return RemoteWrite("tasks", "insert", action.id, lambda: self.tasks.insert([row]))

        if isinstance(action, UpdateMainTask):
            return RemoteWrite(
                "tasks", "update", action.taskId,
                lambda: self.tasks.update(action.taskId, {"title": action.title}),
            )

        if isinstance(action, DeleteMainTask):
            return RemoteWrite("tasks", "delete", action.taskId, lambda: self.tasks.delete(action.taskId))

        if isinstance(action, AddSubtask):
            row = self._task_row(
                id=action.id,
                title=action.title,
                estimated_time=action.estimatedTime,
                completed=False,
                parent_task=action.taskId,
                project_id=action.projectId,
            )
            return RemoteWrite("tasks", "insert", action.id, lambda: self.tasks.insert([row]))

        if isinstance(action, UpdateSubtask):
            fields = {"title": action.title, "estimated_time": action.estimatedTime}
            return RemoteWrite(
                "tasks", "update", action.subtaskId,
                lambda: self.tasks.update(action.subtaskId, fields),
            )

        if isinstance(action, DeleteSubtask):
            return RemoteWrite(
                "tasks", "delete", action.subtaskId, lambda: self.tasks.delete(action.subtaskId)
            )

        if isinstance(action, ToggleSubtaskComplete):
            subtask = _find_subtask(current, action.projectId, action.taskId, action.subtaskId)
            if subtask is None:
                return None
            completed = subtask.completed
            return RemoteWrite(
                "tasks", "update", action.subtaskId,
                lambda: self.tasks.update(action.subtaskId, {"completed": completed}),
            )

        if isinstance(action, DuplicateMainTask):
            rows = [
                self._task_row(
                    id=action.newTaskId,
                    title=f"{action.task.title}{COPY_SUFFIX}",
                    project_id=action.projectId,
                )
            ]
            for subtask, subtask_id in zip(action.task.subtasks, action.newSubtaskIds or []):
                rows.append(
                    self._task_row(
                        id=subtask_id,
                        title=subtask.title,
                        estimated_time=subtask.estimatedTime,
                        completed=False,
                        parent_task=action.newTaskId,
                        project_id=action.projectId,
                    )
                )
            return RemoteWrite("tasks", "insert", action.newTaskId, lambda: self.tasks.insert(rows))

        # Selection, expansion and init are view state with no stored counterpart.
        return None

    def _schedule(self, write: RemoteWrite) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop; dropping %s %s for %s",
                write.table,
                write.operation,
                write.record_id,
            )
            record_remote_write(write.table, write.operation, "dropped", 0.0)
            return
        task = loop.create_task(self._run(write))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run(self, write: RemoteWrite) -> None:
        started = time.perf_counter()
        with start_span(
            "taskboard.remote_write",
            {"table": write.table, "operation": write.operation, "record_id": write.record_id},
        ):
            try:
                await write.run()
            except Exception as exc:
                duration_ms = (time.perf_counter() - started) * 1000
                logger.error(
                    "Remote %s on %s failed for %s: %s",
                    write.operation,
                    write.table,
                    write.record_id,
                    exc,
                )
                record_remote_write(write.table, write.operation, "error", duration_ms)
                return
        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug("Remote %s on %s ok for %s", write.operation, write.table, write.record_id)
        record_remote_write(write.table, write.operation, "success", duration_ms)

    # ── Shutdown / tests ────────────────────────────────────────────

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight writes, giving up after ``timeout`` seconds."""
        if not self._pending:
            return
        _, not_done = await asyncio.wait(set(self._pending), timeout=timeout)
        if not_done:
            logger.warning("%s remote writes still pending after drain timeout", len(not_done))
