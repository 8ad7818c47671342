"""Pure transition function for the project/task/subtask tree.

``reduce(state, action)`` never mutates its input.  Actions that reference
an id with no matching node return the input state object unchanged, so
callers can detect no-ops with ``is``.
"""
from __future__ import annotations

from typing import Callable, TypeVar, assert_never

from taskboard.actions import (
    Action,
    AddMainTask,
    AddProject,
    AddSubtask,
    DeleteMainTask,
    DeleteProject,
    DeleteSubtask,
    DuplicateMainTask,
    InitProjects,
    SetSelectedProject,
    ToggleMainTaskExpand,
    ToggleProjectExpand,
    ToggleSubtaskComplete,
    UpdateMainTask,
    UpdateProject,
    UpdateSubtask,
    assign_ids,
)
from taskboard.identity import IdAllocator, new_id
from taskboard.models import MainTask, Project, StoreState, Subtask

COPY_SUFFIX = " (copy)"

_Node = TypeVar("_Node", Project, MainTask, Subtask)


def _replace(items: list[_Node], item_id: str, fn: Callable[[_Node], _Node]) -> list[_Node]:
    """Apply ``fn`` to the item with ``item_id``; same list back when nothing changed."""
    changed = False
    result: list[_Node] = []
    for item in items:
        if item.id == item_id:
            updated = fn(item)
            changed = changed or updated is not item
            result.append(updated)
        else:
            result.append(item)
    return result if changed else items


def _remove(items: list[_Node], item_id: str) -> list[_Node]:
    result = [item for item in items if item.id != item_id]
    return result if len(result) != len(items) else items


def _on_project(state: StoreState, project_id: str, fn: Callable[[Project], Project]) -> StoreState:
    projects = _replace(state.projects, project_id, fn)
    if projects is state.projects:
        return state
    return state.model_copy(update={"projects": projects})


def _on_task(
    state: StoreState,
    project_id: str,
    task_id: str,
    fn: Callable[[MainTask], MainTask],
) -> StoreState:
    def update_project(project: Project) -> Project:
        tasks = _replace(project.mainTasks, task_id, fn)
        if tasks is project.mainTasks:
            return project
        return project.model_copy(update={"mainTasks": tasks})

    return _on_project(state, project_id, update_project)


def _on_subtask(
    state: StoreState,
    project_id: str,
    task_id: str,
    subtask_id: str,
    fn: Callable[[Subtask], Subtask],
) -> StoreState:
    def update_task(task: MainTask) -> MainTask:
        subtasks = _replace(task.subtasks, subtask_id, fn)
        if subtasks is task.subtasks:
            return task
        return task.model_copy(update={"subtasks": subtasks})

    return _on_task(state, project_id, task_id, update_task)


def duplicate_task(task: MainTask, new_task_id: str, new_subtask_ids: list[str]) -> MainTask:
    """Deep copy of ``task`` under fresh ids, with every subtask reset to incomplete."""
    return MainTask(
        id=new_task_id,
        title=f"{task.title}{COPY_SUFFIX}",
        isExpanded=True,
        subtasks=[
            Subtask(
                id=subtask_id,
                title=subtask.title,
                completed=False,
                estimatedTime=subtask.estimatedTime,
            )
            for subtask, subtask_id in zip(task.subtasks, new_subtask_ids)
        ],
    )


def reduce(state: StoreState, action: Action, allocate_id: IdAllocator = new_id) -> StoreState:
    action = assign_ids(action, allocate_id)

    # ── Projects ──────────────────────────────────────────────────
    if isinstance(action, InitProjects):
        projects = list(action.projects)
        selected = state.selectedProjectId
        if selected is not None and all(p.id != selected for p in projects):
            selected = None
        return state.model_copy(update={"projects": projects, "selectedProjectId": selected})

    if isinstance(action, SetSelectedProject):
        if not action.projectId:
            return state.model_copy(update={"selectedProjectId": None})
        if state.find_project(action.projectId) is None:
            return state
        return state.model_copy(update={"selectedProjectId": action.projectId})

    if isinstance(action, AddProject):
        project = Project(id=action.id, title=action.title, mainTasks=[], isExpanded=True)
        return state.model_copy(
            update={"projects": [*state.projects, project], "selectedProjectId": project.id}
        )

    if isinstance(action, UpdateProject):
        return _on_project(state, action.id, lambda p: p.model_copy(update={"title": action.title}))

    if isinstance(action, DeleteProject):
        projects = _remove(state.projects, action.id)
        if projects is state.projects:
            return state
        selected = state.selectedProjectId
        if selected == action.id:
            selected = None
        return state.model_copy(update={"projects": projects, "selectedProjectId": selected})

    if isinstance(action, ToggleProjectExpand):
        return _on_project(
            state, action.id, lambda p: p.model_copy(update={"isExpanded": not p.isExpanded})
        )

    # ── Main tasks ────────────────────────────────────────────────
    if isinstance(action, AddMainTask):
        task = MainTask(id=action.id, title=action.title, subtasks=[], isExpanded=True)
        return _on_project(
            state,
            action.projectId,
            lambda p: p.model_copy(update={"mainTasks": [*p.mainTasks, task]}),
        )

    if isinstance(action, UpdateMainTask):
        return _on_task(
            state,
            action.projectId,
            action.taskId,
            lambda t: t.model_copy(update={"title": action.title}),
        )

    if isinstance(action, DeleteMainTask):
        def drop_task(project: Project) -> Project:
            tasks = _remove(project.mainTasks, action.taskId)
            if tasks is project.mainTasks:
                return project
            return project.model_copy(update={"mainTasks": tasks})

        return _on_project(state, action.projectId, drop_task)

    if isinstance(action, ToggleMainTaskExpand):
        return _on_task(
            state,
            action.projectId,
            action.taskId,
            lambda t: t.model_copy(update={"isExpanded": not t.isExpanded}),
        )

    if isinstance(action, DuplicateMainTask):
        clone = duplicate_task(action.task, action.newTaskId, action.newSubtaskIds)
        return _on_project(
            state,
            action.projectId,
            lambda p: p.model_copy(update={"mainTasks": [*p.mainTasks, clone]}),
        )

    # ── Subtasks ──────────────────────────────────────────────────
    if isinstance(action, AddSubtask):
        subtask = Subtask(
            id=action.id,
            title=action.title,
            completed=False,
            estimatedTime=action.estimatedTime,
        )
        return _on_task(
            state,
            action.projectId,
            action.taskId,
            lambda t: t.model_copy(update={"subtasks": [*t.subtasks, subtask]}),
        )

    if isinstance(action, UpdateSubtask):
        return _on_subtask(
            state,
            action.projectId,
            action.taskId,
            action.subtaskId,
            lambda s: s.model_copy(
                update={"title": action.title, "estimatedTime": action.estimatedTime}
            ),
        )

    if isinstance(action, DeleteSubtask):
        def drop_subtask(task: MainTask) -> MainTask:
            subtasks = _remove(task.subtasks, action.subtaskId)
            if subtasks is task.subtasks:
                return task
            return task.model_copy(update={"subtasks": subtasks})

        return _on_task(state, action.projectId, action.taskId, drop_subtask)

    if isinstance(action, ToggleSubtaskComplete):
        return _on_subtask(
            state,
            action.projectId,
            action.taskId,
            action.subtaskId,
            lambda s: s.model_copy(update={"completed": not s.completed}),
        )

    assert_never(action)
