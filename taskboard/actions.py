"""Closed set of store actions.

Each action is a pydantic model tagged by a literal ``type`` so the whole
set can be parsed from JSON as a discriminated union.  Creation actions
carry optional pre-minted ids; ``assign_ids`` fills them before the reducer
runs so the local tree and the remote rows share the same identifiers.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from taskboard.identity import IdAllocator, new_id
from taskboard.models import MainTask, Project


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class InitProjects(_Action):
    type: Literal["INIT_PROJECTS"] = "INIT_PROJECTS"
    projects: list[Project] = Field(default_factory=list)


class SetSelectedProject(_Action):
    type: Literal["SET_SELECTED_PROJECT"] = "SET_SELECTED_PROJECT"
    projectId: Optional[str] = None


class AddProject(_Action):
    type: Literal["ADD_PROJECT"] = "ADD_PROJECT"
    title: str
    id: Optional[str] = None


class UpdateProject(_Action):
    type: Literal["UPDATE_PROJECT"] = "UPDATE_PROJECT"
    id: str
    title: str


class DeleteProject(_Action):
    type: Literal["DELETE_PROJECT"] = "DELETE_PROJECT"
    id: str


class ToggleProjectExpand(_Action):
    type: Literal["TOGGLE_PROJECT_EXPAND"] = "TOGGLE_PROJECT_EXPAND"
    id: str


class AddMainTask(_Action):
    type: Literal["ADD_MAIN_TASK"] = "ADD_MAIN_TASK"
    projectId: str
    title: str
    id: Optional[str] = None


class UpdateMainTask(_Action):
    type: Literal["UPDATE_MAIN_TASK"] = "UPDATE_MAIN_TASK"
    projectId: str
    taskId: str
    title: str


class DeleteMainTask(_Action):
    type: Literal["DELETE_MAIN_TASK"] = "DELETE_MAIN_TASK"
    projectId: str
    taskId: str


class ToggleMainTaskExpand(_Action):
    type: Literal["TOGGLE_MAIN_TASK_EXPAND"] = "TOGGLE_MAIN_TASK_EXPAND"
    projectId: str
    taskId: str


class AddSubtask(_Action):
    type: Literal["ADD_SUBTASK"] = "ADD_SUBTASK"
    projectId: str
    taskId: str
    title: str
    estimatedTime: int = 0
    id: Optional[str] = None


class UpdateSubtask(_Action):
    type: Literal["UPDATE_SUBTASK"] = "UPDATE_SUBTASK"
    projectId: str
    taskId: str
    subtaskId: str
    title: str
    estimatedTime: int = 0


class DeleteSubtask(_Action):
    type: Literal["DELETE_SUBTASK"] = "DELETE_SUBTASK"
    projectId: str
    taskId: str
    subtaskId: str


class ToggleSubtaskComplete(_Action):
    type: Literal["TOGGLE_SUBTASK_COMPLETE"] = "TOGGLE_SUBTASK_COMPLETE"
    projectId: str
    taskId: str
    subtaskId: str


class DuplicateMainTask(_Action):
    type: Literal["DUPLICATE_MAIN_TASK"] = "DUPLICATE_MAIN_TASK"
    projectId: str
    task: MainTask
    newTaskId: Optional[str] = None
    newSubtaskIds: Optional[list[str]] = None


Action = Annotated[
    Union[
        InitProjects,
        SetSelectedProject,
        AddProject,
        UpdateProject,
        DeleteProject,
        ToggleProjectExpand,
        AddMainTask,
        UpdateMainTask,
        DeleteMainTask,
        ToggleMainTaskExpand,
        AddSubtask,
        UpdateSubtask,
        DeleteSubtask,
        ToggleSubtaskComplete,
        DuplicateMainTask,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)

# Actions whose effect reaches the record store. Expansion and selection are view state.
MUTATING_ACTIONS: frozenset[str] = frozenset({
    "ADD_PROJECT",
    "UPDATE_PROJECT",
    "DELETE_PROJECT",
    "ADD_MAIN_TASK",
    "UPDATE_MAIN_TASK",
    "DELETE_MAIN_TASK",
    "ADD_SUBTASK",
    "UPDATE_SUBTASK",
    "DELETE_SUBTASK",
    "TOGGLE_SUBTASK_COMPLETE",
    "DUPLICATE_MAIN_TASK",
})


def parse_action(payload: dict[str, Any]) -> Action:
    """Build an action from JSON-like data, dispatching on ``type``."""
    return _action_adapter.validate_python(payload)


def assign_ids(action: Action, allocate_id: IdAllocator = new_id) -> Action:
    """Return ``action`` with every id it will create filled in."""
    if isinstance(action, (AddProject, AddMainTask, AddSubtask)):
        if action.id:
            return action
        return action.model_copy(update={"id": allocate_id()})

    if isinstance(action, DuplicateMainTask):
        updates: dict[str, Any] = {}
        if not action.newTaskId:
            updates["newTaskId"] = allocate_id()
        ids = action.newSubtaskIds
        if ids is None or len(ids) != len(action.task.subtasks):
            updates["newSubtaskIds"] = [allocate_id() for _ in action.task.subtasks]
        if not updates:
            return action
        return action.model_copy(update=updates)

    return action
