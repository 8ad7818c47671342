"""API router exposing the tree store to the frontend."""
from __future__ import annotations

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import ValidationError

from taskboard.actions import (
    Action,
    AddMainTask,
    AddProject,
    AddSubtask,
    DuplicateMainTask,
    InitProjects,
    UpdateMainTask,
    UpdateProject,
    UpdateSubtask,
    parse_action,
)
from taskboard.calculations import summarize_project
from taskboard.models import ProjectSummary, StoreState
from taskboard.store import TreeStore

board_router = APIRouter(prefix="/api", tags=["board"])

_TITLED_ACTIONS = (AddProject, UpdateProject, AddMainTask, UpdateMainTask, AddSubtask, UpdateSubtask)
_TIMED_ACTIONS = (AddSubtask, UpdateSubtask)
_CREATING_ACTIONS = (AddProject, AddMainTask, AddSubtask)


def _store(request: Request) -> TreeStore:
    return request.app.state.store


def validate_action(action: Action) -> Action:
    """Check a client action before dispatch.

    Titles are trimmed and must not be empty, estimates must not be
    negative, and client-supplied ids are discarded so the store mints
    every new id itself.  The initial tree load is not accepted over HTTP.
    """
    if isinstance(action, InitProjects):
        raise HTTPException(status_code=422, detail="INIT_PROJECTS is not accepted from clients")

    updates: dict = {}
    if isinstance(action, _TITLED_ACTIONS):
        title = action.title.strip()
        if not title:
            raise HTTPException(status_code=422, detail="Title must not be empty")
        updates["title"] = title
    if isinstance(action, _TIMED_ACTIONS) and action.estimatedTime < 0:
        raise HTTPException(status_code=422, detail="estimatedTime must be zero or more minutes")
    if isinstance(action, _CREATING_ACTIONS) and action.id is not None:
        updates["id"] = None
    if isinstance(action, DuplicateMainTask):
        if not action.task.title.strip():
            raise HTTPException(status_code=422, detail="Title must not be empty")
        if any(s.estimatedTime < 0 for s in action.task.subtasks):
            raise HTTPException(status_code=422, detail="estimatedTime must be zero or more minutes")
        if action.newTaskId is not None or action.newSubtaskIds is not None:
            updates.update(newTaskId=None, newSubtaskIds=None)
    return action.model_copy(update=updates) if updates else action


@board_router.get("/state", response_model=StoreState)
async def get_state(request: Request):
    """Current projects and selected project."""
    return _store(request).get_state()


@board_router.post("/dispatch", response_model=StoreState)
async def dispatch_action(request: Request, payload: dict = Body(...)):
    """Apply one action and return the resulting snapshot.

    Must run on the event loop: the store schedules remote writes on it.
    """
    try:
        action = parse_action(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc
    return _store(request).dispatch(validate_action(action))


@board_router.get("/projects/{project_id}/summary", response_model=ProjectSummary)
async def get_project_summary(request: Request, project_id: str):
    project = _store(request).get_state().find_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return summarize_project(project)
