"""Pydantic models matching the frontend TypeScript types."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _TreeNode(BaseModel):
    # Tree values are replaced, never edited; reducers build copies with model_copy().
    model_config = ConfigDict(frozen=True)


class Subtask(_TreeNode):
    id: str
    title: str
    completed: bool = False
    estimatedTime: int = 0  # minutes


class MainTask(_TreeNode):
    id: str
    title: str
    subtasks: list[Subtask] = Field(default_factory=list)
    isExpanded: bool = True


class Project(_TreeNode):
    id: str
    title: str
    mainTasks: list[MainTask] = Field(default_factory=list)
    isExpanded: bool = True


class StoreState(_TreeNode):
    projects: list[Project] = Field(default_factory=list)
    selectedProjectId: Optional[str] = None

    def find_project(self, project_id: str | None) -> Project | None:
        if not project_id:
            return None
        for project in self.projects:
            if project.id == project_id:
                return project
        return None


# ── Derived metrics payloads ───────────────────────────────────────

class MainTaskSummary(BaseModel):
    id: str
    title: str
    progress: int = 0
    totalMinutes: int = 0
    formattedTime: str = "0m"
    subtaskCount: int = 0
    completedCount: int = 0


class ProjectSummary(BaseModel):
    id: str
    title: str
    progress: int = 0
    totalMinutes: int = 0
    formattedTime: str = "0m"
    mainTasks: list[MainTaskSummary] = Field(default_factory=list)
