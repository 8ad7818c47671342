"""Progress and time figures derived from the task tree.

Everything here is recomputed on demand from the tree fragment passed in;
nothing is cached.
"""
from __future__ import annotations

import math
from typing import Optional

from taskboard import config
from taskboard.models import MainTask, MainTaskSummary, Project, ProjectSummary


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def count_progress(task: MainTask) -> int:
    """Share of subtasks completed, as a whole percentage."""
    total = len(task.subtasks)
    if total == 0:
        return 0
    completed = sum(1 for s in task.subtasks if s.completed)
    return _round_half_up(100 * completed / total)


def time_weighted_progress(task: MainTask) -> int:
    """Share of estimated minutes completed, as a whole percentage."""
    total = main_task_time(task)
    if total == 0:
        return 0
    completed = sum(s.estimatedTime for s in task.subtasks if s.completed)
    return _round_half_up(100 * completed / total)


def main_task_progress(task: MainTask, mode: Optional[str] = None) -> int:
    mode = mode or config.PROGRESS_MODE
    if mode == "time":
        return time_weighted_progress(task)
    if mode == "count":
        return count_progress(task)
    raise ValueError(f"Unknown progress mode: {mode!r}")


def main_task_time(task: MainTask) -> int:
    return sum(s.estimatedTime for s in task.subtasks)


def project_progress(project: Project, mode: Optional[str] = None) -> int:
    """Mean of the main-task percentages; 0 for a project without tasks."""
    if not project.mainTasks:
        return 0
    total = sum(main_task_progress(task, mode) for task in project.mainTasks)
    return _round_half_up(total / len(project.mainTasks))


def project_time(project: Project) -> int:
    return sum(main_task_time(task) for task in project.mainTasks)


def format_time(minutes: int) -> str:
    """Render minutes as ``45m``, ``2h`` or ``1h 5m``."""
    minutes = int(minutes)
    if minutes < 60:
        return f"{minutes}m"
    hours, remainder = divmod(minutes, 60)
    if remainder == 0:
        return f"{hours}h"
    return f"{hours}h {remainder}m"


def summarize_main_task(task: MainTask, mode: Optional[str] = None) -> MainTaskSummary:
    total = main_task_time(task)
    return MainTaskSummary(
        id=task.id,
        title=task.title,
        progress=main_task_progress(task, mode),
        totalMinutes=total,
        formattedTime=format_time(total),
        subtaskCount=len(task.subtasks),
        completedCount=sum(1 for s in task.subtasks if s.completed),
    )


def summarize_project(project: Project, mode: Optional[str] = None) -> ProjectSummary:
    total = project_time(project)
    return ProjectSummary(
        id=project.id,
        title=project.title,
        progress=project_progress(project, mode),
        totalMinutes=total,
        formattedTime=format_time(total),
        mainTasks=[summarize_main_task(task, mode) for task in project.mainTasks],
    )
