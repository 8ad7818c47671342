"""Rebuild the project tree from the flat ``projects`` and ``tasks`` rows."""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable

from taskboard.models import MainTask, Project, Subtask


def _as_bool(value: Any) -> bool:
    # SQLite stores booleans as 0/1
    return bool(value) if value is not None else False


def _as_minutes(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def subtask_from_row(row: dict) -> Subtask:
    return Subtask(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        completed=_as_bool(row.get("completed")),
        estimatedTime=_as_minutes(row.get("estimated_time")),
    )


def build_project_tree(project_rows: Iterable[dict], task_rows: Iterable[dict]) -> list[Project]:
    """Assemble projects → main tasks → subtasks.

    Rows without ``parent_task`` are main tasks of their ``project_id``;
    the rest are subtasks of the main task named by ``parent_task``.  Rows
    pointing at a parent that is not there are dropped, and every node is
    expanded since expansion state is not persisted.
    """
    main_rows_by_project: dict[str, list[dict]] = defaultdict(list)
    sub_rows_by_parent: dict[str, list[dict]] = defaultdict(list)

    # Pass 1: index
    for row in task_rows:
        parent = row.get("parent_task")
        if parent:
            sub_rows_by_parent[str(parent)].append(row)
        elif row.get("project_id"):
            main_rows_by_project[str(row["project_id"])].append(row)

    # Pass 2: assemble top-down
    projects: list[Project] = []
    for project_row in project_rows:
        project_id = str(project_row["id"])
        main_tasks = [
            MainTask(
                id=str(task_row["id"]),
                title=str(task_row.get("title") or ""),
                subtasks=[subtask_from_row(r) for r in sub_rows_by_parent.get(str(task_row["id"]), [])],
                isExpanded=True,
            )
            for task_row in main_rows_by_project.get(project_id, [])
        ]
        projects.append(
            Project(
                id=project_id,
                title=str(project_row.get("title") or ""),
                mainTasks=main_tasks,
                isExpanded=True,
            )
        )
    return projects
