"""Tests for the completion statistics aggregate."""

import pytest

from core.stats import completion_percentage, compute_stats
from core.store import create_project, create_task, set_task_completed


@pytest.mark.parametrize("completed,total,expected", [
    (0, 0, 0),
    (0, 3, 0),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),
    (1, 2, 50),
    (3, 3, 100),
])
def test_completion_percentage(completed, total, expected):
    assert completion_percentage(completed, total) == expected


def test_empty_workspace(db):
    stats = compute_stats(db)

    assert stats == {
        "totalProjects": 0,
        "totalTasks": 0,
        "overallCompletion": 0,
        "projects": [],
    }


def test_one_of_three_tasks_completed(db):
    project = create_project(db, "Website", "Relaunch")
    tasks = [create_task(db, title, project.id) for title in ("Design", "Build", "Ship")]
    set_task_completed(db, tasks[0].id, True)

    stats = compute_stats(db)

    assert stats["totalProjects"] == 1
    assert stats["totalTasks"] == 3
    assert stats["overallCompletion"] == 33
    assert stats["projects"] == [
        {"id": project.id, "name": "Website", "description": "Relaunch", "progress": 0}
    ]


def test_project_progress_is_stored_value_not_task_ratio(db):
    project = create_project(db, "Docs", progress=40)
    task = create_task(db, "Write", project.id)
    set_task_completed(db, task.id, True)

    stats = compute_stats(db)

    assert stats["overallCompletion"] == 100
    assert stats["projects"][0]["progress"] == 40
