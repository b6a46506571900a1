# server/core/stats.py

from sqlalchemy.orm import Session

from core.store import list_projects, project_summary
from models.project import Task


def completion_percentage(completed: int, total: int) -> int:
    """
    Percentage of completed tasks, rounded half up. Zero when there are no tasks.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def compute_stats(db: Session) -> dict:
    projects = list_projects(db)
    tasks = db.query(Task).all()

    total_tasks = len(tasks)
    completed_tasks = sum(1 for task in tasks if task.completed)

    return {
        "totalProjects": len(projects),
        "totalTasks": total_tasks,
        "overallCompletion": completion_percentage(completed_tasks, total_tasks),
        "projects": [project_summary(project) for project in projects],
    }
