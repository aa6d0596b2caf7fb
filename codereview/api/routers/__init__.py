from . import assignments, auth, cohorts, comments, files, health, notifications, projects, users

ROUTERS = [
    health.router,
    auth.router,
    users.router,
    cohorts.router,
    projects.router,
    files.router,
    comments.router,
    assignments.router,
    notifications.router,
]

__all__ = ["ROUTERS"]
