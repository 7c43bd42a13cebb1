# API endpoints
from . import (
    auth,
    users,
    verification,
    departments,
    participants,
    templates,
    ecard,
    backdrops,
    blast,
    history,
    analytics,
    settings,
    unsubscribe,
    activity_logs,
)

__all__ = [
    "auth", "users", "verification", "departments", "participants", "templates", "ecard",
    "backdrops", "blast", "history", "analytics", "settings", "unsubscribe", "activity_logs",
]
