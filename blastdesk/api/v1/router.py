from fastapi import APIRouter

from blastdesk.api.v1.endpoints import (
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
from blastdesk.core.rate_limiter import limiter

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Simple health check endpoint for load balancers"""
    return {"status": "healthy", "service": "blastdesk"}


# Paths mirror the dashboard client, so most routers mount at the API root
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(verification.router, tags=["Sender Verification"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(departments.router, prefix="/departments", tags=["Departments"])
api_router.include_router(participants.router, prefix="/participants", tags=["Participants"])
api_router.include_router(templates.router, prefix="/templates", tags=["Templates"])
api_router.include_router(ecard.router, prefix="/ecard", tags=["E-cards"])
api_router.include_router(backdrops.router, tags=["E-card Backdrops"])
api_router.include_router(blast.router, prefix="/blast", tags=["Blast"])
api_router.include_router(history.router, prefix="/history", tags=["History"])
api_router.include_router(analytics.router, tags=["Analytics"])
api_router.include_router(settings.router, tags=["Settings"])
api_router.include_router(unsubscribe.router, prefix="/unsubscribe", tags=["Unsubscribe"])
api_router.include_router(activity_logs.router, prefix="/activity-logs", tags=["Activity Log"])
