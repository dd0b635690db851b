from fastapi import APIRouter

from app.api.routes import emails, notifications, reports, stats, verification

api_router = APIRouter()
api_router.include_router(emails.router)
api_router.include_router(notifications.router)
api_router.include_router(verification.router)
api_router.include_router(stats.router)
api_router.include_router(reports.router)
