from fastapi import APIRouter

from app.api.v1 import auth, calendars, entries, health, schedules, shares


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(calendars.router, prefix="/calendars", tags=["calendars"])
api_router.include_router(shares.router, prefix="/shares", tags=["shares"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
