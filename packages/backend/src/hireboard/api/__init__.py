"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
Auth is enforced per route (role checks differ route to route), so
routers are included without blanket dependencies.
"""

from fastapi import APIRouter

from hireboard.api.alerts import router as alerts_router
from hireboard.api.applications import router as applications_router
from hireboard.api.auth import router as auth_router
from hireboard.api.companies import router as companies_router
from hireboard.api.health import router as health_router
from hireboard.api.jobs import router as jobs_router
from hireboard.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(jobs_router, tags=["jobs"])
api_router.include_router(applications_router, tags=["applications"])
api_router.include_router(alerts_router, tags=["alerts"])
api_router.include_router(companies_router, tags=["companies"])
api_router.include_router(users_router, tags=["users"])
