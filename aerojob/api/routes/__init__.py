"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from aerojob.api.routes.auth_routes import router as auth_router
from aerojob.api.routes.user_routes import router as user_router
from aerojob.api.routes.company_routes import router as company_router
from aerojob.api.routes.job_routes import router as job_router
from aerojob.api.routes.survey_routes import router as survey_router
from aerojob.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(company_router)
api_router.include_router(job_router)
api_router.include_router(survey_router)
api_router.include_router(analytics_router)
