"""Assignment router assembly."""

from fastapi import APIRouter

from .access_routes import router as access_router
from .email_routes import router as email_router
from .management_routes import router as management_router
from .survey_routes import router as survey_router

router = APIRouter(tags=["Assignments"])
router.include_router(email_router)
router.include_router(access_router)
router.include_router(management_router)
router.include_router(survey_router, tags=["Surveys"])

__all__ = ["router"]
