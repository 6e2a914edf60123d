"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from course_api.presentation.api.v1.endpoints.health import router as health_router
from course_api.presentation.api.v1.endpoints.gateway import router as gateway_router

router = APIRouter(prefix="/v1")
# Health must be registered before the catch-all gateway paths
router.include_router(health_router)
router.include_router(gateway_router)
