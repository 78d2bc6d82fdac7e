"""API routes for Chat Attribution Server."""

from fastapi import APIRouter

from chatattribution.server.routes.internal import router as internal_router
from chatattribution.server.routes.orders import router as orders_router

router = APIRouter()
router.include_router(orders_router)
router.include_router(internal_router, prefix="/internal")
