from fastapi import APIRouter

from app.api.modules.v1.health.routes.health_routes import router as health_router
from app.api.modules.v1.subscriptions.routes.subscription_routes import (
    router as subscription_router,
)

router = APIRouter()
router.include_router(health_router)
router.include_router(subscription_router)
