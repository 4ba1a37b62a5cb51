"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from messenger.backend.api.v1.endpoints import ai, auth, clients, messages, settings, telegram, usage

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])
router.include_router(clients.router, prefix="/clients", tags=["clients"])
router.include_router(messages.router, prefix="/messages", tags=["messages"])
router.include_router(usage.router, prefix="/usage", tags=["usage"])
router.include_router(ai.router, prefix="/ai", tags=["ai"])
router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])
