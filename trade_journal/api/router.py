from fastapi import APIRouter

from trade_journal.api.health import router as health_router
from trade_journal.api.analytics import router as analytics_router
from trade_journal.api.settings import router as settings_router
from trade_journal.api.export import router as export_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(analytics_router)
api_router.include_router(settings_router)
api_router.include_router(export_router)
