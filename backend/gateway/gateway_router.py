# backend/gateway/gateway_router.py
from fastapi import APIRouter

from routers.orders_router import router as orders_router
from routers.notifications_router import router as notifications_router
from routers.conversations_router import router as conversations_router
from routers.companies_router import router as companies_router

gateway_router = APIRouter(prefix="/gateway", tags=["gateway"])

gateway_router.include_router(orders_router)          # /gateway/orders/...
gateway_router.include_router(notifications_router)   # /gateway/notifications/...
gateway_router.include_router(conversations_router)   # /gateway/conversations/...
gateway_router.include_router(companies_router)       # /gateway/companies/...
