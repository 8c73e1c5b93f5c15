from fastapi import APIRouter
from app.api.v1 import userrouter, booking_route, approval_route, notification_route, catalog_route, report_route

api_router = APIRouter()

api_router.include_router(userrouter.router, prefix="/api/v1")
api_router.include_router(userrouter.permissions_router, prefix="/api/v1")
api_router.include_router(booking_route.router, prefix="/api/v1")
api_router.include_router(approval_route.router, prefix="/api/v1")
api_router.include_router(notification_route.router, prefix="/api/v1")
api_router.include_router(catalog_route.router, prefix="/api/v1")
api_router.include_router(report_route.router, prefix="/api/v1")
