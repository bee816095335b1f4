from fastapi import APIRouter

from shopdesk.app.api.v1.endpoints import (
    billing,
    credits,
    dashboard,
    logs,
    products,
    upload,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(credits.router, prefix="/credits", tags=["credits"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(logs.router, prefix="/logs", tags=["logs"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])


@api_router.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}
