from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.vehicles.router import router as vehicles_router
from app.api.v1.drivers.router import router as drivers_router
from app.api.v1.rentals.router import router as rentals_router
from app.api.v1.invoices.router import router as invoices_router
from app.api.v1.compliance.router import router as compliance_router
from app.api.v1.onboarding.router import router as onboarding_router
from app.api.v1.tolls.router import router as tolls_router
from app.api.v1.analytics.router import router as analytics_router
from app.api.v1.driver_dashboard.router import router as driver_dashboard_router
from app.api.v1.documents.router import router as documents_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(vehicles_router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(drivers_router, prefix="/drivers", tags=["drivers"])
api_router.include_router(rentals_router, prefix="/rentals", tags=["rentals"])
api_router.include_router(invoices_router, prefix="/invoices", tags=["invoices"])
api_router.include_router(compliance_router, prefix="/compliance", tags=["compliance"])
api_router.include_router(onboarding_router, prefix="/onboarding", tags=["onboarding"])
api_router.include_router(tolls_router, prefix="/tolls", tags=["tolls"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(driver_dashboard_router, prefix="/driver/dashboard", tags=["driver-dashboard"])
api_router.include_router(documents_router, prefix="/documents", tags=["documents"])
