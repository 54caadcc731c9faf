from storekeep.api.routes.auth import router as auth_router
from storekeep.api.routes.buildings import router as buildings_router
from storekeep.api.routes.units import router as units_router
from storekeep.api.routes.customers import router as customers_router
from storekeep.api.routes.rentals import router as rentals_router
from storekeep.api.routes.payments import router as payments_router
from storekeep.api.routes.dashboard import router as dashboard_router

__all__ = [
    "auth_router",
    "buildings_router",
    "units_router",
    "customers_router",
    "rentals_router",
    "payments_router",
    "dashboard_router",
]
