"""Routers package."""

from .bills import router as bills_router
from .expenses import router as expenses_router
from .meter_readings import router as meter_readings_router
from .payments import router as payments_router
from .properties import router as properties_router
from .properties import settings_router
from .reminders import router as reminders_router
from .rooms import router as rooms_router
from .tenants import router as tenants_router

__all__ = [
    "bills_router",
    "expenses_router",
    "meter_readings_router",
    "payments_router",
    "properties_router",
    "settings_router",
    "reminders_router",
    "rooms_router",
    "tenants_router",
]
