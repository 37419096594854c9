"""Expose SQLAlchemy models for convenient imports."""

from .bill import Bill, BillCharge
from .expense import Expense
from .meter_reading import MeterReading
from .operation_event import OperationEvent
from .payment import Payment, PaymentMethod
from .property import GlobalSettings, Property, PropertySettings
from .room import Room, RoomStatus
from .tenant import Tenant, TenantStatus

__all__ = [
    "Bill",
    "BillCharge",
    "Expense",
    "GlobalSettings",
    "MeterReading",
    "OperationEvent",
    "Payment",
    "PaymentMethod",
    "Property",
    "PropertySettings",
    "Room",
    "RoomStatus",
    "Tenant",
    "TenantStatus",
]
