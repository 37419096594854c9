"""Expose Pydantic schemas for convenient imports."""

from .bill import (
    BillChargeCreate,
    BillChargeRead,
    BillChargesBreakdown,
    BillChargeUpdate,
    BillGenerateRequest,
    BillListResponse,
    BillPeriodUpdate,
    BillRead,
    BillUpdate,
)
from .common import PaginatedResponse, RateValues
from .expense import ExpenseBase, ExpenseCreate, ExpenseListResponse, ExpenseRead, ExpenseUpdate
from .meter_reading import (
    MeterReadingCreate,
    MeterReadingListResponse,
    MeterReadingRead,
    MeterReadingUpdate,
)
from .payment import PaymentCreate, PaymentListResponse, PaymentRead
from .property import (
    GlobalSettingsRead,
    GlobalSettingsUpdate,
    PropertyCreate,
    PropertyListResponse,
    PropertyRead,
    PropertySettingsRead,
    PropertySettingsUpdate,
    PropertyUpdate,
)
from .reminder import (
    BillUrgency,
    DueSoonItem,
    DueSoonResponse,
    ReminderStatus,
    UnpaidBillItem,
    UnpaidBillsResponse,
)
from .room import RoomCreate, RoomListResponse, RoomRead, RoomUpdate
from .tenant import TenantCreate, TenantListResponse, TenantRead, TenantUpdate

__all__ = [
    "BillChargeCreate",
    "BillChargeRead",
    "BillChargesBreakdown",
    "BillChargeUpdate",
    "BillGenerateRequest",
    "BillListResponse",
    "BillPeriodUpdate",
    "BillRead",
    "BillUpdate",
    "DueSoonItem",
    "DueSoonResponse",
    "ExpenseBase",
    "ExpenseCreate",
    "ExpenseListResponse",
    "ExpenseRead",
    "ExpenseUpdate",
    "GlobalSettingsRead",
    "GlobalSettingsUpdate",
    "MeterReadingCreate",
    "MeterReadingListResponse",
    "MeterReadingRead",
    "MeterReadingUpdate",
    "PaginatedResponse",
    "PaymentCreate",
    "PaymentListResponse",
    "PaymentRead",
    "PropertyCreate",
    "PropertyListResponse",
    "PropertyRead",
    "PropertySettingsRead",
    "PropertySettingsUpdate",
    "PropertyUpdate",
    "RateValues",
    "ReminderStatus",
    "UnpaidBillItem",
    "UnpaidBillsResponse",
    "BillUrgency",
    "RoomCreate",
    "RoomListResponse",
    "RoomRead",
    "RoomUpdate",
    "TenantCreate",
    "TenantListResponse",
    "TenantRead",
    "TenantUpdate",
]
