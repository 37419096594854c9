"""Service layer encapsulating business logic for API routers."""

from .billing import (
    BillingService,
    ChargeBreakdown,
    RateSettings,
    calculate_bill_charges,
    calculate_charge_line_total,
)
from .billing_periods import (
    calculate_months_covered,
    calculate_period_end_date,
    compute_proration_factor,
    date_ranges_overlap,
    normalize_period_key,
    resolve_period,
)
from .errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from .expenses import ExpenseService
from .meter_readings import MeterReadingService
from .observability import MetricOutcome, ObservabilityService
from .payments import PaymentService
from .properties import PropertyService, SettingsService
from .reminders import ReminderService
from .rooms import RoomService
from .tenants import TenantService

__all__ = [
    "BillingService",
    "ChargeBreakdown",
    "RateSettings",
    "calculate_bill_charges",
    "calculate_charge_line_total",
    "calculate_months_covered",
    "calculate_period_end_date",
    "compute_proration_factor",
    "date_ranges_overlap",
    "normalize_period_key",
    "resolve_period",
    "ConflictError",
    "InvalidStateError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
    "ExpenseService",
    "MeterReadingService",
    "MetricOutcome",
    "ObservabilityService",
    "PaymentService",
    "PropertyService",
    "SettingsService",
    "ReminderService",
    "RoomService",
    "TenantService",
]
