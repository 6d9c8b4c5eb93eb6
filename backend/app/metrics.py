"""Prometheus counters for the vehicle service ecosystem."""

from prometheus_client import Counter

USERS_REGISTERED = Counter(
    "vse_users_registered_total",
    "Total users registered",
    ["role"],
)

LOGIN_FAILURES = Counter(
    "vse_login_failures_total",
    "Failed login attempts",
    ["reason"],
)

BOOKINGS_CREATED = Counter(
    "vse_bookings_created_total",
    "Total bookings created",
)
BOOKING_STATUS_TRANSITIONS = Counter(
    "vse_booking_status_transitions_total",
    "Booking status changes applied by providers",
    ["from_status", "to_status"],
)

INVOICES_CREATED = Counter(
    "vse_invoices_created_total",
    "Total invoices issued",
)

PASSWORD_RESETS = Counter(
    "vse_password_resets_total",
    "Password reset requests and completions",
    ["stage"],
)
