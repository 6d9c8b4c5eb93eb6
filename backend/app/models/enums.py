import enum

# These enums are stored as VARCHAR columns. Values equal names so the wire
# format ("PENDING", "OWNER", ...) is the same in JSON and in the database.


class UserRole(str, enum.Enum):
    OWNER = "OWNER"
    PROVIDER = "PROVIDER"


class ServiceCategory(str, enum.Enum):
    GARAGE = "GARAGE"
    CARRIER = "CARRIER"
    DETAILER = "DETAILER"


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
