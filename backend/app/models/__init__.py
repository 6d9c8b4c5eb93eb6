from app.models.booking import Booking
from app.models.invoice import Invoice
from app.models.provider_profile import ProviderProfile
from app.models.provider_service import ProviderService
from app.models.user import User
from app.models.vehicle import Vehicle

__all__ = [
    "User",
    "ProviderProfile",
    "ProviderService",
    "Vehicle",
    "Booking",
    "Invoice",
]
