"""Request and response bodies for the public endpoints."""

from vinreport.api.models.checkout import CheckoutRequest, CheckoutResponse
from vinreport.api.models.contact import ContactRequest, ContactResponse
from vinreport.api.models.vehicles import VehicleInfoResponse

__all__ = [
    "CheckoutRequest",
    "CheckoutResponse",
    "ContactRequest",
    "ContactResponse",
    "VehicleInfoResponse",
]
