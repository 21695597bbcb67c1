"""API routes package.

Routers are organized by endpoint:

- health: Liveness check at /
- vehicles: VIN preview lookup
- checkout: Stripe Checkout session creation
- webhooks: Stripe payment webhook (report fulfillment)
- contact: Contact form relay to support

All routers are registered in main.py without a prefix.
"""

from vinreport.api.routes.checkout import router as checkout_router
from vinreport.api.routes.contact import router as contact_router
from vinreport.api.routes.health import router as health_router
from vinreport.api.routes.vehicles import router as vehicles_router
from vinreport.api.routes.webhooks import router as webhooks_router

__all__ = [
    "checkout_router",
    "contact_router",
    "health_router",
    "vehicles_router",
    "webhooks_router",
]
