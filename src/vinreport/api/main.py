"""FastAPI application for the VIN report service.

Endpoints:
- GET  /                         liveness
- GET  /vehicle-info/{vin}       VIN preview
- POST /create-checkout-session  Stripe Checkout
- POST /webhook                  Stripe payment webhook, triggers fulfillment
- POST /contact                  contact form relay
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from vinreport import __version__
from vinreport.api.exceptions import register_exception_handlers
from vinreport.api.middleware.correlation import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from vinreport.api.routes import (
    checkout_router,
    contact_router,
    health_router,
    vehicles_router,
    webhooks_router,
)
from vinreport.config import get_settings
from vinreport.utils.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="VIN Report API",
        description="Vehicle history report purchase and delivery",
        version=__version__,
    )

    # Starlette runs the last added middleware first: CORS wraps correlation
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_ID_HEADER],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(vehicles_router)
    app.include_router(checkout_router)
    app.include_router(webhooks_router)
    app.include_router(contact_router)
    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = False) -> None:
    """Run the FastAPI server with uvicorn.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("vinreport.api.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
