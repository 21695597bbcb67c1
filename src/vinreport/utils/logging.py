"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- A formatter that prefixes every record with its correlation ID
- Helpers for webhook and fulfillment logging

Usage:
    from vinreport.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Report materialized", extra={"vin": vin})
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; the handler is only added the first time.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    event_id: str,
    *,
    session_id: str | None = None,
    vin: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook event with structured context.

    Args:
        logger: Logger instance
        event_type: Stripe event type (e.g., "checkout.session.completed")
        event_id: Stripe event ID
        session_id: Checkout session ID if available
        vin: VIN from the session metadata if available
        result: Processing result (received, verified, success, duplicate, skipped, error)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {
        "event_type": event_type,
        "event_id": event_id,
    }

    if session_id:
        context["session_id"] = session_id
    if vin:
        context["vin"] = vin
    if result:
        context["result"] = result
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Webhook event: {event_type} ({event_id})"]
    if result:
        msg_parts.append(f"result={result}")
    if vin:
        msg_parts.append(f"vin={vin}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)

    if result == "error":
        logger.error(message, extra=context)
    elif result == "duplicate" or result == "skipped":
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_fulfillment_event(
    logger: logging.Logger,
    stage: str,
    *,
    session_id: str,
    vin: str,
    attempts: int | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a fulfillment stage transition with structured context.

    Args:
        logger: Logger instance
        stage: Stage reached (pending, artifact_ready, succeeded, failed)
        session_id: Checkout session ID the job is keyed by
        vin: VIN being fulfilled
        attempts: Attempt counter after this transition
        error: Error message if the stage failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"stage": stage, "session_id": session_id, "vin": vin}
    if attempts is not None:
        context["attempts"] = attempts
    if error:
        context["error"] = error
    context.update(extra)

    msg_parts = [f"Fulfillment: {stage}"]
    for key, value in context.items():
        if key != "stage":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)
