"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from debt_tracker.domain.diagnostics import DiagnosticEvent, EventBus, diagnostics

SERVICE_NAME = "debt-tracker"

diagnostics_logger = logging.getLogger("debt_tracker.diagnostics")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def log_diagnostic(event: DiagnosticEvent) -> None:
    """Forward a domain diagnostic to logging, fields as structured extras"""
    diagnostics_logger.log(event.level, event.message, extra={"event": event.name, **event.fields})


_attached_buses = set()


def attach_diagnostics_sink(bus: EventBus = diagnostics) -> None:
    if id(bus) in _attached_buses:
        return
    bus.subscribe(log_diagnostic)
    _attached_buses.add(id(bus))


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging and route diagnostics through it"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    attach_diagnostics_sink()


def log_payment(
    request_id: str,
    expense_id: str,
    outcome: str,
    amount: float,
    attempts: int,
    duration_ms: float,
) -> None:
    """Log structured payment outcome for analysis"""
    logging.info(
        "Payment reconciled" if outcome == "verified" else "Payment failed",
        extra={
            "request_id": request_id,
            "expense_id": expense_id,
            "step": "payment_complete",
            "outcome": outcome,
            "amount": amount,
            "verification_attempts": attempts,
            "duration_ms": duration_ms,
        },
    )
