"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from rent_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_schedule_created(
    request_id: str,
    tenant_id: str,
    period_count: int,
    pro_rated_count: int,
    duration_ms: float,
) -> None:
    """Log a persisted lease schedule"""
    logging.info(
        "Lease schedule created",
        extra={
            "request_id": request_id,
            "tenant_id": tenant_id,
            "step": "schedule_created",
            "period_count": period_count,
            "pro_rated_count": pro_rated_count,
            "duration_ms": duration_ms,
        },
    )


def log_payment_recorded(request_id: str, payment_id: str, amount_paid: str, outcome: str) -> None:
    """Log the outcome of recording a payment"""
    logging.info(
        "Payment recorded" if outcome == "recorded" else "Payment not recorded",
        extra={
            "request_id": request_id,
            "payment_id": payment_id,
            "step": "payment_recorded",
            "amount_paid": amount_paid,
            "outcome": outcome,
        },
    )
