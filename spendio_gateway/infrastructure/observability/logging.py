"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from spendio_gateway.config import settings


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

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_ai_request(
    request_id: str,
    endpoint: str,
    outcome: str,
    duration_ms: float,
    **fields: Any,
) -> None:
    """Log structured outcome of a proxied AI request"""
    logging.info(
        "AI request completed",
        extra={
            "request_id": request_id,
            "step": "ai_request_complete",
            "endpoint": endpoint,
            "outcome": outcome,
            "duration_ms": duration_ms,
            **fields,
        },
    )


def log_quota_decision(
    request_id: str,
    user_id: str,
    category: str,
    plan: str,
    allowed: bool,
) -> None:
    """Log whether a transaction fit the user's monthly quota"""
    logging.info(
        "Quota checked",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "quota_check",
            "category": category,
            "plan": plan,
            "quota_outcome": "allowed" if allowed else "denied",
        },
    )
