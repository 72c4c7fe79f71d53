"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter

from recovery_engine.config import settings


class CustomJsonFormatter(JsonFormatter):
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


def log_scoring(request_id: str, case_id: str, recovery_probability: int, sla_breach_risk: str) -> None:
    logging.info(
        "Case scored",
        extra={
            "request_id": request_id,
            "case_id": case_id,
            "step": "scoring_complete",
            "recovery_probability": recovery_probability,
            "sla_breach_risk": sla_breach_risk,
        },
    )


def log_allocation(request_id: str, case_id: str, partner_id: Optional[str], mode: str) -> None:
    """Log a single-case allocation outcome"""
    logging.info(
        "Case allocated",
        extra={
            "request_id": request_id,
            "case_id": case_id,
            "step": "allocation_complete",
            "partner_id": partner_id,
            "mode": mode,
        },
    )


def log_batch_allocation(request_id: str, assigned_count: int, duration_ms: float) -> None:
    logging.info(
        "Batch allocation completed",
        extra={
            "request_id": request_id,
            "step": "batch_allocation_complete",
            "assigned_count": assigned_count,
            "duration_ms": duration_ms,
        },
    )
