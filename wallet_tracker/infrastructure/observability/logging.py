"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from pythonjsonlogger import jsonlogger

from wallet_tracker.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_mutation(
    operation: str,
    user_id: str,
    transaction_id: Optional[str],
    affected_keys: Iterable[Any],
    duration_ms: float,
    request_id: Optional[str] = None,
) -> None:
    """Log structured outcome of a transaction mutation"""
    logging.getLogger("wallet_tracker.mutations").info(
        "Transaction mutation completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": f"transaction_{operation}",
            "transaction_id": transaction_id,
            "affected_keys": [
                f"{k.category_id}:{k.year}-{k.month:02d}" for k in affected_keys
            ],
            "duration_ms": duration_ms,
        },
    )
