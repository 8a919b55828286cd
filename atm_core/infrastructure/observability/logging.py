"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from atm_core.config import settings
from atm_core.domain.models import Transaction


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


def log_settlement(txn: Transaction, available_balance: Any = None) -> None:
    """Log structured settlement outcome for audit analysis"""
    logging.getLogger("atm_core.settlement").info(
        "Transaction settled",
        extra={
            "transaction_id": txn.id,
            "account_id": txn.account_id,
            "step": "settlement_complete",
            "transaction_type": txn.type.value,
            "outcome": txn.status.value,
            "amount": str(txn.amount),
            "balance_after": str(txn.balance_after),
            "available_balance": str(available_balance) if available_balance is not None else None,
        },
    )
