"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from freee_notifier.config import settings


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


def log_report(
    company_id: int,
    fiscal_year: int,
    flagged_deals: int,
    current_sales: int,
    duration_ms: float,
) -> None:
    """Log structured report summary for analysis"""
    logging.getLogger("freee_notifier.report").info(
        "Report generated",
        extra={
            "company_id": company_id,
            "step": "report_complete",
            "fiscal_year": fiscal_year,
            "flagged_deals": flagged_deals,
            "current_sales": current_sales,
            "duration_ms": duration_ms,
        },
    )
