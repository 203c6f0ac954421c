"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from mfi_backoffice.config import settings


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


def log_submission(request_id: str, application_id: str, loan_type: str, loan_amount: float) -> None:
    logging.info(
        "Application submitted",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "step": "application_submitted",
            "loan_type": loan_type,
            "loan_amount": loan_amount,
        },
    )


def log_status_change(request_id: str, application_id: str, previous: str, current: str, actor: str) -> None:
    """Log a status transition for audit and decision-latency analysis"""
    logging.info(
        "Application status changed",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "step": "status_change",
            "previous_status": previous,
            "new_status": current,
            "actor": actor,
        },
    )


def log_report(request_id: str, report: str, application_count: int, duration_ms: float) -> None:
    logging.info(
        "Report generated",
        extra={
            "request_id": request_id,
            "report": report,
            "application_count": application_count,
            "duration_ms": duration_ms,
        },
    )


def log_upload_batch(request_id: str, related_to: str, related_id: str, stored: int, failed: int) -> None:
    logging.info(
        "Document upload batch processed",
        extra={
            "request_id": request_id,
            "related_to": related_to,
            "related_id": related_id,
            "stored": stored,
            "failed": failed,
        },
    )


def log_file_removal_failure(request_id: str, document_id: str, file_path: str) -> None:
    """Metadata was removed but the stored file remains on disk"""
    logging.warning(
        "Stored file could not be removed",
        extra={
            "request_id": request_id,
            "document_id": document_id,
            "file_path": file_path,
            "step": "document_delete",
        },
    )
