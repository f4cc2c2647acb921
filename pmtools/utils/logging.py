"""Structured logging for document saves and AI enhancement."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredEventLogger:
    """Structured logger for save and enhancement events."""

    def log_save(
        self,
        document_id: str,
        kind: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one persist attempt with structured data."""
        log_data: dict[str, Any] = {
            "event": "save",
            "document_id": document_id,
            "kind": kind,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Document save: {kind}/{document_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_enhancement(
        self,
        document_id: str | None,
        kind: str,
        source: str,
        outcome: str,
        latency_ms: float | None = None,
        suggestion_count: int = 0,
        error_reason: str | None = None,
    ) -> None:
        """Log one enhancement round-trip (``source`` is ``ai`` or ``paste``)."""
        log_data: dict[str, Any] = {
            "event": "enhancement",
            "document_id": document_id,
            "kind": kind,
            "source": source,
            "outcome": outcome,
            "suggestions": suggestion_count,
        }

        if latency_ms is not None:
            log_data["latency_ms"] = round(latency_ms, 2)
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Enhancement ({source}): {kind}/{document_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


event_logger = StructuredEventLogger()
