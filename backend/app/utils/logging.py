"""Logging setup and structured event loggers."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)


class StructuredDocumentLogger:
    """Structured logger for document generation."""

    def log_generation(
        self,
        kind: str,
        destination_id: int,
        outcome: str,
        latency_ms: float,
        cache_hit: bool = False,
        digest: str | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log document generation with structured data."""
        log_data: dict[str, Any] = {
            "kind": kind,
            "destination_id": destination_id,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "cache_hit": cache_hit,
        }

        if digest:
            log_data["digest"] = digest[:12]
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Document generation: {kind} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


class StructuredPurchaseLogger:
    """Structured logger for purchase status transitions."""

    def log_transition(
        self,
        payment_intent_id: str,
        status: str,
        progress: int,
        error_reason: str | None = None,
    ) -> None:
        """Log a purchase status change with structured data."""
        log_data: dict[str, Any] = {
            "payment_intent_id": payment_intent_id,
            "status": status,
            "progress": progress,
        }
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Purchase {payment_intent_id} -> {status}"
        if status == "failed":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})
