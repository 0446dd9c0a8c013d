# app/x402/audit.py
"""
Audit logging for x402 payment events.

This module records the payment lifecycle of each paid search for:
- Financial reconciliation (settlements that failed after delivery)
- Debugging facilitator failures
- Dispute resolution

Log format: JSON lines (one event per line)
Log location: Configured via X402_AUDIT_LOG_PATH
Enabled via: X402_AUDIT_ENABLED

Audit writes never raise; a failed write is logged and the request carries on.
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events that can be logged."""
    PAYMENT_REQUIRED_SENT = "payment_required_sent"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_FAILED = "payment_failed"
    SEARCH_EXECUTED = "search_executed"
    PAYMENT_SETTLED = "payment_settled"


def generate_request_id() -> str:
    """Generate a unique request ID for tracking."""
    return str(uuid.uuid4())[:8]


def get_audit_log_path() -> Path:
    return Path(settings.X402_AUDIT_LOG_PATH)


def create_audit_event(
    event_type: AuditEventType,
    data: Dict[str, Any],
    wallet_address: Optional[str] = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create an audit event dictionary.

    Args:
        event_type: Type of event to log
        data: Event-specific data
        wallet_address: Payer wallet address (if known)
        request_id: Unique request identifier (if available)

    Returns:
        A structured event ready to be written to the audit log
    """
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type.value,
        "request_id": request_id or generate_request_id(),
        "wallet_address": wallet_address,
        "data": data
    }


def log_audit_event(
    event_type: AuditEventType,
    data: Dict[str, Any],
    wallet_address: Optional[str] = None,
    request_id: Optional[str] = None
) -> Optional[str]:
    """
    Append an audit event to the x402 audit log.

    Returns:
        The request_id used for this event, or None if auditing is disabled
        or the write failed
    """
    if not settings.X402_AUDIT_ENABLED:
        return None

    event = create_audit_event(
        event_type=event_type,
        data=data,
        wallet_address=wallet_address,
        request_id=request_id
    )

    try:
        log_path = get_audit_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "a") as f:
            f.write(json.dumps(event) + "\n")

        logger.debug(f"Audit event logged: {event_type.value} [{event['request_id']}]")
        return event["request_id"]

    except Exception as e:
        logger.error(f"Failed to write audit event: {e}")
        return None


# Convenience functions for specific event types

def log_payment_required_sent(
    resource: str,
    reason: str,
    request_id: Optional[str] = None
) -> Optional[str]:
    """Log a 402 challenge. ``reason`` is "missing" or "invalid"."""
    return log_audit_event(
        event_type=AuditEventType.PAYMENT_REQUIRED_SENT,
        data={
            "resource": resource,
            "reason": reason,
            "amount": str(settings.X402_PRICE_UNITS),
            "network": settings.X402_NETWORK,
        },
        request_id=request_id
    )


def log_payment_verified(
    payer: Optional[str],
    is_valid: bool,
    invalid_reason: Optional[str] = None,
    request_id: Optional[str] = None
) -> Optional[str]:
    return log_audit_event(
        event_type=AuditEventType.PAYMENT_VERIFIED,
        data={
            "is_valid": is_valid,
            "invalid_reason": invalid_reason,
        },
        wallet_address=payer,
        request_id=request_id
    )


def log_search_executed(
    query: str,
    search_mode: str,
    result_count: int,
    request_id: Optional[str] = None
) -> Optional[str]:
    return log_audit_event(
        event_type=AuditEventType.SEARCH_EXECUTED,
        data={
            "query": query,
            "search_mode": search_mode,
            "result_count": result_count,
        },
        request_id=request_id
    )


def log_payment_settled(
    payer: Optional[str],
    transaction_hash: Optional[str],
    network: Optional[str],
    request_id: Optional[str] = None
) -> Optional[str]:
    return log_audit_event(
        event_type=AuditEventType.PAYMENT_SETTLED,
        data={
            "transaction_hash": transaction_hash,
            "network": network,
        },
        wallet_address=payer,
        request_id=request_id
    )


def log_payment_failed(
    stage: str,
    error_reason: Optional[str],
    payer: Optional[str] = None,
    request_id: Optional[str] = None
) -> Optional[str]:
    """Log a settlement that did not complete after results were delivered."""
    return log_audit_event(
        event_type=AuditEventType.PAYMENT_FAILED,
        data={
            "stage": stage,
            "error_reason": error_reason,
        },
        wallet_address=payer,
        request_id=request_id
    )
