# app/x402/signature.py
"""Payment token extraction from inbound request headers."""
from typing import Mapping, Optional

PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
# x402 v1 header name, still sent by older clients
X_PAYMENT_HEADER = "X-PAYMENT"


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works on plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def extract_payment_signature(headers: Mapping[str, str]) -> Optional[str]:
    """
    Return the raw payment token from PAYMENT-SIGNATURE or X-PAYMENT.

    The token is not decoded or validated here. Empty values count as absent.
    """
    for name in (PAYMENT_SIGNATURE_HEADER, X_PAYMENT_HEADER):
        value = _get_header(headers, name)
        if value:
            return value
    return None
