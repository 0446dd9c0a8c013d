# app/x402/challenge.py
"""
Payment challenge construction for x402 402 responses.

The challenge is never stored. It is rebuilt from settings and the resource
path whenever it is needed, so the requirement offered to an unpaid client is
the same one later sent to the facilitator for verify and settle.
"""
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from starlette.responses import JSONResponse

from x402.encoding import safe_base64_encode

from app.core.config import settings
from app.x402.models import PaymentRequired, PaymentRequirements, ResourceInfo

logger = logging.getLogger(__name__)

# x402 protocol constants
X402_VERSION = 2
PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
WWW_AUTHENTICATE_HEADER = "WWW-Authenticate"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

RESOURCE_MIME_TYPE = "application/json"
PRICE_CURRENCY = "USDC"
DEFAULT_CHALLENGE_ERROR = (
    "Payment required. Include PAYMENT-SIGNATURE header with a valid x402 payment."
)


def get_display_amount() -> str:
    """
    Price in whole asset units as a decimal string, e.g. 2000 -> "0.002".

    Uses Decimal so the value shown to clients matches the integer amount
    in the payment requirement exactly.
    """
    units = Decimal(int(settings.X402_PRICE_UNITS))
    amount = units.scaleb(-settings.X402_ASSET_DECIMALS)
    return format(amount.normalize(), "f")


def get_resource_description() -> str:
    return f"Micropaid web search - ${get_display_amount()} per query"


def get_pay_to_address() -> str:
    """Configured payee, or the zero address when none is set."""
    pay_to = settings.X402_PAY_TO_ADDRESS
    if not pay_to:
        logger.warning("X402_PAY_TO_ADDRESS not configured - using placeholder")
        return ZERO_ADDRESS
    return pay_to


def get_facilitator_url() -> str:
    return str(settings.X402_FACILITATOR_URL).rstrip("/")


def build_payment_requirements(resource: str) -> PaymentRequirements:
    """
    Build the single "exact" payment requirement for a resource path.

    The amount is the configured integer price in the asset's smallest unit.
    ``extra`` carries the EIP-712 domain parameters a client needs to sign an
    EIP-3009 TransferWithAuthorization for the asset.

    Args:
        resource: Resource path the payment is bound to

    Returns:
        Frozen PaymentRequirements
    """
    return PaymentRequirements(
        scheme="exact",
        network=settings.X402_NETWORK,
        amount=str(int(settings.X402_PRICE_UNITS)),
        asset=settings.X402_ASSET_ADDRESS,
        pay_to=get_pay_to_address(),
        max_timeout_seconds=settings.X402_MAX_TIMEOUT_SECONDS,
        extra={
            "name": settings.X402_ASSET_NAME,
            "version": settings.X402_ASSET_VERSION,
        },
    )


def build_payment_required(resource: str, error: Optional[str] = None) -> PaymentRequired:
    """Build the full x402 v2 challenge for a resource path."""
    return PaymentRequired(
        x402_version=X402_VERSION,
        resource=ResourceInfo(
            url=resource,
            description=get_resource_description(),
            mime_type=RESOURCE_MIME_TYPE,
        ),
        accepts=[build_payment_requirements(resource)],
        error=error,
    )


def challenge_to_dict(challenge: PaymentRequired) -> Dict[str, Any]:
    return challenge.model_dump(by_alias=True, exclude_none=True)


def encode_payment_required(challenge: PaymentRequired) -> str:
    """
    Encode a challenge for the PAYMENT-REQUIRED header.

    Returns:
        Base64-encoded JSON string
    """
    challenge_json = json.dumps(challenge_to_dict(challenge))
    return safe_base64_encode(challenge_json.encode("utf-8"))


def create_402_response(
    resource: str,
    error_message: str = DEFAULT_CHALLENGE_ERROR
) -> JSONResponse:
    """
    Create an HTTP 402 Payment Required response with a fresh challenge.

    The header carries the bare challenge; the body adds the error message.

    Args:
        resource: Resource path the challenge is bound to
        error_message: Human-readable error for the response body

    Returns:
        JSONResponse with 402 status and x402 headers
    """
    challenge = build_payment_required(resource)
    body = challenge_to_dict(challenge)
    body["error"] = error_message

    return JSONResponse(
        status_code=402,
        content=body,
        headers={
            PAYMENT_REQUIRED_HEADER: encode_payment_required(challenge),
            WWW_AUTHENTICATE_HEADER: f'x402 facilitator="{get_facilitator_url()}"',
        },
    )
