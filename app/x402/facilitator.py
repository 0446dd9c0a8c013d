# app/x402/facilitator.py
"""
HTTP client for the x402 facilitator's /verify and /settle endpoints.

Every failure mode (undecodable token, transport error, timeout, non-2xx
status, malformed JSON) resolves to a negative outcome value instead of an
exception, so the caller can apply its own policy.
"""
import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from x402.encoding import safe_base64_decode, safe_base64_encode

from app.core.config import settings
from app.x402.challenge import build_payment_requirements, get_facilitator_url
from app.x402.models import SettlementResult, VerificationOutcome

logger = logging.getLogger(__name__)

INVALID_ENCODING_ERROR = "Invalid payment signature encoding"


def decode_payment_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a PAYMENT-SIGNATURE / X-PAYMENT value into the payment payload.

    Args:
        token: Base64-encoded JSON payment payload

    Returns:
        The decoded payload dict, or None if it is not base64-encoded JSON
    """
    if not token:
        return None

    try:
        decoded_str = safe_base64_decode(token)
        if decoded_str is None:
            logger.warning("x402: Failed to decode payment token: invalid base64")
            return None

        payload = json.loads(decoded_str)

    except json.JSONDecodeError as e:
        logger.warning(f"x402: Failed to parse payment token JSON: {e}")
        return None
    except Exception as e:
        logger.warning(f"x402: Failed to decode payment token: {e}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"x402: Payment token is not a JSON object: {type(payload)}")
        return None
    return payload


class FacilitatorClient:
    """
    Talks to a remote x402 facilitator.

    Both operations rebuild the payment requirement for the resource path, so
    verification and settlement always use the exact terms a 402 challenge for
    that path offers.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        verify_timeout: Optional[float] = None,
        settle_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or get_facilitator_url()).rstrip("/")
        self.verify_timeout = verify_timeout if verify_timeout is not None else settings.X402_VERIFY_TIMEOUT
        self.settle_timeout = settle_timeout if settle_timeout is not None else settings.X402_SETTLE_TIMEOUT
        self._session = session or requests.Session()

    def _build_request_body(self, payload: Dict[str, Any], resource: str) -> Dict[str, Any]:
        requirements = build_payment_requirements(resource)
        return {
            "paymentPayload": payload,
            "paymentRequirements": requirements.model_dump(by_alias=True),
        }

    def _post(
        self,
        operation: str,
        body: Dict[str, Any],
        timeout: float
    ) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """
        POST to the facilitator and return (json_body, error).

        Exactly one of the two is set.
        """
        url = f"{self.base_url}/{operation}"
        try:
            response = self._session.post(
                url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
        except RequestException as e:
            logger.error(f"x402: Facilitator {operation} request failed ({url}): {e}")
            return None, f"Facilitator unreachable: {e}"

        if not response.ok:
            text = response.text or ""
            logger.warning(f"x402: Facilitator {operation} returned {response.status_code}: {text}")
            return None, f"Facilitator {operation} returned {response.status_code}: {text}"

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"x402: Facilitator {operation} returned invalid JSON: {e}")
            return None, f"Facilitator unreachable: invalid JSON response ({e})"

        if not isinstance(data, dict):
            logger.error(f"x402: Unexpected {operation} response structure: {type(data)}")
            return None, f"Facilitator unreachable: unexpected response type {type(data).__name__}"

        return data, None

    def verify(self, token: str, resource: str) -> VerificationOutcome:
        """
        Verify a payment token against the requirement for ``resource``.

        No on-chain action is taken.
        """
        payload = decode_payment_token(token)
        if payload is None:
            return VerificationOutcome(valid=False, error=INVALID_ENCODING_ERROR)

        data, error = self._post("verify", self._build_request_body(payload, resource), self.verify_timeout)
        if error is not None:
            return VerificationOutcome(valid=False, error=error)

        try:
            if data.get("isValid") is not True:
                return VerificationOutcome(
                    valid=False,
                    payer=data.get("payer"),
                    error=data.get("invalidReason") or "Payment verification failed",
                )

            return VerificationOutcome(valid=True, payer=data.get("payer"))
        except ValidationError as e:
            logger.error(f"x402: Malformed verify response: {e}")
            return VerificationOutcome(
                valid=False,
                error=f"Malformed verify response: {data}",
            )

    def settle(self, token: str, resource: str) -> SettlementResult:
        """
        Settle a previously verified payment token on-chain.

        The facilitator's result is returned as-is; failures become
        ``success=False`` with an ``errorReason``.
        """
        payload = decode_payment_token(token)
        if payload is None:
            return SettlementResult(success=False, error_reason=INVALID_ENCODING_ERROR)

        data, error = self._post("settle", self._build_request_body(payload, resource), self.settle_timeout)
        if error is not None:
            return SettlementResult(success=False, error_reason=error)

        try:
            return SettlementResult.model_validate(data)
        except ValidationError as e:
            logger.error(f"x402: Malformed settle response: {e}")
            return SettlementResult(
                success=False,
                error_reason=f"Malformed settle response: {data}",
            )


def encode_payment_response(settlement: SettlementResult) -> str:
    """
    Encode a settlement result for the PAYMENT-RESPONSE header.

    Returns:
        Base64-encoded JSON string
    """
    response_dict = settlement.model_dump(by_alias=True, exclude_unset=True)
    response_json = json.dumps(response_dict)
    return safe_base64_encode(response_json.encode("utf-8"))
