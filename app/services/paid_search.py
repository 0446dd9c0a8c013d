# app/services/paid_search.py
"""
x402-gated search request flow.

One request moves through these states, never revisiting one:

    received -> rejected (400, bad query)
             -> challenged (402, no payment token)
             -> verifying -> challenged (402, fresh challenge on invalid payment)
                          -> executing -> settling -> responded (200)

Nothing is remembered between requests. Every request rebuilds the challenge
and re-verifies its token; an invalid token just earns a new challenge.
Settlement runs after the results exist and only decides whether the
PAYMENT-RESPONSE header and ``payment`` field are attached.
"""
import logging
from typing import Mapping, Optional

from starlette.responses import JSONResponse, Response

from app.api.models.search import PaymentConfirmation, Pricing, SearchResponse
from app.services.identity import get_agent_identity
from app.services.search import SearchExecutor
from app.x402 import audit
from app.x402.challenge import PRICE_CURRENCY, create_402_response, get_display_amount
from app.x402.facilitator import FacilitatorClient, encode_payment_response
from app.x402.models import SettlementResult
from app.x402.signature import extract_payment_signature

logger = logging.getLogger(__name__)

PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"
MISSING_QUERY_ERROR = "Missing required query parameter: q"


def get_pricing() -> Pricing:
    return Pricing(currency=PRICE_CURRENCY, amount=get_display_amount(), unit="per_request")


class PaidSearchHandler:
    """
    Runs the payment-gated search flow for a single resource path.

    Holds only its collaborators, so one instance can serve any number of
    concurrent requests.
    """

    def __init__(
        self,
        facilitator: FacilitatorClient,
        executor: SearchExecutor,
        resource: str
    ):
        self.facilitator = facilitator
        self.executor = executor
        self.resource = resource

    def handle(self, query: Optional[str], headers: Mapping[str, str]) -> Response:
        q = (query or "").strip()
        if not q:
            return JSONResponse(status_code=400, content={"error": MISSING_QUERY_ERROR})

        request_id = audit.generate_request_id()

        payment_signature = extract_payment_signature(headers)
        if not payment_signature:
            logger.info(f"x402: No payment signature, returning 402 for {self.resource}")
            audit.log_payment_required_sent(self.resource, reason="missing", request_id=request_id)
            return create_402_response(self.resource)

        verification = self.facilitator.verify(payment_signature, self.resource)
        audit.log_payment_verified(
            payer=verification.payer,
            is_valid=verification.valid,
            invalid_reason=verification.error,
            request_id=request_id
        )
        if not verification.valid:
            logger.warning(f"x402: Payment verification failed: {verification.error}")
            audit.log_payment_required_sent(self.resource, reason="invalid", request_id=request_id)
            return create_402_response(self.resource)

        logger.info(f"x402: Payment verified for payer {verification.payer}")

        search = self.executor.execute(q)
        audit.log_search_executed(q, search.search_mode, len(search.results), request_id=request_id)

        settlement = self.facilitator.settle(payment_signature, self.resource)

        body = SearchResponse(
            query=q,
            results=search.results,
            pricing=get_pricing(),
            search_mode=search.search_mode,
            agent_identity=get_agent_identity(),
            payment=self._payment_confirmation(settlement),
        )
        response = JSONResponse(
            status_code=200,
            content=body.model_dump(by_alias=True, exclude_none=True),
        )

        if settlement.success:
            logger.info(f"x402: Payment settled, transaction {settlement.transaction}")
            audit.log_payment_settled(
                payer=settlement.payer,
                transaction_hash=settlement.transaction,
                network=settlement.network,
                request_id=request_id
            )
            response.headers[PAYMENT_RESPONSE_HEADER] = encode_payment_response(settlement)
        else:
            # Status stays 200; only the receipt header is withheld.
            logger.error(f"x402: Settlement failed: {settlement.error_reason}")
            audit.log_payment_failed(
                stage="settle",
                error_reason=settlement.error_reason,
                payer=verification.payer,
                request_id=request_id
            )

        return response

    @staticmethod
    def _payment_confirmation(settlement: SettlementResult) -> Optional[PaymentConfirmation]:
        if not settlement.transaction:
            return None
        return PaymentConfirmation(transaction=settlement.transaction, payer=settlement.payer)
