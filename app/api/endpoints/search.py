# app/api/endpoints/search.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.responses import Response

from app.core.config import settings
from app.services.paid_search import PaidSearchHandler
from app.services.search import SearchExecutor, get_search_executor
from app.x402.facilitator import FacilitatorClient

router = APIRouter()

SEARCH_RESOURCE = f"{settings.API_PREFIX}/search"


def get_facilitator_client() -> FacilitatorClient:
    return FacilitatorClient()


@router.get(
    "/search",
    summary="x402-gated web search",
    responses={
        200: {"description": "Search results; PAYMENT-RESPONSE header carries the settlement receipt"},
        400: {"description": "Missing or empty query"},
        402: {"description": "Payment required; PAYMENT-REQUIRED header carries the challenge"},
    },
)
def search(
    request: Request,
    q: Optional[str] = Query(default=None, description="Search query"),
    facilitator: FacilitatorClient = Depends(get_facilitator_client),
    executor: SearchExecutor = Depends(get_search_executor),
) -> Response:
    """
    Micropaid web search.

    Send the request without payment to receive a 402 challenge, then retry
    with a signed x402 payment in the PAYMENT-SIGNATURE (or legacy X-PAYMENT)
    header.
    """
    handler = PaidSearchHandler(facilitator=facilitator, executor=executor, resource=SEARCH_RESOURCE)
    return handler.handle(q, request.headers)
