# app/api/endpoints/agent.py
from fastapi import APIRouter
import logging

from app.api.models.search import AgentInfoResponse, AgentPricing
from app.core.config import settings
from app.core.version import VERSION
from app.services.identity import get_agent_identity
from app.services.paid_search import get_pricing

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/agent", response_model=AgentInfoResponse, response_model_by_alias=True)
def get_agent_info() -> AgentInfoResponse:
    """
    Service metadata and ERC-8004 agent identity.

    Discovery endpoint; no payment required.
    """
    logger.info("Agent discovery endpoint accessed.")
    pricing = get_pricing()
    return AgentInfoResponse(
        name=settings.PROJECT_NAME,
        description="Pay-per-query web search via x402. Agent identity via ERC-8004.",
        version=VERSION,
        pricing=AgentPricing(**pricing.model_dump(), network=settings.X402_NETWORK),
        endpoints={
            "search": f"GET {settings.API_PREFIX}/search?q=<query>",
            "agent": f"GET {settings.API_PREFIX}/agent",
        },
        agent_identity=get_agent_identity(),
    )
