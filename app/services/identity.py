# app/services/identity.py
"""
ERC-8004 agent identity reference.

Links this service to its on-chain agent registration (an ERC-721 token in
the identity registry). Read-only: the reference is assembled from
configuration on every call and the registry itself is never queried.
"""
from app.api.models.search import AgentIdentity
from app.core.config import settings


def get_agent_identity() -> AgentIdentity:
    chain = settings.ERC8004_CHAIN
    contract = settings.ERC8004_CONTRACT
    token_id = settings.ERC8004_TOKEN_ID
    scan_base = settings.ERC8004_SCAN_BASE_URL.rstrip("/")

    return AgentIdentity(
        chain=chain,
        contract=contract,
        token_id=token_id,
        profile_url=f"{scan_base}/agents/{chain}/{contract}/{token_id}",
    )
