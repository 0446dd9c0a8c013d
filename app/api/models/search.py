# app/api/models/search.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional


SearchMode = Literal["duckduckgo", "stub", "fallback_stub"]


class SearchResult(BaseModel):
    """A single web search hit."""
    title: str
    url: str
    snippet: str = ""


class Pricing(BaseModel):
    currency: str = Field(default="USDC", description="Settlement asset")
    amount: str = Field(..., description="Price per request in whole asset units", example="0.002")
    unit: str = Field(default="per_request")


class AgentIdentity(BaseModel):
    """
    ERC-8004 agent identity reference.

    Display only: the values come from configuration and the registry is not
    queried at request time.
    """
    model_config = ConfigDict(populate_by_name=True)

    standard: Literal["ERC-8004"] = "ERC-8004"
    chain: str
    contract: str
    token_id: str = Field(..., alias="tokenId")
    profile_url: str = Field(..., alias="profileUrl")


class PaymentConfirmation(BaseModel):
    transaction: str = Field(..., description="On-chain settlement transaction hash")
    payer: Optional[str] = Field(default=None, description="Payer wallet address")


class SearchResponse(BaseModel):
    """Response model for a paid search."""
    query: str
    results: List[SearchResult]
    pricing: Pricing
    provider: str = "micropaid-search-api"
    search_mode: SearchMode
    agent_identity: AgentIdentity
    payment: Optional[PaymentConfirmation] = None


class AgentPricing(Pricing):
    network: str


class AgentInfoResponse(BaseModel):
    """Response model for the service discovery endpoint."""
    name: str
    description: str
    version: str
    pricing: AgentPricing
    endpoints: Dict[str, str]
    agent_identity: AgentIdentity
