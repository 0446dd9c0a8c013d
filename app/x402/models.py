# app/x402/models.py
"""
x402 v2 wire models.

Field names follow the protocol's camelCase JSON; Python code uses the
snake_case attribute names. Always serialise with ``by_alias=True``.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentRequirements(BaseModel):
    """One accepted way to pay for a resource."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    scheme: Literal["exact"] = "exact"
    network: str
    amount: str = Field(..., description="Price in the asset's smallest unit, as an integer string")
    asset: str
    pay_to: str = Field(..., alias="payTo")
    max_timeout_seconds: int = Field(..., alias="maxTimeoutSeconds")
    extra: Dict[str, Any] = Field(default_factory=dict)


class ResourceInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class PaymentRequired(BaseModel):
    """The challenge body sent with HTTP 402."""
    model_config = ConfigDict(populate_by_name=True)

    x402_version: Literal[2] = Field(default=2, alias="x402Version")
    resource: ResourceInfo
    accepts: List[PaymentRequirements]
    error: Optional[str] = None


class VerificationOutcome(BaseModel):
    valid: bool
    payer: Optional[str] = None
    error: Optional[str] = None


class SettlementResult(BaseModel):
    """
    Settlement result as returned by the facilitator.

    Unknown keys are kept so the facilitator's full result can be forwarded
    in the PAYMENT-RESPONSE header unmodified.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool
    transaction: Optional[str] = None
    payer: Optional[str] = None
    network: Optional[str] = None
    error_reason: Optional[str] = Field(default=None, alias="errorReason")
