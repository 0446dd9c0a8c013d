# app/x402/__init__.py
"""
x402 Payment Protocol Integration Module.

This module implements the seller side of the x402 v2 payment protocol for
the micropaid search API.

Key components:
- challenge: PaymentRequired challenge and 402 response construction
- signature: Payment token extraction from request headers
- facilitator: Verify/settle calls to the remote facilitator
- models: x402 v2 wire models
- audit: Payment event audit logging

Configuration is loaded from environment variables via app.core.config.
"""

__version__ = "0.1.0"
