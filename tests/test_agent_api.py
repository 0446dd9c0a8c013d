# tests/test_agent_api.py
"""
Tests for the discovery endpoint, health check and agent identity reference.
"""
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.main import app
from app.core.config import settings
from app.services.identity import get_agent_identity

client = TestClient(app)


class TestAgentIdentity:
    """Test ERC-8004 identity reference construction."""

    def test_defaults(self):
        identity = get_agent_identity().model_dump(by_alias=True)

        assert identity == {
            "standard": "ERC-8004",
            "chain": "base",
            "contract": "0x8004A169FB4a3325136EB29fA0ceB6D2e539a432",
            "tokenId": "1",
            "profileUrl": "https://www.8004scan.io/agents/base/0x8004A169FB4a3325136EB29fA0ceB6D2e539a432/1",
        }

    def test_configured_values(self):
        with patch.object(settings, "ERC8004_CHAIN", "base-sepolia"), \
                patch.object(settings, "ERC8004_CONTRACT", "0xREG"), \
                patch.object(settings, "ERC8004_TOKEN_ID", "42"), \
                patch.object(settings, "ERC8004_SCAN_BASE_URL", "https://scan.test/"):
            identity = get_agent_identity()

        assert identity.token_id == "42"
        assert identity.profile_url == "https://scan.test/agents/base-sepolia/0xREG/42"


class TestAgentEndpoint:
    """Test GET /api/agent."""

    def test_agent_info(self):
        response = client.get("/api/agent")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == settings.PROJECT_NAME
        assert body["version"]
        assert body["pricing"] == {
            "currency": "USDC",
            "amount": "0.002",
            "unit": "per_request",
            "network": "eip155:84532",
        }
        assert body["endpoints"]["search"] == "GET /api/search?q=<query>"
        assert body["agent_identity"]["tokenId"] == "1"
        assert "profileUrl" in body["agent_identity"]

    def test_agent_info_requires_no_payment(self):
        response = client.get("/api/agent")
        assert "PAYMENT-REQUIRED" not in response.headers


class TestHealthCheck:
    """Test GET /."""

    def test_root(self):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
