# app/core/config.py
from pydantic_settings import BaseSettings
from pydantic import AnyHttpUrl # AnyHttpUrl stays in pydantic core
from functools import lru_cache
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Micropaid Search API"
    API_PREFIX: str = "/api"

    # x402 payment settings
    X402_FACILITATOR_URL: AnyHttpUrl = "https://www.x402.org/facilitator"
    X402_PAY_TO_ADDRESS: str = ""
    X402_NETWORK: str = "eip155:84532"  # Base Sepolia (CAIP-2)
    X402_ASSET_ADDRESS: str = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"  # USDC on Base Sepolia
    X402_ASSET_NAME: str = "USD Coin"  # EIP-712 domain name
    X402_ASSET_VERSION: str = "2"  # EIP-712 domain version
    X402_ASSET_DECIMALS: int = 6
    X402_PRICE_UNITS: int = 2000  # $0.002 in USDC smallest units
    X402_MAX_TIMEOUT_SECONDS: int = 60
    X402_VERIFY_TIMEOUT: float = 15.0
    X402_SETTLE_TIMEOUT: float = 30.0

    # Audit log
    X402_AUDIT_ENABLED: bool = False
    X402_AUDIT_LOG_PATH: str = "logs/x402_audit.jsonl"

    # Search provider: "duckduckgo" (live, falls back to stub) or "stub"
    SEARCH_PROVIDER: str = "duckduckgo"
    SEARCH_TIMEOUT: float = 8.0
    SEARCH_MAX_RESULTS: int = 5

    # ERC-8004 agent identity (display only)
    ERC8004_CHAIN: str = "base"
    ERC8004_CONTRACT: str = "0x8004A169FB4a3325136EB29fA0ceB6D2e539a432"
    ERC8004_TOKEN_ID: str = "1"
    ERC8004_SCAN_BASE_URL: str = "https://www.8004scan.io"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env

@lru_cache() # Cache the settings object for performance
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
