# app/main.py
from fastapi import FastAPI
from app.core.config import settings
from app.core.version import VERSION
from app.api.endpoints import search, agent
import logging

# Configure basic logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json"
)

# All routes live under /api; /api/search is the x402 resource path
app.include_router(search.router, prefix=settings.API_PREFIX, tags=["search"])
app.include_router(agent.router, prefix=settings.API_PREFIX, tags=["agent"])

@app.get("/", summary="Health Check", tags=["default"])
def read_root():
    """ Basic health check endpoint. """
    logger.info("Root endpoint '/' accessed.")
    return {"status": "ok", "message": f"Welcome to {settings.PROJECT_NAME}"}
