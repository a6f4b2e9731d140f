"""
FastAPI web service for genealogy metasearch.

Serves the Metasuche endpoint and health checks.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from genealogy_metasearch import __version__
from genealogy_metasearch.adapters.metasuche import api as metasuche
from genealogy_metasearch.adapters.metasuche import metasearch_router

logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown."""
    # Startup
    search = metasuche.get_search()
    if search.settings.migrate(__version__):
        logger.info("Preferences updated for version %s", __version__)
    await search.store.connect()

    yield

    # Shutdown
    await search.store.close()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Genealogy MetaSearch API",
    description="Federated search over public family trees for the CompGen Metasuche.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(metasearch_router)


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        version=__version__,
    )


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """Check if the trees can be listed."""
    try:
        trees = await metasuche.get_search().trees()
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        raise HTTPException(status_code=503, detail="Trees not available")
    return {"status": "ready", "trees": len(trees)}


# =============================================================================
# Main Entry Point
# =============================================================================

def main(host: str = "0.0.0.0", port: int = 8000) -> None:
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
