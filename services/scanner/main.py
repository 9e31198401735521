"""
Market Scanner Service - FastAPI Application

Provides endpoints for ranked scalping candidates and the top-markets view.
"""

from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from services.scanner.service import RankingPipeline, get_ranking_pipeline
from shared.config import get_settings
from shared.logging import configure_logging
from shared.models import HealthResponse, ScalpingMarketsResponse, TopMarketsResponse

logger = structlog.get_logger(__name__)

settings = get_settings()
configure_logging(settings.logging)

# Initialize FastAPI app
app = FastAPI(
    title="ScalpFinder - Market Scanner",
    description="Ranks Polymarket markets for tight-spread market making",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Service instance
_ranking_pipeline: RankingPipeline | None = None


def get_service() -> RankingPipeline:
    """Get or create ranking pipeline instance."""
    global _ranking_pipeline
    if _ranking_pipeline is None:
        _ranking_pipeline = get_ranking_pipeline()
    return _ranking_pipeline


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version="0.1.0")


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check."""
    return {"status": "ready"}


# =============================================================================
# Market Endpoints
# =============================================================================


@app.get("/markets", response_model=TopMarketsResponse, tags=["Markets"])
async def get_top_markets(
    limit: int = Query(default=20, le=100, ge=1, description="Markets to fetch"),
) -> TopMarketsResponse:
    """
    Get the top markets by 24h volume.

    Each market carries best bid/ask, spread and a fill-likelihood score.
    """
    service = get_service()

    try:
        markets = await service.evaluate_top_markets(limit=limit)
        return TopMarketsResponse(count=len(markets), markets=markets)
    except Exception as e:
        logger.error("get_top_markets_error", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/scalping-markets", response_model=ScalpingMarketsResponse, tags=["Scalping"])
async def get_scalping_markets(
    limit: int = Query(default=30, le=100, ge=1, description="Requested candidates"),
) -> ScalpingMarketsResponse:
    """
    Get markets ranked by scalping score.

    Twice as many markets as requested are evaluated; excluded markets
    are returned last with their exclusion reason.
    """
    service = get_service()

    try:
        results = await service.rank_markets(limit=limit)
        return ScalpingMarketsResponse(count=len(results), markets=results)
    except Exception as e:
        logger.error("get_scalping_markets_error", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/scalping-markets/summary", tags=["Scalping"])
async def get_scalping_summary(
    limit: int = Query(default=30, le=100, ge=1, description="Requested candidates"),
) -> dict[str, Any]:
    """
    Get exclusion statistics for a ranking pass.
    """
    service = get_service()

    try:
        results = await service.rank_markets(limit=limit)
        return service.get_ranking_summary(results)
    except Exception as e:
        logger.error("get_scalping_summary_error", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# Scanner Configuration Endpoint
# =============================================================================


@app.get("/scanner/config", tags=["Configuration"])
async def get_scanner_config() -> dict[str, Any]:
    """
    Get current exclusion thresholds and scoring weights.
    """
    settings = get_settings()

    return {
        "scanner": settings.scanner.model_dump(),
        "scoring_weights": settings.scoring_weights.model_dump(),
    }


# =============================================================================
# Main Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.scanner.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
