"""
Monitoring and health check API routes
"""

import os
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, Response

from config import config, get_logger
from server.dependencies import get_store
from server.metrics import metrics, get_metrics_text
from server.utils.constants import ENDPOINTS, SERVICE_NAME, SERVICE_VERSION
from tally.store import TallyStore

logger = get_logger(__name__)


router = APIRouter()


@router.get("/")
async def root():
    """API status and info"""
    return {
        "service": SERVICE_NAME,
        "status": "running",
        "version": SERVICE_VERSION,
        "description": "Submit votes for subjects and read live tallies",
        "endpoints": ENDPOINTS,
    }


@router.get("/index.html")
async def index_page():
    """Static voting page, served independently of the tally store"""
    if not os.path.isfile(config.INDEX_PATH):
        logger.warning("index page missing", path=config.INDEX_PATH)
        raise HTTPException(status_code=404, detail="Index page not found")
    return FileResponse(config.INDEX_PATH, media_type="text/html")


@router.get("/api/health")
async def health_check(store: TallyStore = Depends(get_store)):
    """Health check endpoint"""
    stats = store.stats()
    metrics.update_store_sizes(stats)

    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": SERVICE_VERSION,
        "checks": {
            "store": {"status": "healthy", **stats},
        },
    }
    return health_status


@router.get("/metrics")
async def prometheus_metrics(store: TallyStore = Depends(get_store)):
    """Prometheus metrics endpoint

    Returns metrics in Prometheus text format for scraping.
    Store gauges are refreshed on every scrape.
    """
    metrics.update_store_sizes(store.stats())
    return Response(content=get_metrics_text(), media_type="text/plain")
