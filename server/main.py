"""
votetally API Server

FastAPI application wiring the tally store to HTTP routes.
The store lives on app.state for the lifetime of the process.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config, get_logger
from exceptions import InternalError, TallyError, ValidationError
from server.metrics import metrics
from server.middleware.logging import log_requests
from server.middleware.metrics import metrics_middleware
from server.middleware.request_id import RequestIDMiddleware, get_request_id
from server.routes import monitoring, votes
from server.utils.constants import SERVICE_NAME
from server.utils.responses import error_response
from tally.store import TallyStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tally store on startup, report final totals on shutdown"""
    store = TallyStore(
        seed_subjects=config.SEED_SUBJECTS,
        max_id_length=config.MAX_ID_LENGTH,
        max_vote_length=config.MAX_VOTE_LENGTH,
    )
    app.state.store = store
    logger.info("tally store ready", config_summary=config.summary())

    yield

    # Votes are not persisted; log what is being discarded
    logger.info("discarding tally store", **store.stats())
    app.state.store = None


app = FastAPI(title=SERVICE_NAME, description="Vote submission and tallies", lifespan=lifespan)

# CORS configuration - any origin by default
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware (must be early in stack for tracing)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("rejected invalid input", field=exc.field, error=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=400,
        content=error_response(exc.message, field=exc.field, request_id=get_request_id(request)),
    )


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError):
    logger.error("tally store failure", operation=exc.operation, error=str(exc), path=request.url.path)
    metrics.record_error("store", exc)
    return JSONResponse(
        status_code=500,
        content=error_response(exc.message, request_id=get_request_id(request)),
    )


@app.exception_handler(TallyError)
async def tally_error_handler(request: Request, exc: TallyError):
    logger.error("unhandled tally error", error=str(exc), path=request.url.path)
    metrics.record_error("api", exc)
    return JSONResponse(
        status_code=500,
        content=error_response(exc.message, request_id=get_request_id(request)),
    )


# CORSMiddleware only answers requests that send an Origin header; the
# wildcard policy applies to every response, so fill it in for the rest
@app.middleware("http")
async def allow_any_origin_middleware(request, call_next):
    response = await call_next(request)
    if "*" in config.ALLOWED_ORIGINS:
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
    return response


# Register middleware (execution order: metrics -> logging)
# FastAPI middleware stack: last registered runs first, so register in reverse order
@app.middleware("http")
async def log_requests_middleware(request, call_next):
    return await log_requests(request, call_next)


@app.middleware("http")
async def metrics_middleware_wrapper(request, call_next):
    return await metrics_middleware(request, call_next)


# Mount routers
app.include_router(monitoring.router)  # Root, index page, health, metrics
app.include_router(votes.router)       # Vote submission and tallies


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting votetally API server...")
    logger.info("configuration", config_summary=config.summary())

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        access_log=False,  # Request logging middleware replaces uvicorn access logs
    )
