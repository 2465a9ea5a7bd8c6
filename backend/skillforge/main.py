"""FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skillforge.api.routes import catalog, roadmaps, websocket, workflows
from skillforge.core.config import get_settings
from skillforge.core.exceptions import (
    GatewayError,
    GenerationFailed,
    MalformedResponse,
    RoadmapConflict,
    SkillForgeError,
)
from skillforge.core.logging import (
    bind_log_context,
    clear_log_context,
    configure_logging,
    get_logger,
)
from skillforge.services.gateway import RoadmapGateway, create_http_client
from skillforge.services.roadmap_orchestrator import RoadmapOrchestrator

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    configure_logging(debug=settings.DEBUG)
    logger.info(
        "Starting SkillForge roadmap orchestration",
        version=settings.APP_VERSION,
        env=settings.ENV,
        backend=settings.API_BASE_URL,
    )
    client = create_http_client(settings)
    app.state.orchestrator = RoadmapOrchestrator(RoadmapGateway(client), settings)
    yield
    # Shutdown
    logger.info("Shutting down SkillForge roadmap orchestration")
    app.state.orchestrator.shutdown()
    await client.aclose()


def error_status(error: SkillForgeError) -> int:
    """HTTP status for an orchestration error that reached the API."""
    if isinstance(error, RoadmapConflict):
        return status.HTTP_409_CONFLICT
    if isinstance(error, GatewayError) and error.status_code in (
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
        status.HTTP_404_NOT_FOUND,
    ):
        return error.status_code
    if isinstance(error, GatewayError | GenerationFailed | MalformedResponse):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Roadmap generation and workflow orchestration for SkillForge",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    clear_log_context()
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    bind_log_context(request_id=request_id, path=request.url.path)
    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(SkillForgeError)
async def skillforge_error_handler(request: Request, exc: SkillForgeError) -> JSONResponse:
    code = error_status(exc)
    logger.warning(
        "Request failed",
        error_type=type(exc).__name__,
        status_code=code,
        error=str(exc),
    )
    return JSONResponse(status_code=code, content={"detail": exc.message, "error": exc.to_dict()})


# Include routers
app.include_router(roadmaps.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")
app.include_router(workflows.router, prefix="/api")
app.include_router(websocket.router)  # WebSocket routes


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "env": settings.ENV,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
