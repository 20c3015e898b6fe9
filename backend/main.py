from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dyematch import __version__
from dyematch.api.v1 import router as v1_router
from dyematch.config import config
from dyematch.schemas import HealthResponse
from dyematch.services.orchestrator import MatchOrchestrator, get_orchestrator
from dyematch.utils.logging import get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = get_logger()
    # Fail fast on a broken palette file instead of on the first request
    palette = get_orchestrator().palette
    logger.info("DyeMatch started", extra={"dyes": len(palette), "version": __version__})
    yield
    logger.info("DyeMatch stopped")


app = FastAPI(
    title="DyeMatch Backend",
    description="Match colors and image samples against a fixed dye palette",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.ALLOWED_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def healthz(orchestrator: MatchOrchestrator = Depends(get_orchestrator)):
    """Health check endpoint."""
    return HealthResponse(
        ok=True,
        version=__version__,
        service="dyematch",
        dyes_loaded=len(orchestrator.palette)
    )


@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "message": "DyeMatch Backend API",
        "version": __version__,
        "endpoints": {
            "health": "/healthz",
            "dyes": "/v1/dyes",
            "match": "/v1/match",
            "harmony": "/v1/harmony",
            "sessions": "/v1/sessions",
            "metrics": "/v1/metrics",
            "docs": "/docs"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
