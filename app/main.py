"""
Vendor TCO - Financial Analysis Engine for Vendor Evaluation

Main FastAPI application entry point. Configures routes, error handling,
and application lifecycle events.

Version: 1.0.0
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

# Import logging configuration (initializes logging)
from app.logging_config import get_logger
from app.errors import FinancialAnalysisError

# Import route modules
from app.routes import projects
from app.routes import financial

# Get logger for this module
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Handles startup and shutdown events for the application.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Vendor TCO Application Starting")
    logger.info(f"Version: {app.version}")
    logger.info("=" * 60)

    yield  # Application runs here

    # Shutdown
    logger.info("Vendor TCO Application Shutting Down")
    logger.info("=" * 60)


# Create FastAPI application instance
app = FastAPI(
    title="Vendor TCO",
    description="Total cost of ownership, sensitivity analysis and ROI for vendor evaluations.",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(FinancialAnalysisError)
async def financial_error_handler(request: Request, exc: FinancialAnalysisError):
    """Return engine errors as JSON with the status their kind maps to."""
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.get("/")
async def root():
    return RedirectResponse(url="/docs")


# Include route modules
app.include_router(projects.router, tags=["Projects"])
app.include_router(financial.router, tags=["Financial Analysis"])

logger.info("All routes registered successfully")
