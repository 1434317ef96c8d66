"""FastAPI application entry point."""

import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import health_router, reports_router, settings_router
from core.config import API_DEBUG, API_VERSION
from core.validation import CalendarAnalysisError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: make sure the database and schema exist
    from core.database import get_connection
    from core.graph_client import graph_credentials_configured

    get_connection().close()
    if not graph_credentials_configured():
        warnings.warn("MS Graph credentials not configured; report endpoints will fail")

    yield


app = FastAPI(
    title="Calendar Analytics API",
    description="REST API for busy/free calendar block reports and calendar hygiene criteria",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(CalendarAnalysisError)
async def analysis_exception_handler(request: Request, exc: CalendarAnalysisError):
    """Domain validation errors that escape a route."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=str(exc), code=exc.code, details=[]).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(settings_router)
app.include_router(reports_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
