"""Main FastAPI application"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from return_requests.config import settings, set_return_requests_config
from return_requests.database import connect_to_mongo, close_mongo_connection, database
from return_requests.schemas.common import ErrorResponse
from return_requests.store import ReturnRequestStore
from return_requests.api.v1 import admin, return_authorizations

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""
    # Startup
    logger.info("Starting up Return Requests API...")
    await connect_to_mongo()

    saved_config = await ReturnRequestStore(database.db).load_config()
    if saved_config:
        set_return_requests_config(saved_config)
        logger.info("Loaded saved return request configuration")

    logger.info("Application ready!")

    yield

    # Shutdown
    logger.info("Shutting down Return Requests API...")
    await close_mongo_connection()
    logger.info("Shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title="Return Requests API",
    version="1.0.0",
    description="""
    Self-service return requests for completed orders.

    ## Features

    * **Search**: Anonymous shoppers find their order by number and email
    * **Return requests**: Request authorization to return shipped units within the return window
    * **Refund amounts**: Computed per unit after prorating line item and order promotions
    * **Labels**: Return label pages opened with the order token
    * **Admin**: Receive or cancel authorizations, find expired ones, tune the return window

    ## Authentication

    Logged-in shoppers send a JWT in the Authorization header:
    ```
    Authorization: Bearer <your_jwt_token>
    ```
    Anonymous shoppers pass the order token as the `token` query parameter.
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint to verify the API is running.
    """
    return {
        "success": True,
        "status": "healthy",
        "version": "1.0.0",
        "app": settings.app_name
    }


@app.get("/liveness", tags=["Health"])
async def liveness_probe():
    """
    Kubernetes liveness probe endpoint.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/readiness", tags=["Health"])
async def readiness_probe():
    """
    Kubernetes readiness probe endpoint.
    Checks database connectivity.
    """
    if database.db is None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "database": "not connected",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    try:
        await database.db.command("ping")
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return {
        "status": "ready",
        "database": "connected",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Include routers
app.include_router(
    return_authorizations.router,
    prefix="/api",
    tags=["Return Requests"]
)

app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["Admin - Returns"]
)


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler"""
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error="Not Found",
            detail=getattr(exc, "detail", None) or "The requested resource was not found"
        ).model_dump()
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler"""
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail="An unexpected error occurred. Please try again later."
        ).model_dump()
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "return_requests.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
