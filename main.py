import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from trackshare import responses
from trackshare.config import LOG_LEVEL
from trackshare.database import create_db_and_tables
from trackshare.errors import AppError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables
    create_db_and_tables()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Trackshare",
    description="Log scores, share posts and compete with friends",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
from trackshare.routers import auth, comments, competitions, data, friends, links, posts

app.include_router(auth.router, tags=["users"])
app.include_router(friends.router, tags=["friends"])
app.include_router(posts.router, tags=["posts"])
app.include_router(comments.router, tags=["comments"])
app.include_router(links.router, tags=["links"])
app.include_router(data.router, tags=["data"])
app.include_router(competitions.router, tags=["competitions"])


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors, with ids resolved to usernames and names."""
    detail = str(exc)
    db = getattr(request.state, "db", None)
    if db is not None:
        try:
            detail = responses.describe_error(db, exc)
        except SQLAlchemyError:
            logger.exception("Could not resolve names for %s", type(exc).__name__)

    logger.info(
        "Request failed: %s",
        detail,
        extra={
            "url": str(request.url),
            "method": request.method,
            "error_type": exc.error_type,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "type": exc.error_type}
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "internal_error"}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
