# checktable/main.py

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from checktable.api.endpoints import assets
from checktable.api.endpoints import table
from checktable.core.config import get_settings
from checktable.core.errors import TableError

settings = get_settings()

# Set up logging
logging.basicConfig(level=settings.log_level_value)
logger = logging.getLogger(__name__)

# Every path outside the API belongs to the public directory, so no docs routes
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None
)


def _wants_json(request: Request) -> bool:
    """JSON for API routes, plain text for the asset route"""
    endpoint = request.scope.get("endpoint")
    if endpoint is not None:
        return endpoint is not assets.serve_asset
    # No route matched (404/405 from the router)
    return request.url.path.startswith(f"{settings.API_PREFIX}/")


def _error_response(request: Request, status_code: int, message: str, headers=None):
    if _wants_json(request):
        return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)
    return PlainTextResponse(message, status_code=status_code, headers=headers)


@app.exception_handler(TableError)
async def table_error_handler(request: Request, exc: TableError):
    return _error_response(request, exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Router errors such as 405 in the same shape as our own errors"""
    return _error_response(request, exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """Keep one failing request from taking anything else down"""
    logger.exception(f"Unhandled error for {request.method} {request.url.path}: {str(exc)}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")

# API routes first, the asset catch-all last
app.include_router(table.router, prefix=settings.API_PREFIX)
app.include_router(assets.router)


@app.on_event("startup")
async def startup_event():
    """Log where the table and the assets come from"""
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Table data file: {settings.data_file}")
    logger.info(f"Public directory: {settings.public_dir}")

    if not settings.data_file.exists():
        logger.warning(f"Table data file does not exist yet: {settings.data_file}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "checktable.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.RELOAD
    )
