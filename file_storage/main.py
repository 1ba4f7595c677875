import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse

from file_storage import config
from file_storage.app.routes.files import create_files_router
from file_storage.app.services.storage import LocalStorage
from file_storage.logger_config import setup_logger

INDEX_PAGE = Path(__file__).parent / "app" / "templates" / "index.html"

# Logger setup
logger = setup_logger()


def create_app(storage: Optional[LocalStorage] = None) -> FastAPI:
    """Create the application around a storage instance (defaults to config.STORAGE_DIR)."""
    if storage is None:
        storage = LocalStorage(Path(config.STORAGE_DIR))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await storage.initialize()
        yield

    app = FastAPI(
        title="File Storage Server API",
        description="A simple file storage server that allows you to upload and serve files.",
        version="1.0",
        lifespan=lifespan,
        docs_url="/swagger/index.html",
        openapi_url="/swagger/doc.json",
        redoc_url=None,
    )
    app.state.storage = storage

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} - {response.status_code} ({elapsed_ms:.1f}ms)")
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # The server logs the traceback itself once this handler has answered
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.get("/", include_in_schema=False)
    async def index():
        """Browser upload form."""
        return FileResponse(INDEX_PAGE, media_type="text/html")

    app.include_router(create_files_router(storage))
    return app


app = create_app()


def run():
    logger.info("Starting File Storage Server...")
    logger.info(f"Storage directory: {config.STORAGE_DIR}")
    logger.info(f"Upload files at: http://localhost:{config.PORT}")
    logger.info(f"Access files at: http://localhost:{config.PORT}/files/{{filename}}")
    logger.info(f"API documentation at: http://localhost:{config.PORT}/swagger/index.html")
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
