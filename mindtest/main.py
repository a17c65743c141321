from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from mindtest.api.router import api_router
from mindtest.config import get_settings
from mindtest.core.errors import MindtestError
from mindtest.core.logging import get_logger, setup_logging
from mindtest.core.session import SessionCookieMiddleware
from mindtest.core.storage import Storage
from mindtest.services.mirror import MirrorForwarder, get_mirror_store

logger = get_logger(__name__)

settings = get_settings()

# Quiz front-end pages (index.html, quiz.html, result.html, dashboard.html, ...)
UI_DIR = Path(settings.public_dir)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging()
    storage = Storage.from_url(settings.database_url, echo=settings.debug)
    if settings.auto_create_tables:
        await storage.create_all()
    mirror = MirrorForwarder(get_mirror_store(settings), max_queue_size=settings.mirror_queue_size)
    await mirror.start()

    app.state.storage = storage
    app.state.mirror = mirror
    logger.bind(
        database=storage.engine.url.render_as_string(hide_password=True),
        mirror=mirror.store.provider_name,
    ).info("app_started")
    yield
    # Shutdown
    await mirror.stop()
    await storage.dispose()


app = FastAPI(
    title="mindtest",
    description="Quiz analytics and result collection API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

app.add_middleware(
    SessionCookieMiddleware,
    cookie_name=settings.session_cookie_name,
    max_age_days=settings.session_max_age_days,
    secure=settings.session_cookie_secure,
    samesite=settings.session_cookie_samesite,
)


@app.exception_handler(MindtestError)
async def mindtest_error_handler(request: Request, exc: MindtestError) -> JSONResponse:
    """Render application errors as {"error": message}; causes stay in the logs."""
    logger.bind(
        path=request.url.path,
        details=exc.details,
        cause=repr(exc.original_error) if exc.original_error else None,
    ).error(exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Keep request validation failures in the {"error": message} envelope."""
    logger.bind(path=request.url.path, errors=exc.errors()).warning("request_validation_failed")
    return JSONResponse(status_code=400, content={"error": "Invalid request."})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.bind(path=request.url.path, error=repr(exc)).exception("unhandled_error")
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


# Include API routes
app.include_router(api_router)


# Serve static UI files (only if the front-end is deployed alongside)
if UI_DIR.exists():

    @app.get("/{path:path}", include_in_schema=False)
    async def serve_page(path: str) -> FileResponse:
        """Serve static files, /quiz -> quiz.html, else index.html."""
        root = UI_DIR.resolve()
        file_path = (root / path).resolve()
        if root not in file_path.parents and file_path != root:
            return FileResponse(root / "index.html")

        # Serve exact file if it exists
        if file_path.is_file():
            return FileResponse(file_path)

        # Try with .html extension (/quiz -> /quiz.html)
        html_path = file_path.with_name(f"{file_path.name}.html")
        if path and html_path.is_file():
            return FileResponse(html_path)

        return FileResponse(root / "index.html")
