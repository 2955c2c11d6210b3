# vgosti/main.py
import logging
import logging.config
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from vgosti import database
from vgosti.config import settings
from vgosti.rate_limiting import limiter, rate_limit_handler
from vgosti.routes import admin, cabins, console, pages, reviews, upload
from vgosti.routes import settings as site_settings
from vgosti.templating import STATIC_DIR
from vgosti.uploads import upload_dir

logging_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        },
    },
    "handlers": {
        "default": {
            "formatter": "detailed",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "vgosti": {"handlers": ["default"], "level": settings.LOG_LEVEL},
        "uvicorn": {"handlers": ["default"], "level": "INFO"},
        "sqlalchemy": {"handlers": ["default"], "level": "WARNING"},
    },
}

logging.config.dictConfig(logging_config)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    try:
        database.init_db()
    except Exception:
        logger.error("Database initialization failed, aborting startup", exc_info=True)
        raise
    logger.info("Database initialized successfully")

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Cabin rentals by the sea: catalog, reviews and site administration",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start
    response.headers["X-Process-Time"] = f"{elapsed:.3f}"

    path = request.url.path
    if not path.startswith(("/static", settings.UPLOAD_URL_PREFIX, "/assets")):
        logger.info(f"{request.method} {path} -> {response.status_code} in {elapsed:.3f}s")
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# Static files
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir()), name="uploads")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
_assets_dir = os.path.join(settings.FRONTEND_DIR, "assets")
if os.path.isdir(_assets_dir):
    app.mount("/assets", StaticFiles(directory=_assets_dir), name="assets")

# Registering Routers (pages before the console, whose path is a single free segment)
app.include_router(cabins.router)
app.include_router(admin.router)
app.include_router(site_settings.router)
app.include_router(upload.router)
app.include_router(reviews.router)
app.include_router(pages.router)
app.include_router(console.router)


@app.get("/{full_path:path}", include_in_schema=False)
def catch_all(request: Request, full_path: str, db: Session = Depends(database.get_db)):
    if full_path == "api" or full_path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")
    return pages.frontend_fallback(request, db)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vgosti.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
