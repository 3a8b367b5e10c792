import sys
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

import settings
from errors import BlogError
from external_source import ExternalPostSource
from post_cache import CategoryCache
from routes import users_router, posts_router, feed_router
from schemas import ErrorDetail, ErrorResponse
from storage import BlogStore


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None, sink=sys.stderr) -> None:
    logger.remove()  # Remove default handler
    # Records logged without bind() still need a component for the format.
    logger.configure(extra={"component": "app"})
    logger.add(sink, level=level or settings.LOG_LEVEL, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"Blogosphere API starting (external feed: {'on' if app.state.external_source else 'off'})")
    try:
        yield
    finally:
        pending = list(app.state.background_tasks) + list(app.state.inflight_fetches.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if app.state.owns_store:
            app.state.store.close()
        logger.info("Shutdown complete")


async def blog_error_handler(request: Request, exc: BlogError):
    body = ErrorResponse(message=exc.message, errors=exc.errors)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        ErrorDetail(
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            message=err.get("msg", "invalid value"),
        )
        for err in exc.errors()
    ]
    body = ErrorResponse(message="Invalid data", errors=errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


def create_app(
    store: Optional[BlogStore] = None,
    external_source: Optional[ExternalPostSource] = None,
    enable_external: Optional[bool] = None,
    cache_ttl: Optional[float] = None,
) -> FastAPI:
    app = FastAPI(
        title="Blogosphere API",
        description="Blog posts, comments and a merged external feed",
        version="1.0.0",
        lifespan=lifespan,
    )

    external_enabled = settings.EXTERNAL_FEED_ENABLED if enable_external is None else enable_external
    if external_source is None and external_enabled:
        external_source = ExternalPostSource()

    app.state.owns_store = store is None
    app.state.store = store or BlogStore()
    app.state.external_source = external_source if external_enabled else None
    app.state.post_cache = CategoryCache(ttl=settings.EXTERNAL_CACHE_TTL_SEC if cache_ttl is None else cache_ttl)
    app.state.prefetch_enabled = external_enabled
    app.state.background_tasks = set()
    app.state.inflight_fetches = {}

    # CORS settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(feed_router)

    @app.middleware("http")
    async def utf8_charset_middleware(request: Request, call_next):
        response = await call_next(request)
        ct = response.headers.get("content-type", "")
        if "application/json" in ct and "charset" not in ct:
            response.headers["content-type"] = ct + "; charset=utf-8"
        return response

    @app.get("/")
    async def root():
        return {
            "message": "Blogosphere API",
            "version": "1.0.0",
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)
