"""
articledb service

FastAPI service that provides:
1. POST /v1/articles - Enrich an article (summary, named entities) and store it
2. GET /v1/articles/{id} - Fetch a stored article
3. /health - Health check

Architecture:
- ArticleAdder runs the analysis capabilities concurrently per article
- OpenAI / Azure OpenAI (via LangChain) for summaries, NER and embeddings
- In-memory or Redis article store
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from articledb import __version__
from articledb.api.routes import router
from articledb.core.config import Settings, get_redis_client, settings
from articledb.core.errors import (ArticleDBError, InvalidIdentifierError,
                                   NotFoundError, StoreFailure,
                                   UpstreamFailure)
from articledb.middleware.security import SecurityMiddleware
from articledb.models.schemas import HealthResponse
from articledb.services.document_store import InMemoryArticleStore, RedisArticleStore
from articledb.services.orchestrator import ArticleAdder

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_store(config: Settings):
    """Create the article store selected by configuration."""
    if config.store_backend == "redis":
        logger.info(f"Using Redis article store at {config.redis_url}")
        return RedisArticleStore(get_redis_client(), key_prefix=config.redis_key_prefix)
    logger.info("Using in-memory article store")
    return InMemoryArticleStore()


def build_adder(config: Settings, store) -> ArticleAdder:
    """Wire the analysis providers selected by configuration into an ArticleAdder."""
    if config.extractor_mode == "llm":
        from articledb.services.enrichment import LLMExtractor
        extractor = LLMExtractor(config)
    else:
        from articledb.services.enrichment import NoopExtractor
        extractor = NoopExtractor()

    encoder = None
    if config.encoder_enabled:
        from articledb.services.embeddings import LangChainEncoder
        encoder = LangChainEncoder(config)

    keyword_extractor = None
    if config.keywords_enabled:
        from articledb.services.enrichment import YakeKeywordExtractor
        keyword_extractor = YakeKeywordExtractor(top=config.keywords_top)

    logger.info(
        f"Extractor mode: {config.extractor_mode}, encoder: {encoder is not None}, "
        f"keywords: {keyword_extractor is not None}"
    )
    return ArticleAdder(
        summarizer=extractor,
        ner=extractor,
        db=store,
        encoder=encoder,
        keyword_extractor=keyword_extractor,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("🚀 Starting articledb...")
    if getattr(app.state, "adder", None) is None:
        app.state.store = build_store(settings)
        app.state.adder = build_adder(settings, app.state.store)
    logger.info("✅ Services initialized")

    yield

    logger.info("🔄 Shutting down...")


def _error(status_code: int, error: str, exc: Exception, branch: Optional[str] = None) -> JSONResponse:
    content = {"error": error, "detail": str(exc)}
    if branch:
        content["branch"] = branch
    return JSONResponse(status_code=status_code, content=content)


def create_app(adder: Optional[ArticleAdder] = None) -> FastAPI:
    """Create the FastAPI application. Providers are built at startup unless an adder is given."""
    app = FastAPI(
        title="articledb API",
        description="Enrich news articles with summaries and named entities and store them",
        version=__version__,
        lifespan=lifespan,
    )
    if adder is not None:
        app.state.adder = adder
        app.state.store = adder.db

    app.add_middleware(SecurityMiddleware, max_request_size=settings.max_request_size)
    app.include_router(router, prefix="/v1")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Request logging middleware."""
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)")
        return response

    @app.exception_handler(InvalidIdentifierError)
    async def invalid_identifier_handler(request: Request, exc: InvalidIdentifierError):
        status_code = 422 if request.method == "POST" else 400
        return _error(status_code, "Invalid identifier", exc)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, "Article not found", exc)

    @app.exception_handler(UpstreamFailure)
    async def upstream_failure_handler(request: Request, exc: UpstreamFailure):
        logger.error(f"❌ Upstream failure in {request.url.path}: {exc}")
        return _error(502, "Feature extraction failed", exc, branch=exc.branch)

    @app.exception_handler(StoreFailure)
    async def store_failure_handler(request: Request, exc: StoreFailure):
        logger.error(f"❌ Store failure in {request.url.path}: {exc}")
        return _error(503, "Article store unavailable", exc)

    @app.exception_handler(ArticleDBError)
    async def articledb_error_handler(request: Request, exc: ArticleDBError):
        logger.error(f"❌ Error in {request.url.path}: {exc}")
        return _error(500, "Internal server error", exc)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request, response: Response):
        """Health check endpoint."""
        store = getattr(request.app.state, "store", None)
        store_ok = store is not None and bool(await asyncio.to_thread(store.health_check))
        services = {"store": "ok" if store_ok else "error"}

        adder = getattr(request.app.state, "adder", None)
        encoder = getattr(adder, "encoder", None)
        if encoder is not None and hasattr(encoder, "ready"):
            services["encoder"] = "ok" if await encoder.ready() else "error"

        # Overall health: all services must be OK
        healthy = all(status == "ok" for status in services.values())
        if not healthy:
            response.status_code = 503
        return HealthResponse(
            status="ok" if healthy else "error",
            store_backend=settings.store_backend,
            extractor_mode=settings.extractor_mode,
            services=services,
            version=__version__,
        )

    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
