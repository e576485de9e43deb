"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from outfit_reco.cache.store import RationaleCache, ResultCache, create_redis
from outfit_reco.catalog.loader import load_catalog
from outfit_reco.catalog.models import CatalogIndex, Role
from outfit_reco.config.settings import Settings, get_settings
from outfit_reco.errors import InputError, NotFoundError
from outfit_reco.monitoring.logging import configure_logging
from outfit_reco.services.recommendations import RecommendationOrchestrator, RecommendationRequest
from outfit_reco.workers.enrichment_worker import dispatch_enrichment
from outfit_reco.workers.queue import EnrichmentQueue, JobStore


def build_orchestrator(catalog: CatalogIndex, settings: Settings) -> RecommendationOrchestrator:
    """Wire the Redis-backed caches and the Celery queue around ``catalog``."""

    client = create_redis(settings.redis_url)
    return RecommendationOrchestrator(
        catalog,
        ResultCache(client, catalog, settings.results_ttl_seconds),
        RationaleCache(client, settings.rationale_ttl_seconds),
        EnrichmentQueue(JobStore(client, settings.job_marker_ttl_seconds), dispatch_enrichment),
    )


def create_app(
    *,
    catalog: CatalogIndex | None = None,
    orchestrator: RecommendationOrchestrator | None = None,
) -> FastAPI:
    """Initialise the FastAPI application.

    The catalog and orchestrator are built from settings on startup unless supplied.
    """

    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        if app.state.catalog is None:
            app.state.catalog = load_catalog(settings.catalog_path)
        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator(app.state.catalog, settings)
        yield

    app = FastAPI(
        title="Outfit Recommendation API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.state.catalog = catalog
    app.state.orchestrator = orchestrator
    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/products", tags=["catalog"])
    def list_products(request: Request, role: str | None = None, limit: int = 500) -> dict[str, Any]:
        """List catalog products, optionally restricted to one role."""

        index: CatalogIndex = request.app.state.catalog
        if role is None:
            products = index.products
        elif role in {item.value for item in Role}:
            products = index.products_for(role)
        else:
            products = []
        limited = products[: max(0, limit)]
        return {
            "total": len(products),
            "count": len(limited),
            "products": [product.to_dict() for product in limited],
        }

    @app.get("/products/{sku}", tags=["catalog"])
    def get_product(request: Request, sku: str) -> dict[str, Any]:
        product = request.app.state.catalog.get(sku)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product.to_dict()

    @app.get("/recommendations", tags=["recommendations"])
    def recommendations(
        request: Request,
        base_sku: str | None = None,
        budget: str | None = None,
        season: str | None = None,
        occasion: str | None = None,
        count: str | None = None,
    ) -> dict[str, Any]:
        """Outfits for ``base_sku``; rationale is attached when already generated."""

        reco_request = RecommendationRequest.from_query(
            base_sku,
            budget=budget,
            season=season,
            occasion=occasion,
            count=count,
        )
        orchestrator: RecommendationOrchestrator = request.app.state.orchestrator
        return orchestrator.recommend(reco_request).to_dict()

    return app


app = create_app()
