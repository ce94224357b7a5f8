import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

from gamedeals.api.v1.dependencies import get_catalog, get_ready_catalog
from gamedeals.core.config import settings
from gamedeals.schemas.game import Game, GameSearchResponse
from gamedeals.services.catalog import Catalog
from gamedeals.services.collection import CollectionView, SortKey
from gamedeals.services.source import CatalogLoadError, CatalogSource

logger = logging.getLogger(__name__)


def create_app(catalog: Optional[Catalog] = None) -> FastAPI:
    if catalog is None:
        catalog = Catalog(CatalogSource())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.LOAD_ON_STARTUP and not catalog.is_ready:
            try:
                await run_in_threadpool(catalog.load)
            except CatalogLoadError as e:
                logger.error(f"Starting without a catalog: {e}")
        yield

    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)
    app.state.catalog = catalog

    @app.get("/health", tags=["System"])
    def health_check(catalog: Catalog = Depends(get_catalog)):
        return {"status": catalog.state.value, "games": len(catalog.view)}

    @app.get("/api/v1/games", response_model=GameSearchResponse, tags=["Games"])
    def list_games(
        query: str = "",
        sort: SortKey = SortKey.NAME,
        catalog: Catalog = Depends(get_ready_catalog),
    ):
        """
        Search games by title (case-insensitive partial match) and order them.
        An empty query lists the whole catalog.
        """
        # Per-request view over the shared snapshot, nothing global is mutated
        view = CollectionView(catalog.view.records, search_term=query, sort_key=sort)
        return GameSearchResponse(found=len(view.visible), data=view.visible)

    @app.get("/api/v1/games/{game_id}", response_model=Game, tags=["Games"])
    def get_game(game_id: str, catalog: Catalog = Depends(get_ready_catalog)):
        game = catalog.view.get_by_id(game_id)
        if game is None:
            raise HTTPException(status_code=404, detail=f"Game '{game_id}' not found")
        return game

    @app.post("/api/v1/catalog/reload", tags=["Catalog"])
    def reload_catalog(catalog: Catalog = Depends(get_catalog)):
        """
        Fetches a fresh snapshot. On failure the previous snapshot keeps being served.
        """
        try:
            loaded = catalog.load()
        except CatalogLoadError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"status": "success", "loaded": loaded}

    return app


app = create_app()
