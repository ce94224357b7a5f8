import logging
import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterable, List, Optional

from gamedeals.schemas.game import Game
from gamedeals.services.collection import CollectionView
from gamedeals.services.normalization import normalize
from gamedeals.services.source import CatalogLoadError, CatalogSource

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    UNLOADED = "unloaded"   # Nothing fetched yet
    LOADED = "loaded"       # A snapshot is in the view
    FAILED = "failed"       # Last load raised CatalogLoadError


def normalize_catalog(raw_games: Iterable[Any]) -> List[Game]:
    """Normalizes every raw game, skipping entries that are not objects."""
    games = []
    for position, raw in enumerate(raw_games):
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping catalog entry #{position}: expected an object, got {type(raw).__name__}")
            continue
        games.append(normalize(raw))
    return games


class Catalog:
    """
    Core business logic: fetch the raw snapshot, normalize it and swap it
    into the collection view in one step.
    """

    def __init__(self, source: CatalogSource, view: Optional[CollectionView] = None):
        self.source = source
        self.view = view if view is not None else CollectionView()
        self.state = LoadState.UNLOADED
        self._generation = 0
        self._has_snapshot = False
        self._lock = threading.Lock()

    def load(self) -> int:
        """
        Replaces the snapshot with a fresh one and returns its size, 0 when discarded.
        On failure the previous snapshot stays untouched and the error propagates.
        A load that completes after a newer one has started is discarded.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        try:
            games = normalize_catalog(self.source.fetch_raw_catalog())
        except CatalogLoadError as e:
            logger.error(f"Catalog load failed: {e}")
            with self._lock:
                if generation == self._generation:
                    self.state = LoadState.FAILED
            raise

        with self._lock:
            if generation != self._generation:
                logger.warning(f"Discarding stale catalog load #{generation}, #{self._generation} is newer")
                return 0
            self.view.replace(games)
            self.state = LoadState.LOADED
            self._has_snapshot = True

        logger.info(f"Catalog loaded: {len(games)} games")
        return len(games)

    @property
    def is_ready(self) -> bool:
        # A failed reload keeps serving the previous snapshot
        return self._has_snapshot
