import math
import unicodedata
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union

from gamedeals.schemas.game import Game


class SortKey(str, Enum):
    NAME = "name"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"
    RATING_DESC = "ratingDesc"
    DISCOUNT_DESC = "discountDesc"


def _best_price(game: Game, missing: float) -> float:
    return game.best_offer.price if game.best_offer is not None else missing


def _collation_key(title: str) -> Tuple[str, str]:
    # "élan" sorts next to "Elan", the raw title only breaks exact ties
    stripped = "".join(
        char for char in unicodedata.normalize("NFKD", title) if not unicodedata.combining(char)
    )
    return stripped.casefold(), title


def filter_games(games: Iterable[Game], term: str) -> Tuple[Game, ...]:
    """Keeps games whose title contains the term, case-insensitively. Empty term keeps all."""
    needle = term.strip().casefold()
    return tuple(game for game in games if needle in game.title.casefold())


def sort_games(games: Iterable[Game], key: SortKey) -> Tuple[Game, ...]:
    if key is SortKey.NAME:
        return tuple(sorted(games, key=lambda game: _collation_key(game.title)))
    if key is SortKey.PRICE_ASC:
        return tuple(sorted(games, key=lambda game: _best_price(game, math.inf)))
    if key is SortKey.PRICE_DESC:
        return tuple(sorted(games, key=lambda game: _best_price(game, 0), reverse=True))
    if key is SortKey.RATING_DESC:
        return tuple(sorted(games, key=lambda game: game.rating or 0, reverse=True))
    if key is SortKey.DISCOUNT_DESC:
        return tuple(sorted(games, key=lambda game: game.discount_percent or 0, reverse=True))
    raise ValueError(f"Unsupported sort key: {key!r}")


class CollectionView:
    """
    Holds one immutable snapshot of canonical games and the visible subset
    under the current search term and sort key.
    The snapshot is only ever swapped through replace(); the visible subset
    is recomputed (filter first, then sort) whenever an input changes.
    """

    def __init__(
        self,
        records: Iterable[Game] = (),
        search_term: str = "",
        sort_key: Union[SortKey, str] = SortKey.NAME,
    ):
        self._records: Tuple[Game, ...] = tuple(records)
        self._index: Dict[str, Game] = self._build_index(self._records)
        self._search_term = search_term
        self._sort_key = SortKey(sort_key)
        self._visible: Tuple[Game, ...] = ()
        self._recompute()

    @staticmethod
    def _build_index(records: Tuple[Game, ...]) -> Dict[str, Game]:
        index: Dict[str, Game] = {}
        for game in records:
            # Duplicate titles collide, the first one keeps the id
            index.setdefault(game.id, game)
        return index

    def _recompute(self) -> None:
        records, term, key = self._records, self._search_term, self._sort_key
        self._visible = sort_games(filter_games(records, term), key)

    @property
    def records(self) -> Tuple[Game, ...]:
        return self._records

    @property
    def visible(self) -> Tuple[Game, ...]:
        return self._visible

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    def replace(self, records: Iterable[Game]) -> None:
        snapshot = tuple(records)
        index = self._build_index(snapshot)
        self._records, self._index = snapshot, index
        self._recompute()

    def set_search_term(self, term: Optional[str]) -> Tuple[Game, ...]:
        self._search_term = term or ""
        self._recompute()
        return self._visible

    def set_sort_key(self, key: Union[SortKey, str]) -> Tuple[Game, ...]:
        # SortKey("bogus") raises ValueError before any state changes
        self._sort_key = SortKey(key)
        self._recompute()
        return self._visible

    def get_by_id(self, game_id: str) -> Optional[Game]:
        return self._index.get(game_id)

    def __len__(self) -> int:
        return len(self._records)
