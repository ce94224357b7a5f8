import math

import pytest

from gamedeals.services.collection import CollectionView, SortKey, filter_games, sort_games
from gamedeals.services.normalization import normalize
from tests.conftest import make_raw_game


def titles(games):
    return [game.title for game in games]


@pytest.mark.parametrize("key", list(SortKey))
def test_search_is_case_insensitive_whatever_the_sort(games, key):
    view = CollectionView(games, sort_key=key)

    visible = view.set_search_term("Zelda")

    assert sorted(titles(visible)) == ["The Legend of Zelda", "zelda 2"]


def test_empty_search_term_keeps_everything(games):
    view = CollectionView(games)
    view.set_search_term("zelda")

    assert len(view.set_search_term("")) == len(games)
    assert len(view.set_search_term(None)) == len(games)
    assert len(view.set_search_term("   ")) == len(games)


def test_filter_is_a_substring_property(games):
    for term in ["", "a", "ZEL", "o", "2", "Legend of", "nope"]:
        kept = filter_games(games, term)
        assert titles(kept) == [g.title for g in games if term.casefold() in g.title.casefold()]


def test_no_match_is_an_empty_result(games):
    view = CollectionView(games)
    assert view.set_search_term("Metroid") == ()


@pytest.mark.parametrize(
    "key, expected",
    [
        (SortKey.NAME, ["Mario", "The Legend of Zelda", "Unreleased Game", "zelda 2"]),
        (SortKey.PRICE_ASC, ["zelda 2", "Mario", "The Legend of Zelda", "Unreleased Game"]),
        (SortKey.PRICE_DESC, ["The Legend of Zelda", "Mario", "zelda 2", "Unreleased Game"]),
        (SortKey.RATING_DESC, ["The Legend of Zelda", "zelda 2", "Mario", "Unreleased Game"]),
        (SortKey.DISCOUNT_DESC, ["Mario", "The Legend of Zelda", "zelda 2", "Unreleased Game"]),
    ],
)
def test_sort_keys(games, key, expected):
    assert titles(sort_games(games, key)) == expected


def test_price_ascending_is_non_decreasing(games):
    ordered = sort_games(games, SortKey.PRICE_ASC)
    prices = [g.best_offer.price if g.best_offer else math.inf for g in ordered]
    assert all(a <= b for a, b in zip(prices, prices[1:]))


def test_name_sort_ignores_accents_and_case():
    games = [normalize(make_raw_game(title)) for title in ["beta", "Élan", "alpha", "Zeta"]]
    assert titles(sort_games(games, SortKey.NAME)) == ["alpha", "beta", "Élan", "Zeta"]


def test_sort_applies_to_the_filtered_subset(games):
    view = CollectionView(games)
    view.set_sort_key("priceDesc")
    visible = view.set_search_term("zelda")

    assert titles(visible) == ["The Legend of Zelda", "zelda 2"]
    assert view.sort_key is SortKey.PRICE_DESC


def test_unknown_sort_key_is_rejected_and_keeps_state(games):
    view = CollectionView(games, sort_key=SortKey.RATING_DESC)
    before = view.visible

    with pytest.raises(ValueError):
        view.set_sort_key("cheapest")

    assert view.sort_key is SortKey.RATING_DESC
    assert view.visible == before


def test_visible_holds_references_not_copies(games):
    view = CollectionView(games)
    assert all(any(v is g for g in games) for v in view.visible)


def test_replace_swaps_snapshot_and_keeps_search(games):
    view = CollectionView(games[:1])
    view.set_search_term("zelda")
    assert titles(view.visible) == ["The Legend of Zelda"]

    view.replace(games)

    assert len(view) == len(games)
    assert sorted(titles(view.visible)) == ["The Legend of Zelda", "zelda 2"]


def test_get_by_id(games):
    view = CollectionView(games)

    assert view.get_by_id("Mario") is games[2]
    assert view.get_by_id("Luigi") is None

    view.replace([])
    assert view.get_by_id("Mario") is None


def test_duplicate_titles_resolve_to_the_first_record():
    first = normalize(make_raw_game("Doom", {"a": {"StoreName": "A", "PriceNumber": 5}}))
    second = normalize(make_raw_game("Doom", {"b": {"StoreName": "B", "PriceNumber": 3}}))

    view = CollectionView([first, second])

    assert view.get_by_id("Doom") is first
    assert len(view.visible) == 2
