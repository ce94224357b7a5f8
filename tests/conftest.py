import pytest

from gamedeals.services.normalization import normalize


def make_raw_game(title, stores=None, **extra):
    raw = {"Nombre": title, "Tiendas": stores or {}}
    raw.update(extra)
    return raw


class FakeSource:
    """Stands in for CatalogSource, returns queued payloads or raises queued errors."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def fetch_raw_catalog(self):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def raw_catalog():
    return [
        make_raw_game(
            "The Legend of Zelda",
            {"eshop": {"StoreName": "eShop", "PriceNumber": 59.99, "PriceRaw": "$69.99$59.99"}},
            FuenteInicialUrl="http://www.nintendo.com/switch/zelda",
            Analisis={"Calificacion": 9.7, "HorasPromedio": 50, "CantidadResenas": 12000},
        ),
        make_raw_game(
            "zelda 2",
            {"eshop": {"StoreName": "eShop", "PriceNumber": 9.99}},
            Analisis={"Calificacion": 7.1},
        ),
        make_raw_game(
            "Mario",
            {
                "eshop": {"StoreName": "eShop", "PriceNumber": 39.99, "PriceRaw": "$59.99$39.99"},
                "amazon": {"StoreName": "Amazon", "PriceNumber": 44.0, "Url": "https://amazon.example/mario"},
            },
        ),
        make_raw_game("Unreleased Game", {"steam": {"StoreName": "Steam", "PriceRaw": "Coming soon"}}),
    ]


@pytest.fixture
def games(raw_catalog):
    return [normalize(raw) for raw in raw_catalog]
