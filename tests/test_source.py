import pytest
import requests

from gamedeals.services.source import CatalogLoadError, CatalogSource


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body_error=None):
        self.status_code = status_code
        self.payload = payload
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.body_error:
            raise self.body_error
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


def test_fetch_returns_the_raw_array():
    session = FakeSession(FakeResponse(payload=[{"Nombre": "Hades"}]))
    source = CatalogSource(url="https://catalog.test/games.json", timeout=3, session=session)

    assert source.fetch_raw_catalog() == [{"Nombre": "Hades"}]
    assert session.requests == [("https://catalog.test/games.json", 3)]


def test_defaults_come_from_settings(monkeypatch):
    from gamedeals.core.config import settings

    monkeypatch.setattr(settings, "CATALOG_URL", "https://configured.test/catalog.json")
    monkeypatch.setattr(settings, "REQUEST_TIMEOUT", 7.5)

    source = CatalogSource(session=FakeSession())

    assert source.url == "https://configured.test/catalog.json"
    assert source.timeout == 7.5


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("connection refused")),
        FakeSession(error=requests.Timeout("timed out")),
        FakeSession(FakeResponse(status_code=503)),
        FakeSession(FakeResponse(body_error=ValueError("Expecting value"))),
        FakeSession(FakeResponse(payload={"Nombre": "not an array"})),
        FakeSession(FakeResponse(payload=None)),
    ],
)
def test_every_failure_is_a_catalog_load_error(session):
    source = CatalogSource(url="https://catalog.test/games.json", session=session)

    with pytest.raises(CatalogLoadError):
        source.fetch_raw_catalog()
