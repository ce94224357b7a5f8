import logging
from typing import Any, List, Optional

import requests

from gamedeals.core.config import settings

logger = logging.getLogger(__name__)


class CatalogLoadError(Exception):
    """The raw catalog could not be fetched or decoded."""


class CatalogSource:
    """
    Fetches the raw game catalog (a JSON array of scraped games) over HTTP.
    Any failure is surfaced as a single CatalogLoadError, never partial data.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url or settings.CATALOG_URL
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def fetch_raw_catalog(self) -> List[Any]:
        logger.info(f"Fetching raw catalog from {self.url}")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise CatalogLoadError(f"Catalog request failed: {e}") from e
        except ValueError as e:
            raise CatalogLoadError(f"Catalog body is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise CatalogLoadError(
                f"Catalog body must be a JSON array, got {type(data).__name__}"
            )
        return data
