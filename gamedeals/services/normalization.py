import math
import re
from collections.abc import Mapping
from typing import Any, List, Optional

from gamedeals.schemas.game import Game, Offer, Platform

# Digits with at most one embedded decimal point, currency symbols are not anchored
PRICE_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def extract_price_numbers(text: Optional[str]) -> List[float]:
    """
    Extracts every decimal number from a raw price string, largest first.
    "$14.99$13.49" -> [14.99, 13.49]
    """
    if not text:
        return []
    # A long digit run parses to inf, which is no price
    numbers = (float(match) for match in PRICE_NUMBER_RE.findall(text))
    return sorted((number for number in numbers if math.isfinite(number)), reverse=True)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_number(value: Any) -> Optional[float]:
    """Returns the value if it is a real finite number, otherwise None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        # JSON decodes huge integers exactly, too big for a float
        return None
    if not math.isfinite(number):
        return None
    return value


def _as_count(value: Any) -> Optional[int]:
    number = _as_number(value)
    if number is None or number != int(number):
        return None
    return int(number)


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


class GameNormalizer:
    """
    Engine for normalizing raw catalog entries.
    Turns a loosely structured record with an open set of store listings
    into a canonical Game with best offer, regular price and discount.
    """

    # Checked in order, the first rule that matches the source url wins
    PLATFORM_RULES = [
        (("steam", "pc"), Platform.PC),
        (("playstation", "ps"), Platform.PLAYSTATION),
        (("xbox",), Platform.XBOX),
        (("switch",), Platform.SWITCH),
    ]

    @classmethod
    def detect_platform(cls, url: Optional[str]) -> Platform:
        if not url:
            return Platform.PC
        lower_url = url.lower()
        for needles, platform in cls.PLATFORM_RULES:
            if any(needle in lower_url for needle in needles):
                return platform
        return Platform.PC

    @staticmethod
    def extract_offers(stores: Any) -> List[Offer]:
        """Builds one offer per store entry that carries a numeric price, in mapping order."""
        if not isinstance(stores, Mapping):
            return []

        offers = []
        for key, store in stores.items():
            if not isinstance(store, Mapping):
                continue
            price = _as_number(store.get("PriceNumber"))
            if price is None:
                continue
            offers.append(
                Offer(
                    store_key=str(key),
                    store_name=_as_text(store.get("StoreName")),
                    url=_as_text(store.get("Url")),
                    price=price,
                    price_raw=_as_text(store.get("PriceRaw")),
                )
            )
        return offers

    @staticmethod
    def infer_regular_price(offers: List[Offer], best_offer: Optional[Offer]) -> Optional[float]:
        """
        Recovers the pre-discount price from the first raw price text found.
        Stores concatenate the struck-through price with the sale price,
        so the largest number above the best price is taken.
        """
        if best_offer is None:
            return None

        raw = next((offer.price_raw for offer in offers if offer.price_raw), None)
        for number in extract_price_numbers(raw):
            if number > best_offer.price:
                return number
        return None

    @classmethod
    def normalize(cls, raw: Mapping) -> Game:
        # 1. Offers, cheapest first (sorted() is stable, so ties keep store order)
        offers = sorted(cls.extract_offers(raw.get("Tiendas")), key=lambda offer: offer.price)
        best_offer = offers[0] if offers else None

        # 2. Regular price and discount
        regular_price = cls.infer_regular_price(offers, best_offer)
        discount_percent = None
        if best_offer is not None and regular_price:
            discount_percent = round_half_up((1 - best_offer.price / regular_price) * 100)

        # 3. Quality signals
        analysis = raw.get("Analisis")
        if not isinstance(analysis, Mapping):
            analysis = {}

        title = raw.get("Nombre")
        title = title if isinstance(title, str) else ""
        source_url = _as_text(raw.get("FuenteInicialUrl"))

        return Game(
            id=title,
            title=title,
            cover_url=_as_text(raw.get("ImagenUrl")) or "",
            platform=cls.detect_platform(source_url),
            rating=_as_number(analysis.get("Calificacion")),
            avg_hours=_as_number(analysis.get("HorasPromedio")),
            review_count=_as_count(analysis.get("CantidadResenas")),
            source_url=source_url,
            offers=tuple(offers),
            best_offer=best_offer,
            regular_price=regular_price,
            discount_percent=discount_percent,
        )


def normalize(raw: Mapping) -> Game:
    return GameNormalizer.normalize(raw)
