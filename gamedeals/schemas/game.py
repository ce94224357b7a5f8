from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Platform(str, Enum):
    PC = "PC"
    PLAYSTATION = "PlayStation"
    XBOX = "Xbox"
    SWITCH = "Switch"


class Offer(BaseModel):
    """
    One store's priced listing for a game.
    Only stores that reported a usable numeric price become offers.
    """
    model_config = ConfigDict(frozen=True)

    store_key: str
    store_name: Optional[str] = None
    url: Optional[str] = None
    price: float
    price_raw: Optional[str] = None


class Game(BaseModel):
    """
    Canonical game record produced by the normalizer.
    The title doubles as the id; every pricing fact is derived from the offers.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "Hades",
                "title": "Hades",
                "cover_url": "https://example.com/hades.jpg",
                "platform": "PC",
                "rating": 9.5,
                "avg_hours": 22,
                "review_count": 250000,
                "source_url": "https://store.steampowered.com/app/1145360/",
                "offers": [
                    {
                        "store_key": "steam",
                        "store_name": "Steam",
                        "url": "https://store.steampowered.com/app/1145360/",
                        "price": 13.49,
                        "price_raw": "$14.99$13.49",
                    }
                ],
                "best_offer": {
                    "store_key": "steam",
                    "store_name": "Steam",
                    "url": "https://store.steampowered.com/app/1145360/",
                    "price": 13.49,
                    "price_raw": "$14.99$13.49",
                },
                "regular_price": 14.99,
                "discount_percent": 10,
            }
        },
    )

    id: str
    title: str
    cover_url: str = ""
    platform: Platform = Platform.PC

    # Quality signals are never defaulted to zero
    rating: Optional[float] = None
    avg_hours: Optional[float] = None
    review_count: Optional[int] = None
    source_url: Optional[str] = None

    # Pricing, offers ordered by price ascending
    offers: Tuple[Offer, ...] = ()
    best_offer: Optional[Offer] = None
    regular_price: Optional[float] = None
    discount_percent: Optional[int] = None


class GameSearchResponse(BaseModel):
    status: str = "success"
    found: int
    data: Tuple[Game, ...]
