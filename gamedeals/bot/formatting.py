from typing import Optional

from gamedeals.schemas.game import Game, Offer, Platform
from gamedeals.services.normalization import round_half_up

MISSING = "—"

PLATFORM_LABELS = {
    Platform.PC: "🖥️ PC",
    Platform.PLAYSTATION: "🎮 PlayStation",
    Platform.XBOX: "🎮 Xbox",
    Platform.SWITCH: "🎮 Switch",
}


def format_price(price: Optional[float]) -> str:
    if price is None:
        return MISSING
    return f"${price:.2f}"


def format_discount(percent: Optional[int]) -> str:
    if not percent:
        return MISSING
    return f"-{percent}%"


def offer_discount(offer: Offer, regular_price: Optional[float]) -> Optional[int]:
    """Discount of a single store's price against the game's regular price."""
    if not regular_price:
        return None
    return round_half_up((1 - offer.price / regular_price) * 100)


def format_game_line(game: Game) -> str:
    """One line per game for list views, like a card in the grid."""
    line = f"{game.title} | {PLATFORM_LABELS[game.platform]}"
    if game.best_offer is not None:
        line += f" | {format_price(game.best_offer.price)}"
    else:
        line += " | N/A"
    if game.discount_percent:
        line += f" (📉 {format_discount(game.discount_percent)})"
    if game.rating:
        line += f" ⭐ {game.rating:g}"
    return line


def format_game_details(game: Game) -> str:
    text = f"🎮 {game.title}\n\n"
    text += f"Platform: {PLATFORM_LABELS[game.platform]}\n"
    text += f"Rating: {f'⭐ {game.rating:g}' if game.rating else MISSING}\n"
    text += f"Average hours: {f'{game.avg_hours:g}' if game.avg_hours is not None else MISSING}\n"
    text += f"Reviews: {f'{game.review_count:,}' if game.review_count else MISSING}\n"
    text += f"Best price: {format_price(game.best_offer.price if game.best_offer else None)}\n"
    text += f"Regular price: {format_price(game.regular_price)}\n"
    if game.discount_percent:
        text += f"Discount: {format_discount(game.discount_percent)}\n"

    text += "\n"
    if not game.offers:
        text += "No store offers found."
    else:
        text += "Offers:\n"
        for offer in game.offers:
            discount = offer_discount(offer, game.regular_price)
            store = offer.store_name or offer.store_key
            text += f"   └ 🏪 {store}: {format_price(offer.price)}"
            text += f" ({discount}%)" if discount is not None else f" ({MISSING})"
            text += "\n"

    if game.source_url:
        text += f"\nSource: {game.source_url}"
    return text.rstrip("\n")


def format_games_header(count: int, sort_key: str, search_term: str = "") -> str:
    header = f"🎮 Games ({count}, sorted by {sort_key}"
    if search_term:
        header += f", matching '{search_term}'"
    return header + "):"
