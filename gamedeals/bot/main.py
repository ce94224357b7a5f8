import asyncio
import hashlib
import logging
from collections import OrderedDict
from typing import Optional

from aiogram import Bot, Dispatcher, F
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import (
    CallbackQuery,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    Message,
)

# Import settings and catalog services
from gamedeals.bot.formatting import format_game_details, format_game_line, format_games_header
from gamedeals.core.config import settings
from gamedeals.schemas.game import Game
from gamedeals.services.catalog import Catalog
from gamedeals.services.collection import CollectionView, SortKey
from gamedeals.services.source import CatalogLoadError, CatalogSource

logger = logging.getLogger(__name__)

dp = Dispatcher()
catalog = Catalog(CatalogSource())

# One view per chat, so every user keeps their own search term and ordering.
# Least recently used chats are dropped past settings.BOT_MAX_CHATS.
chat_views: "OrderedDict[int, CollectionView]" = OrderedDict()


def callback_key(game: Game) -> str:
    # callback_data is limited to 64 bytes, titles are not
    return "game_" + hashlib.sha1(game.id.encode("utf-8")).hexdigest()[:16]


def find_by_callback_key(key: str) -> Optional[Game]:
    for game in catalog.view.records:
        if callback_key(game) == key:
            return game
    return None


def get_chat_view(chat_id: int) -> CollectionView:
    """Returns the chat's view, rebased on the current catalog snapshot."""
    view = chat_views.get(chat_id)
    if view is None:
        view = chat_views[chat_id] = CollectionView(catalog.view.records)
        while len(chat_views) > settings.BOT_MAX_CHATS:
            chat_views.popitem(last=False)
    else:
        chat_views.move_to_end(chat_id)
        if view.records is not catalog.view.records:
            view.replace(catalog.view.records)
    return view


def build_keyboard(games) -> InlineKeyboardMarkup:
    keyboard = [
        [InlineKeyboardButton(text=game.title, callback_data=callback_key(game))]
        for game in games[: settings.BOT_PAGE_SIZE]
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)


@dp.message(CommandStart())
async def command_start_handler(message: Message) -> None:
    """Handles the /start command."""
    logger.info(f"User {message.from_user.id} started the bot.")
    sort_keys = ", ".join(key.value for key in SortKey)
    welcome_text = (
        f"Hi {message.from_user.full_name}! 🎮\n\n"
        f"I keep an eye on game prices across stores.\n\n"
        f"Commands available:\n"
        f"/search <title> - Search for a specific game, /search alone clears it\n"
        f"/games [sort] - List games, sort by one of: {sort_keys}\n"
        f"/status - Check catalog state and size\n"
        f"/reload - Fetch a fresh catalog"
    )
    await message.answer(welcome_text)


@dp.message(Command("status"))
async def status_handler(message: Message) -> None:
    """Handles the /status command."""
    icon = "🟢" if catalog.is_ready else "🔴"
    await message.answer(
        f"{icon} Catalog: {len(catalog.view)} games\n\nState: {catalog.state.value}"
    )


@dp.message(Command("reload"))
async def reload_handler(message: Message) -> None:
    """Handles the /reload command."""
    loading_msg = await message.answer("⏳ Fetching the catalog...")
    try:
        loaded = await asyncio.to_thread(catalog.load)
    except CatalogLoadError as e:
        logger.error(f"Reload requested by {message.from_user.id} failed: {e}")
        await loading_msg.edit_text("❌ Could not load the catalog. Previous data is kept.")
        return
    await loading_msg.edit_text(f"✅ Catalog loaded: {loaded} games")


@dp.message(Command("search"))
async def search_handler(message: Message, command: CommandObject) -> None:
    """Handles the /search command."""
    if not catalog.is_ready:
        await message.answer("❌ The catalog is not loaded yet. Try /reload.")
        return

    view = get_chat_view(message.chat.id)
    query = (command.args or "").strip()
    if not query:
        # A bare /search clears the chat's filter, /games lists everything again
        view.set_search_term("")
        await message.answer(
            "🔍 Search cleared, /games lists the whole catalog. Example search: /search zelda"
        )
        return

    logger.info(f"User {message.from_user.id} searched for: {query}")

    games = view.set_search_term(query)
    if not games:
        await message.answer(f"🔍 Unfortunately, no game matches '{query}'.")
        return

    await message.answer(
        f"🔍 Found {len(games)} games for '{query}'. Please choose:",
        reply_markup=build_keyboard(games),
    )


@dp.message(Command("games"))
async def games_handler(message: Message, command: CommandObject) -> None:
    """Handles the /games command."""
    if not catalog.is_ready:
        await message.answer("❌ The catalog is not loaded yet. Try /reload.")
        return

    view = get_chat_view(message.chat.id)
    if command.args:
        try:
            view.set_sort_key(command.args.strip())
        except ValueError:
            sort_keys = ", ".join(key.value for key in SortKey)
            await message.answer(f"Unknown sort key. Use one of: {sort_keys}")
            return

    games = view.visible
    if not games:
        await message.answer("📭 No games to show. Send /search without a title to clear the filter.")
        return

    response_text = format_games_header(len(games), view.sort_key.value, view.search_term) + "\n\n"
    for game in games[: settings.BOT_PAGE_SIZE]:
        response_text += f"🔹 {format_game_line(game)}\n"
    await message.answer(response_text, reply_markup=build_keyboard(games))


@dp.callback_query(F.data.startswith("game_"))
async def game_selection_handler(callback: CallbackQuery) -> None:
    """Handles clicks on the game inline buttons."""
    game = find_by_callback_key(callback.data)
    if game is None:
        await callback.message.edit_text("❌ Game not found in the catalog anymore.")
        await callback.answer()
        return

    # Store links, like the "visit" column of the offers table
    keyboard = [
        [InlineKeyboardButton(text=f"Visit {offer.store_name or offer.store_key}", url=offer.url)]
        for offer in game.offers
        if offer.url
    ]
    await callback.message.edit_text(
        format_game_details(game),
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard) if keyboard else None,
    )
    await callback.answer()


async def main() -> None:
    """Main entry point for the Telegram bot."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logger.info("Starting GameDeals bot...")

    try:
        await asyncio.to_thread(catalog.load)
    except CatalogLoadError as e:
        logger.error(f"Starting without a catalog: {e}")

    bot = Bot(token=settings.TELEGRAM_BOT_TOKEN)
    try:
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
