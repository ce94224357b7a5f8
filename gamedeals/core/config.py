from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "GameDeals"
    VERSION: str = "1.0.0"

    # Catalog source (realtime database export, a JSON array of games)
    CATALOG_URL: str = "https://resultadosscrapping-default-rtdb.firebaseio.com/resultados.json"
    REQUEST_TIMEOUT: float = 10.0
    LOAD_ON_STARTUP: bool = True

    # Telegram settings (will be loaded from .env automatically)
    TELEGRAM_BOT_TOKEN: str = ""
    BOT_PAGE_SIZE: int = 10
    BOT_MAX_CHATS: int = 1000

    # Pydantic will read variables from the .env file
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
