from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BINDERVIEW_")

    app_name: str = "binderview"
    debug: bool = False

    # Catalog build inputs and outputs
    collection_csv: Path = Path("cards.csv")
    catalog_path: Path = Path("data/cards.json")
    unmatched_path: Path = Path("data/unmatched_cards.json")

    # Scryfall bulk data, cached between builds
    cache_dir: Path = Path.home() / ".cache" / "binderview"
    scryfall_bulk_url: str = "https://api.scryfall.com/bulk-data/default-cards"
    http_retries: int = 3
    http_timeout: float = 30.0

    my_price_multiplier: float = 0.85
    default_language: str = "en"

    # Viewer
    page_size: int = 20
    # None keeps preferences in memory only
    preferences_dir: Path | None = None
    notification_seconds: float = 5.0


settings = Settings()


# Cached bulk file name inside cache_dir
BULK_FILE_NAME = "default-cards.json"

# The marker glyph Scryfall uses in some collector numbers (e.g. "100★")
COLLECTOR_NUMBER_MARKER = "★"
