from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Relational store (SQLite by default, postgresql:// URLs are switched to asyncpg)
    database_url: str = "sqlite+aiosqlite:///./data/inventsync.db"
    database_echo: bool = False
    create_tables_on_startup: bool = True

    log_level: str = "INFO"
    log_json: bool = False

    cors_origins: list[str] = ["http://localhost:3000"]

    # eBay Sell APIs
    ebay_marketplace_id: str = "EBAY_US"
    ebay_currency: str = "USD"
    ebay_location_key: str = "default-location"
    ebay_item_url_template: str = "https://www.ebay.com/itm/{listing_id}"
    ebay_placeholder_image_url: str = "https://via.placeholder.com/500x500?text=No+Image"
    ebay_listing_description: str = "Listed via InventSync"
    ebay_category_tree_id: str = "0"
    ebay_http_timeout: float = 30.0


settings = Settings()
