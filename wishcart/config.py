# wishcart/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from pathlib import Path
from typing import Dict


class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where the CSV / XLSX tables live
    PRODUCTS_FILE: str = "products.csv"
    CUSTOMERS_FILE: str = "customers.csv"
    CARTS_FILE: str = "carts.csv"
    WISHLISTS_FILE: str = "wishlists.csv"
    WISHLIST_ITEMS_FILE: str = "wishlist_items.csv"

    # uploaded custom option files are written below this directory
    MEDIA_DIR: Path = Path("media")
    # used to build the "view on site" link of shared wishlists
    BASE_URL: str = "http://localhost:8000/"

    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"

    # tax class id -> rate (0.2 == 20%); classes not listed are untaxed
    TAX_RATES: Dict[str, float] = {}

    # leave SMTP_HOST empty to only log outgoing share mails
    SMTP_HOST: str = ""
    SMTP_PORT: int = 25
    SMTP_SENDER: str = "wishlist@localhost"

    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # Example .env:
    # DATA_DIR=./data
    # TAX_RATES={"2": 0.2}

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
