"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend directory is loaded for local development.

NOTE: the gateway credentials below are only a start-up fallback. Credentials
entered through the connection flow live in the local credential store.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    # Local storage for the credential pair (client-local key/value storage)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmadash.db")

    # Hosted data API fallback credentials (never logged)
    GATEWAY_URL: str = os.getenv("PHARMADASH_GATEWAY_URL", "")
    GATEWAY_KEY: str = os.getenv("PHARMADASH_GATEWAY_KEY", "")

    # Table queried once to validate a credential pair
    PROBE_TABLE: str = os.getenv("PROBE_TABLE", "inventory")

    # Drugs below this quantity count as low stock
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "25"))

    # CORS (explicit origins only)
    CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080",
        )
    )

    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()
