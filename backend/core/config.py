import os
from dotenv import load_dotenv

load_dotenv()


def _as_int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Settings:
    environment: str = os.getenv("ENVIRONMENT", "production").lower()

    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./db/inventory.db"
    )
    database_echo: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"

    # Server
    host: str = os.getenv("HOST", "localhost")
    port: int = _as_int(os.getenv("PORT"), 3000)
    cors_origins: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]

    # Logging
    log_level: str = os.getenv(
        "LOG_LEVEL",
        "DEBUG" if environment == "development" else "INFO"
    ).upper()
    log_dir: str = os.getenv("LOG_DIR", "logs")

    # One-time seed file, only loaded into an empty inventory table
    csv_import_path: str = os.getenv("CSV_IMPORT_PATH", "")

    default_items_per_page: int = _as_int(os.getenv("DEFAULT_ITEMS_PER_PAGE"), 25)
    sse_keepalive_seconds: float = float(_as_int(os.getenv("SSE_KEEPALIVE_SECONDS"), 15))


settings = Settings()
