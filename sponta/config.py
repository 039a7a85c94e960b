import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./sponta.db")
    AUTO_CREATE_SCHEMA: bool = os.getenv("AUTO_CREATE_SCHEMA", "0") == "1"
    CORS_ORIGINS: list[str] = [
        item.strip()
        for item in os.getenv("CORS_ORIGINS", "*").split(",")
        if item.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC").strip() or "UTC"

    GEMINI_API_KEY: str = (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or "").strip()
    GEMINI_MODEL_ID: str = os.getenv("GEMINI_MODEL_ID", "gemini-1.5-flash").strip()
    VERIFICATION_TIMEOUT_SECONDS: float = float(os.getenv("VERIFICATION_TIMEOUT_SECONDS", "30"))
    PHOTO_FETCH_TIMEOUT_SECONDS: float = float(os.getenv("PHOTO_FETCH_TIMEOUT_SECONDS", "15"))
    MAX_PHOTO_BYTES: int = int(os.getenv("MAX_PHOTO_BYTES", str(10 * 1024 * 1024)))

    DEFAULT_CHALLENGE_POINTS: int = int(os.getenv("DEFAULT_CHALLENGE_POINTS", "10"))
    NEARBY_DEFAULT_RADIUS_M: int = int(os.getenv("NEARBY_DEFAULT_RADIUS_M", "5000"))


settings = Settings()
