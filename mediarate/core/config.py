from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(Path(ROOT_DIR) / '.env')

class Settings(BaseSettings):
    FIREBASE_CREDS_PATH: str = "serviceAccount.json"
    STORE_BACKEND: str = "firestore"  # firestore | memory
    MEDIA_COLLECTION: str = "media"
    RATINGS_COLLECTION: str = "ratings"
    CATALOG_PAGE_SIZE: int = 20
    PLACEHOLDER_COVER_IMAGE: str = "https://images.unsplash.com/photo-1489599735734-79b4169c4388?w=400&h=600&fit=crop"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "app.log"
    CORS_ORIGINS: List[str] = ["*"]

    @property
    def FIREBASE_CREDS_PATH_ABSOLUTE(self) -> Path:
        """Returns absolute path to Firebase credentials file"""
        return ROOT_DIR / self.FIREBASE_CREDS_PATH

    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
