# catalog/config.py
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    UPLOAD_DIR: str = "uploads"

    # Identity endpoint; None timeout waits for the service indefinitely
    WHOAMI_URL: str = "http://localhost:3000/whoami"
    WHOAMI_TIMEOUT: Optional[float] = None

    # "counter" never reuses ids, "size" is the legacy len(store) + 1 rule
    PRODUCT_ID_STRATEGY: Literal["counter", "size"] = "counter"
    DELETE_IMAGE_ON_DELETE: bool = True

    # token -> is admin, e.g. SEED_USERS='{"admin-token": true}'
    SEED_USERS: Dict[str, bool] = {}

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")


settings = Settings()


def get_settings() -> Settings:
    return settings
