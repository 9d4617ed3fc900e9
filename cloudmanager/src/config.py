from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    base_url: str = "https://cloudmanager.adobe.io"

    # Credentials
    ims_org_id: str = ""
    api_key: str = ""
    access_token: str = ""

    # Log tailing
    tail_backoff_seconds: float = 2.0
    rollover_window_minutes: int = 5  # Either side of UTC midnight

    class Config:
        env_file = ".env"
        env_prefix = "CLOUDMANAGER_"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
