from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    use_mongo: bool = False
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "compost"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]
    pickup_events_default_limit: int = 100

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
