from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

class ClientSettings(BaseSettings):
    api_base: str = "http://127.0.0.1:8000"
    request_timeout: float = 10.0
    queue_path: Path = Path.home() / ".compost" / "local_storage.json"
    poll_interval: float = 5.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="COMPOST_", extra="ignore")

client_settings = ClientSettings()
