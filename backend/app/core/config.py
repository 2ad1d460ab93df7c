from functools import lru_cache
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-realtime-preview-2024-12-17"
    temperature: float = 0.8
    max_generation_attempts: int = 2
    completion_linger_sec: float = 2.0
    max_sessions: int = 100
    halve_flat_list: bool = False
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

    @property
    def api_key_configured(self) -> bool:
        return bool(self.openai_api_key) and self.openai_api_key != "your_openai_api_key_here"

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
