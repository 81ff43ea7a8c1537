from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

LIBRARY_DIR = Path(__file__).resolve().parent.parent / "library"


class Settings(BaseSettings):

    openai_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None

    ai_model: str = "gpt-4o"
    llm_max_tokens: int = 4096
    llm_temperature: float = 0.2

    # Templates
    templates_path: str = str(LIBRARY_DIR)
    templates_config_path: str = "templates_config.json"

    chat_history_limit: int = 10

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
