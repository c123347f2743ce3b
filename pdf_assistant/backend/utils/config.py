from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_key: Optional[str] = None
    llm_model: str = "gemini-2.5-flash"
    quiz_question_count: int = 10
    max_body_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
