from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_anon_key: str
    supabase_jwt_secret: str = ""

    # Embeddings
    openai_api_key: str = ""
    embedding_api_url: str = "https://api.openai.com/v1/embeddings"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1024
    embedding_max_chars: int = 8000
    embedding_timeout_seconds: float = 30.0

    # Classification
    min_message_length: int = 10
    hint_confidence: float = 0.95
    similarity_threshold: float = 0.70
    similarity_floor: float = 0.10
    similarity_top_k: int = 3
    fallback_confidence: float = 0.10
    low_confidence_threshold: float = 0.30

    # App
    cors_origins: list[str] = [
        "https://circulardemocracy.org",
        "http://localhost:5173",
    ]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
