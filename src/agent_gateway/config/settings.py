"""Application settings and configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with flat structure."""

    # LLM Provider API Keys
    openai_api_key: str = ""
    openrouter_api_key: str = ""

    # LLM Configuration
    llm_provider: str = "ollama"
    llm_model: str = "qwen3:30b"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 4096
    llm_allow_local_fallback: bool = True

    # OpenAI-compatible endpoint
    openai_api_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    # OpenRouter specific
    openrouter_model: str = "qwen/qwen-3-next"

    # Ollama specific (local)
    ollama_api_url: str = "http://localhost:11434/api"
    ollama_model: str = "qwen3:30b"

    # Oracle behaviour
    oracle_timeout_seconds: float = 120.0

    # Clustering / reassignment
    reassign_threshold: int = 5
    uncategorized_label: str = "uncategorized"

    # Streaming
    response_chunk_size: int = 100

    # Survey data
    surveys_dir: Path = Path("ai_data") / "surveys"

    # Retrieval backend (RAGFlow-compatible)
    retriever_api_url: str = "http://localhost:8001/api/v1/retrieval"
    retriever_api_key: str = ""
    retriever_dataset_ids: list[str] = []
    retriever_document_ids: list[str] = []
    retriever_similarity_threshold: float = 0.3
    retriever_vector_similarity_weight: float = 0.1

    # Data agent (read-only SQLite)
    data_db_path: Path = Path("ai_data") / "training.db"
    data_schema: str = ""

    # Image generation (ComfyUI-compatible)
    image_api_url: str = "http://localhost:8188"
    image_client_id: str = "agent-gateway"
    image_poll_attempts: int = 60
    image_poll_delay_seconds: float = 1.0

    # Text conversion cache
    text_cache_size: int = 512
    text_cache_ttl_seconds: float = 3600.0

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Path | None = Path("ai_data/gateway.log")
    save_prompts: bool = False
    log_prompt_dir: Path = Path("ai_data/prompts")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
