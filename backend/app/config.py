# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Transcript Sync API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the dashboard frontend
    CORS_ORIGINS: list[str] = _env_list(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
    )

    # OpenAI chat completions (transcript language/topic analysis)
    # Without a key the analyzer only ever returns the fallback analysis
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_api_url: str = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    gpt_model: str = os.getenv("GPT_MODEL", "gpt-4o-mini")
    gpt_temperature: float = float(os.getenv("GPT_TEMPERATURE", "0.3"))
    analysis_timeout: float = float(os.getenv("ANALYSIS_TIMEOUT", "60"))

    # Voiceflow transcript API
    voiceflow_api_base: str = os.getenv("VOICEFLOW_API_BASE", "https://api.voiceflow.com/v2")
    voiceflow_timeout: float = float(os.getenv("VOICEFLOW_TIMEOUT", "30"))

    # Network-level retry (single HTTP fetch)
    fetch_max_attempts: int = int(os.getenv("FETCH_MAX_ATTEMPTS", "3"))
    fetch_base_delay: float = float(os.getenv("FETCH_BASE_DELAY", "1.0"))

    # Batch sync policy (whole per-transcript unit: fetch + analysis + DB)
    sync_chunk_size: int = int(os.getenv("SYNC_CHUNK_SIZE", "10"))
    sync_concurrency: int = int(os.getenv("SYNC_CONCURRENCY", "5"))
    sync_unit_retries: int = int(os.getenv("SYNC_UNIT_RETRIES", "3"))
    sync_unit_base_delay: float = float(os.getenv("SYNC_UNIT_BASE_DELAY", "2.0"))
    sync_pacing_min: float = float(os.getenv("SYNC_PACING_MIN", "0.2"))
    sync_pacing_max: float = float(os.getenv("SYNC_PACING_MAX", "0.5"))
    sync_transaction_timeout: float = float(os.getenv("SYNC_TRANSACTION_TIMEOUT", "30"))

    # Optional project seeded on first startup
    default_project_name: str = os.getenv("DEFAULT_PROJECT_NAME", "Default project")
    default_voiceflow_project_id: str | None = os.getenv("DEFAULT_VOICEFLOW_PROJECT_ID")
    default_voiceflow_api_key: str | None = os.getenv("DEFAULT_VOICEFLOW_API_KEY")

settings = Settings()  # Instantiate configuration
