from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str
    
    # Auth (signs the session cookie)
    secret_key: str
    cookie_secure: bool = False  # True in production (HTTPS only)
    
    # App
    debug: bool = False
    allowed_origins: str = ""  # comma-separated
    
    # AI provider (OpenRouter chat completions)
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    ai_model: str = "openai/gpt-4-turbo-preview"
    ai_app_name: str = "Hiring Platform"
    ai_referer: str = "http://localhost:3000"
    ai_timeout_seconds: float = 30.0
    ai_max_retries: int = 2
    ai_backoff_seconds: float = 0.5
    ai_max_concurrency: int = 4
    
    # Resume analysis
    upload_dir: str = "uploads"
    max_resume_size_mb: int = 5
    resume_text_limit: int = 15000
    
    # Chat: number of most recent messages sent as context (None = whole conversation)
    chat_history_window: Optional[int] = None


settings = Settings()
