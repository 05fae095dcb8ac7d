from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./invoicer.db"
    database_echo: bool = False

    # AI template generation (OpenAI chat API)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"  # Vision-capable, needed when a logo is supplied
    template_temperature: float = 0.4
    template_max_tokens: int = 4000
    template_timeout_seconds: int = 60

    # Logo storage (S3-compatible, local filesystem fallback)
    storage_endpoint_url: Optional[str] = None
    storage_access_key_id: Optional[str] = None
    storage_secret_access_key: Optional[str] = None
    storage_bucket_name: str = "invoicer-assets"
    storage_region: str = "us-east-1"
    local_storage_dir: str = "local_storage"
    max_logo_bytes: int = 2 * 1024 * 1024

    # Authentication: identity is resolved upstream and forwarded in this header
    auth_user_header: str = "X-User-Id"

    # Invoicing defaults
    default_currency: str = "USD"
    recent_invoice_limit: int = 5

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:9002"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


settings = Settings()
