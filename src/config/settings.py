# src/config/settings.py
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional

# Get project root (2 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    # Feedback REST API
    feedback_api_base_url: str = "http://localhost:8080/api"
    feedback_api_token: Optional[str] = None
    request_timeout: int = 30

    # Pipeline config
    log_level: str = "INFO"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        case_sensitive = False
