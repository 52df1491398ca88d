"""
HealthBuddy — API Configuration

Налаштування FastAPI сервера та зовнішніх сервісів.
"""

from dataclasses import dataclass, field
from typing import Optional
import os

from health_buddy.config import HealthBuddyConfig, load_config


@dataclass
class APIConfig:
    """Конфігурація API сервера"""

    # Сервер
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True
    reload: bool = False

    # CORS
    cors_origins: list = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list = field(default_factory=lambda: ["*"])
    cors_allow_headers: list = field(default_factory=lambda: ["*"])

    # Конфігурація інтерв'ю (YAML)
    config_path: Optional[str] = None

    # Де зберігати результати (None → у пам'яті)
    assessments_dir: Optional[str] = None
    max_assessments: int = 1000

    # Сесії
    max_sessions: int = 1000
    session_timeout_minutes: int = 60

    # API
    api_prefix: str = "/api"
    api_title: str = "HealthBuddy API"
    api_description: str = "Symptom checker interview orchestration"
    version: str = "1.0.0"

    # Секрети зовнішніх API
    infermedica_app_id: Optional[str] = None
    infermedica_app_key: Optional[str] = None
    infermedica_url: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: Optional[str] = None

    def build_config(self) -> HealthBuddyConfig:
        """Конфігурація системи: YAML (якщо є) + секрети з оточення"""
        if self.config_path and os.path.exists(self.config_path):
            config = load_config(self.config_path)
        else:
            config = HealthBuddyConfig()

        gateway = config.gateway
        if self.infermedica_app_id:
            gateway.infermedica_app_id = self.infermedica_app_id
        if self.infermedica_app_key:
            gateway.infermedica_app_key = self.infermedica_app_key
        if self.infermedica_url:
            gateway.infermedica_url = self.infermedica_url
        if self.gemini_api_key:
            gateway.gemini_api_key = self.gemini_api_key
        if self.gemini_model:
            gateway.gemini_model = self.gemini_model

        return config

    @classmethod
    def from_env(cls) -> 'APIConfig':
        """Створити конфігурацію з environment variables"""
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8000")),
            debug=os.getenv("API_DEBUG", "true").lower() == "true",
            config_path=os.getenv("HEALTH_BUDDY_CONFIG"),
            assessments_dir=os.getenv("ASSESSMENTS_DIR"),
            max_assessments=int(os.getenv("MAX_ASSESSMENTS", "1000")),
            infermedica_app_id=os.getenv("INFERMEDICA_APP_ID"),
            infermedica_app_key=os.getenv("INFERMEDICA_APP_KEY"),
            infermedica_url=os.getenv("INFERMEDICA_URL"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL"),
        )


# Глобальна конфігурація
config = APIConfig.from_env()
