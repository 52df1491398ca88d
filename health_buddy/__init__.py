"""
HealthBuddy — Покрокове інтерв'ю для перевірки симптомів

Архітектура: демографія → опис симптомів → цикл питань → завершення

Модулі:
- config: Конфігурація системи
- schemas: Pydantic моделі (докази, питання, стани, знімок оцінки)
- interview: EvidenceStore, StopPolicy, InterviewController
- gateway: Клієнти Infermedica (/parse, /diagnosis) та Gemini
- storage: Збереження знімків оцінки
- api: Backend API
"""

__version__ = "1.0.0"

from .config import HealthBuddyConfig, get_default_config
