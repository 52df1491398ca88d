"""
HealthBuddy — Налаштування системи

Всі параметри зібрані в dataclass-и для:
- Типізації
- Легкого доступу через config.stopping.dominance_threshold
- Серіалізації в YAML
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# =============================================================================
# STOPPING CRITERIA CONFIGURATION
# =============================================================================

DEFAULT_EMERGENCY_KEYWORDS = [
    "severe chest pain",
    "difficulty breathing",
    "loss of consciousness",
    "severe headache",
    "stroke symptoms",
    "heart attack",
    "severe bleeding",
    "poisoning",
    "severe burns",
    "severe allergic reaction",
    "suicidal thoughts",
    "severe abdominal pain",
    "difficulty swallowing",
    "severe shortness of breath",
    "chest tightness",
    "cardiac arrest",
    "respiratory distress",
    "anaphylaxis",
    "seizure",
]


@dataclass
class StoppingConfig:
    """Пороги критеріїв зупинки інтерв'ю"""

    # DOMINANCE: ŷ_top > threshold
    dominance_threshold: float = 0.85

    # GAP: ŷ_top - ŷ_second > gap
    gap_threshold: float = 0.40

    # CONFIDENT: ŷ_top > threshold AND remote should_stop
    confident_threshold: float = 0.70

    # Мінімальна довжина інтерв'ю
    min_questions: int = 3

    # REMOTE_STOP: remote should_stop AND питань >= N
    remote_stop_min_questions: int = 5

    # CONVERGED: питань >= N AND ŷ_top > threshold
    convergence_min_questions: int = 6
    convergence_threshold: float = 0.60

    # Ключові слова невідкладних станів
    emergency_keywords: List[str] = field(
        default_factory=lambda: list(DEFAULT_EMERGENCY_KEYWORDS)
    )

    # Які умови вважаються гострими / тяжкими
    emergency_acuteness: List[str] = field(
        default_factory=lambda: ["acute", "chronic_with_exacerbation"]
    )
    emergency_severity: List[str] = field(default_factory=lambda: ["high"])


# =============================================================================
# INTERVIEW CONFIGURATION
# =============================================================================

@dataclass
class InterviewConfig:
    """Параметри інтерв'ю"""

    # Ліміт питань (може бути розширений до max_questions * extension_factor)
    max_questions: int = 8
    extension_factor: float = 1.5

    # Демографія
    min_age: int = 0            # виключно
    max_age: int = 120          # включно
    allowed_sexes: List[str] = field(
        default_factory=lambda: ["male", "female", "other"]
    )

    # Опис симптомів
    min_symptom_text_length: int = 10
    min_mention_relevance: float = 0.4

    # Кількість провідних станів у проміжному повідомленні
    leading_conditions_count: int = 3

    @property
    def extended_max_questions(self) -> int:
        return int(self.max_questions * self.extension_factor)


# =============================================================================
# GATEWAY CONFIGURATION
# =============================================================================

@dataclass
class GatewayConfig:
    """Параметри зовнішніх API"""

    # Infermedica
    infermedica_url: str = "https://api.infermedica.com/v3"
    infermedica_app_id: Optional[str] = None
    infermedica_app_key: Optional[str] = None

    # Gemini
    gemini_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_key: Optional[str] = None

    # HTTP
    timeout_seconds: float = 15.0

    # extras для /diagnosis
    diagnosis_extras: Dict[str, bool] = field(default_factory=lambda: {
        "enable_triage_advanced_mode": True,
        "enable_conditions_details": True,
        "enable_evidence_details": True,
    })


# =============================================================================
# MAIN CONFIGURATION
# =============================================================================

@dataclass
class HealthBuddyConfig:
    """
    Головна конфігурація HealthBuddy

    Приклад використання:
        config = HealthBuddyConfig()
        print(config.stopping.dominance_threshold)  # 0.85
        print(config.interview.max_questions)       # 8
    """

    version: str = "1.0.0"
    project_name: str = "HealthBuddy"

    stopping: StoppingConfig = field(default_factory=StoppingConfig)
    interview: InterviewConfig = field(default_factory=InterviewConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)

    # Каталог JSON результатів (None → у пам'яті)
    assessments_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "HealthBuddyConfig":
        """Створити конфігурацію зі словника (наприклад, з YAML)"""
        data = dict(data or {})
        return cls(
            version=data.get("version", cls.version),
            project_name=data.get("project_name", cls.project_name),
            stopping=StoppingConfig(**(data.get("stopping") or {})),
            interview=InterviewConfig(**(data.get("interview") or {})),
            gateway=GatewayConfig(**(data.get("gateway") or {})),
            assessments_dir=data.get("assessments_dir", cls.assessments_dir),
        )


def get_default_config() -> HealthBuddyConfig:
    """Отримати конфігурацію за замовчуванням"""
    return HealthBuddyConfig()
