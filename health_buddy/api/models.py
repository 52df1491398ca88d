"""
HealthBuddy API — Pydantic Models

Моделі для запитів та відповідей REST API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from health_buddy.schemas import Sex, TravelRegion


# === Request Models ===

class CreateInterviewRequest(BaseModel):
    """Запит на створення інтерв'ю"""
    age: str = Field(
        ...,
        description="Вік у роках (ціле число 1..120)",
        examples=["34"],
    )
    sex: str = Field(
        ...,
        description="Стать: male / female / other",
        examples=["female"],
    )
    location: Optional[TravelRegion] = Field(
        default=None,
        description="Регіон нещодавньої подорожі",
    )


class DemographicsRequest(BaseModel):
    """Демографія для нового інтерв'ю після скидання (необов'язкова)"""
    age: Optional[str] = None
    sex: Optional[str] = None
    location: Optional[TravelRegion] = None


class SymptomsRequest(BaseModel):
    """Опис симптомів вільним текстом"""
    text: str = Field(
        ...,
        description="Опис симптомів",
        examples=["I have a severe headache and nausea since yesterday"],
    )
    tag_initial: bool = Field(
        default=False,
        description="Позначити розпізнані симптоми як initial",
    )


class AnswerRequest(BaseModel):
    """Відповідь на пункт питання"""
    item_id: str = Field(..., description="ID пункту питання", examples=["s_21"])
    choice_id: str = Field(..., description="present / absent / unknown", examples=["present"])


# === Response Models ===

class ConditionInfo(BaseModel):
    """Стан з ймовірністю"""
    id: str
    name: str
    common_name: Optional[str] = None
    probability: float


class InterviewState(BaseModel):
    """Повний стан інтерв'ю"""
    session_id: str
    interview_id: Optional[str] = None
    phase: str
    age: Optional[int] = None
    sex: Optional[Sex] = None
    location: Optional[str] = None
    question_count: int = 0
    max_questions: int
    can_extend: bool = False
    in_flight: bool = False
    evidence: List[Dict[str, Any]] = Field(default_factory=list)
    leading_conditions: List[ConditionInfo] = Field(default_factory=list)
    current_question: Optional[Dict[str, Any]] = None
    pending_selections: Dict[str, str] = Field(default_factory=dict)
    emergencies: List[str] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)
    stop_reason: Optional[str] = None
    last_error: Optional[str] = None
    assessment_id: Optional[str] = None
    stale: bool = False
    created_at: str
    updated_at: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "a1b2c3d4",
                "interview_id": "0f8e5c8e-3c7a-4a0e-9d1c-6f0f2f3b7c11",
                "phase": "presenting_question",
                "age": 34,
                "sex": "female",
                "question_count": 2,
                "max_questions": 8,
                "leading_conditions": [
                    {"id": "c_55", "name": "Migraine", "common_name": "Migraine", "probability": 0.58}
                ],
                "current_question": {
                    "type": "single",
                    "text": "Do you have a fever?",
                    "items": [{"id": "s_98", "name": "Fever", "choices": []}],
                },
                "emergencies": [],
                "created_at": "2026-01-01T10:00:00",
                "updated_at": "2026-01-01T10:01:30",
            }
        }
    )


class ExplanationResponse(BaseModel):
    """Пояснення результатів від генеративної моделі"""
    session_id: str
    assessment_id: Optional[str] = None
    explanation: str


class AssessmentListResponse(BaseModel):
    """Збережені результати"""
    assessments: List[Dict[str, Any]]
    total: int


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    version: str = "1.0.0"
    services_loaded: bool = False
    components: Dict[str, bool] = Field(default_factory=dict)
    active_sessions: int = 0


class ErrorResponse(BaseModel):
    """Помилка"""
    error: str
    detail: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Session not found",
                "detail": "Session with id 'xyz' does not exist",
            }
        }
    )
