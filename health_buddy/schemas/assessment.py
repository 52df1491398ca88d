"""
HealthBuddy — Знімок завершеної оцінки

AssessmentSnapshot зберігається після фіналізації інтерв'ю
і використовується для пояснень та історії.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .diagnosis import Condition, rank_conditions
from .evidence import ChoiceId, EvidenceItem
from .patient import Sex, TravelRegion


class AssessmentSnapshot(BaseModel):
    """Результат інтерв'ю"""
    assessment_id: Optional[str] = None
    interview_id: str

    age: int
    sex: Sex
    location: Optional[TravelRegion] = None

    conditions: List[Condition] = Field(default_factory=list)
    evidence: List[EvidenceItem] = Field(default_factory=list)
    emergencies: List[str] = Field(default_factory=list)

    question_count: int = 0
    stop_reason: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def top_condition(self) -> Optional[Condition]:
        ranked = rank_conditions(self.conditions)
        return ranked[0] if ranked else None

    @property
    def present_evidence(self) -> List[EvidenceItem]:
        return [e for e in self.evidence if e.choice_id == ChoiceId.PRESENT]

    def to_dict(self) -> dict:
        """JSON-сумісний словник (з назвами доказів для відображення)"""
        data = self.model_dump(mode="json")
        data["evidence"] = [
            {**e.model_dump(mode="json", exclude_none=True), **({"name": e.name} if e.name else {})}
            for e in self.evidence
        ]
        return data
