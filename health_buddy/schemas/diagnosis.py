"""
HealthBuddy — Схеми діагностики

Pydantic моделі для обміну з Infermedica:
- Condition / ConditionDetails: кандидат-діагноз
- InterviewQuestion: питання (single | group_single | group_multiple)
- DiagnosisStep: відповідь /diagnosis
- ParseMention / ParseResult: відповідь /parse
- DiagnosisRequest: тіло запиту /diagnosis
"""

from datetime import date
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from .evidence import ChoiceId, EvidenceItem
from .patient import Age, Sex


# ============================================================
# Conditions
# ============================================================

class ConditionDetails(BaseModel):
    """Деталі стану (enable_conditions_details)"""
    model_config = ConfigDict(extra="ignore")

    description: Optional[str] = None
    severity: Optional[str] = None
    category: Optional[str] = None
    treatment_description: Optional[str] = None
    icd10: Optional[str] = None
    acuteness: Optional[str] = None
    prevalence: Optional[str] = None


class Condition(BaseModel):
    """Кандидат-діагноз з ймовірністю"""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    common_name: Optional[str] = None
    probability: float = Field(..., ge=0.0, le=1.0)
    details: Optional[ConditionDetails] = None

    @property
    def display_name(self) -> str:
        return self.common_name or self.name


def rank_conditions(conditions: List[Condition]) -> List[Condition]:
    """Відсортувати стани за спаданням ймовірності"""
    return sorted(conditions, key=lambda c: c.probability, reverse=True)


# ============================================================
# Questions
# ============================================================

class QuestionType(str, Enum):
    """Тип питання"""
    SINGLE = "single"
    GROUP_SINGLE = "group_single"
    GROUP_MULTIPLE = "group_multiple"


class Choice(BaseModel):
    id: ChoiceId
    label: str


class QuestionItem(BaseModel):
    id: str
    name: str
    choices: List[Choice] = Field(default_factory=list)

    def label_for(self, choice_id: ChoiceId) -> str:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice.label
        return ChoiceId(choice_id).value


class _QuestionBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    items: List[QuestionItem] = Field(default_factory=list)

    def find_item(self, item_id: str) -> Optional[QuestionItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def kind(self) -> QuestionType:
        return QuestionType(self.type)

    @property
    def answers_immediately(self) -> bool:
        """Чи приймається вибір одразу (без підтвердження)"""
        return True


class SingleQuestion(_QuestionBase):
    """Одне питання так/ні/не знаю"""
    type: Literal["single"] = "single"


class GroupSingleQuestion(_QuestionBase):
    """Група варіантів, обирається один"""
    type: Literal["group_single"] = "group_single"


class GroupMultipleQuestion(_QuestionBase):
    """Група пунктів, на кожен потрібна відповідь перед підтвердженням"""
    type: Literal["group_multiple"] = "group_multiple"

    @property
    def answers_immediately(self) -> bool:
        return False


InterviewQuestion = Annotated[
    Union[SingleQuestion, GroupSingleQuestion, GroupMultipleQuestion],
    Field(discriminator="type"),
]


# ============================================================
# Diagnosis step
# ============================================================

class DiagnosisStep(BaseModel):
    """
    Відповідь /diagnosis.

    question відсутнє → більше питань немає.
    """
    model_config = ConfigDict(extra="ignore")

    question: Optional[InterviewQuestion] = None
    conditions: List[Condition] = Field(default_factory=list)
    should_stop: bool = False
    has_emergency_evidence: bool = False

    @property
    def ranked_conditions(self) -> List[Condition]:
        return rank_conditions(self.conditions)


class DiagnosisRequest(BaseModel):
    """Тіло запиту /diagnosis — завжди повний список доказів"""
    age: Age
    sex: Sex
    evidence: List[EvidenceItem]
    evaluated_at: Optional[date] = None
    extras: Dict[str, bool] = Field(default_factory=dict)

    def to_payload(self) -> dict:
        payload = {
            "age": self.age.model_dump(),
            "sex": self.sex.value,
            "evidence": [item.to_payload() for item in self.evidence],
        }
        if self.evaluated_at is not None:
            payload["evaluated_at"] = self.evaluated_at.isoformat()
        if self.extras:
            payload["extras"] = dict(self.extras)
        return payload


# ============================================================
# Parse
# ============================================================

class ParseMention(BaseModel):
    """Згадка симптому у вільному тексті"""
    model_config = ConfigDict(extra="ignore")

    id: str
    choice_id: ChoiceId
    name: Optional[str] = None
    common_name: Optional[str] = None
    relevance: Optional[float] = None

    def to_evidence(self, tag_initial: bool = False) -> EvidenceItem:
        return EvidenceItem(
            id=self.id,
            choice_id=self.choice_id,
            source="initial" if tag_initial else None,
            name=self.common_name or self.name,
        )


class ParseResult(BaseModel):
    """Відповідь /parse"""
    model_config = ConfigDict(extra="ignore")

    mentions: List[ParseMention] = Field(default_factory=list)

    def relevant(self, min_relevance: float = 0.4) -> "ParseResult":
        """Відкинути згадки з relevance <= min_relevance (якщо relevance задано)"""
        kept = [
            m for m in self.mentions
            if m.relevance is None or m.relevance > min_relevance
        ]
        return ParseResult(mentions=kept)
