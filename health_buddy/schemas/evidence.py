"""
HealthBuddy — Схеми доказів (evidence)

EvidenceItem — один факт про пацієнта: симптом або фактор ризику,
підтверджений, заперечений чи невідомий.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ChoiceId(str, Enum):
    """Відповідь щодо симптому"""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class EvidenceSource(str, Enum):
    """Походження доказу (відсутнє = зібрано під час інтерв'ю)"""
    INITIAL = "initial"
    SUGGEST = "suggest"
    PREDEFINED = "predefined"
    RED_FLAGS = "red_flags"


class EvidenceItem(BaseModel):
    """
    Доказ щодо симптому / фактора ризику.

    Приклад:
        item = EvidenceItem(id="s_21", choice_id=ChoiceId.PRESENT)
        item.to_payload()  # {"id": "s_21", "choice_id": "present"}
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="ID концепту Infermedica")
    choice_id: ChoiceId
    source: Optional[EvidenceSource] = None

    # Лише для відображення, не надсилається в API
    name: Optional[str] = Field(default=None, exclude=True)

    @property
    def is_dynamic(self) -> bool:
        """Зібрано під час інтерв'ю (без source)"""
        return self.source is None

    @property
    def is_risk_factor(self) -> bool:
        return self.id.startswith("p_")

    def to_payload(self) -> dict:
        """Представлення для тіла запиту /diagnosis"""
        return self.model_dump(mode="json", exclude_none=True)
