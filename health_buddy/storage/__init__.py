"""HealthBuddy — Збереження результатів оцінки"""

from .assessment_store import (
    AssessmentStore,
    InMemoryAssessmentStore,
    JsonAssessmentStore,
    FILE_PREFIX,
)

__all__ = [
    "AssessmentStore",
    "InMemoryAssessmentStore",
    "JsonAssessmentStore",
    "FILE_PREFIX",
]
