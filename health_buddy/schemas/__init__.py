"""
HealthBuddy — Модуль схем даних (schemas)

Pydantic моделі для валідації та серіалізації даних.

Компоненти:
- patient.py: Sex, TravelRegion, Age, Demographics
- evidence.py: ChoiceId, EvidenceSource, EvidenceItem
- diagnosis.py: Condition, InterviewQuestion, DiagnosisStep, ParseResult, DiagnosisRequest
- assessment.py: AssessmentSnapshot

Приклад використання:
    from health_buddy.schemas import DiagnosisStep

    step = DiagnosisStep.model_validate(response_json)
    if step.question is not None:
        print(step.question.kind, step.question.text)
"""

from .patient import (
    Sex,
    TravelRegion,
    Age,
    Demographics,
)

from .evidence import (
    ChoiceId,
    EvidenceSource,
    EvidenceItem,
)

from .diagnosis import (
    ConditionDetails,
    Condition,
    rank_conditions,
    QuestionType,
    Choice,
    QuestionItem,
    SingleQuestion,
    GroupSingleQuestion,
    GroupMultipleQuestion,
    InterviewQuestion,
    DiagnosisStep,
    DiagnosisRequest,
    ParseMention,
    ParseResult,
)

from .assessment import AssessmentSnapshot


__all__ = [
    # Patient
    'Sex',
    'TravelRegion',
    'Age',
    'Demographics',

    # Evidence
    'ChoiceId',
    'EvidenceSource',
    'EvidenceItem',

    # Diagnosis
    'ConditionDetails',
    'Condition',
    'rank_conditions',
    'QuestionType',
    'Choice',
    'QuestionItem',
    'SingleQuestion',
    'GroupSingleQuestion',
    'GroupMultipleQuestion',
    'InterviewQuestion',
    'DiagnosisStep',
    'DiagnosisRequest',
    'ParseMention',
    'ParseResult',

    # Assessment
    'AssessmentSnapshot',
]
