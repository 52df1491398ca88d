"""
HealthBuddy — Оркестрація інтерв'ю

Модулі:
- evidence_store: Дедупліковане сховище доказів
- stopping_criteria: Критерії зупинки (DOMINANCE, GAP, CONFIDENT, REMOTE_STOP, ...)
- controller: Машина станів інтерв'ю
- risk_factors: Географічні фактори ризику
- listener: Порт для відображення подій
- errors: ValidationError, GatewayError, StateError

Приклад використання:
    from health_buddy.interview import InterviewController
    from health_buddy.gateway import InfermedicaGateway

    infermedica = InfermedicaGateway.from_config(config.gateway)
    controller = InterviewController(gateway=infermedica, parser=infermedica)

    controller.submit_age(34)
    controller.submit_sex("female")
    result = controller.submit_symptoms("I have a severe headache and nausea")
"""

from .errors import (
    InterviewError,
    ValidationError,
    GatewayError,
    StateError,
)

from .evidence_store import EvidenceStore

from .stopping_criteria import (
    StopReason,
    StopDecision,
    StopPolicy,
    EMERGENCY_EVIDENCE_MESSAGE,
)

from .risk_factors import REGION_RISK_FACTORS, geographic_risk_factors

from .listener import InterviewListener

from .controller import (
    InterviewPhase,
    RoundResult,
    InterviewController,
)


__all__ = [
    # Errors
    'InterviewError',
    'ValidationError',
    'GatewayError',
    'StateError',

    # Evidence
    'EvidenceStore',

    # Stop policy
    'StopReason',
    'StopDecision',
    'StopPolicy',
    'EMERGENCY_EVIDENCE_MESSAGE',

    # Risk factors
    'REGION_RISK_FACTORS',
    'geographic_risk_factors',

    # Controller
    'InterviewListener',
    'InterviewPhase',
    'RoundResult',
    'InterviewController',
]
