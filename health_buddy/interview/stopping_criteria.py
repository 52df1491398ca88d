"""
HealthBuddy — Критерії зупинки інтерв'ю

Правила (перше спрацьоване вирішує):
- EMERGENCY SCAN: завжди, не зупиняє, лише накопичує знахідки
- DOMINANCE: ŷ_top > 0.85
- GAP: ŷ_top - ŷ_second > 0.40
- CONFIDENT: ŷ_top > 0.70 AND remote should_stop
- MIN_QUESTIONS: питань < 3 → продовжуємо
- REMOTE_STOP: remote should_stop AND питань >= 5
- NO_QUESTIONS: немає наступного питання
- QUESTION_LIMIT: питань >= max_questions
- CONVERGED: питань >= 6 AND ŷ_top > 0.60
- CONTINUE
"""

from typing import Iterable, List, Optional, Sequence
from dataclasses import dataclass, field
from enum import Enum

from health_buddy.config import StoppingConfig
from health_buddy.schemas import Condition, EvidenceItem, rank_conditions


EMERGENCY_EVIDENCE_MESSAGE = "Emergency evidence detected by medical AI"


class StopReason(Enum):
    """Причина зупинки інтерв'ю"""
    CONTINUE = "continue"               # Продовжуємо
    DOMINANCE = "dominance"             # Є чіткий лідер
    GAP = "gap"                         # Великий відрив від другого
    CONFIDENT = "confident"             # Впевненість + remote stop
    REMOTE_STOP = "remote_stop"         # Remote stop після мінімуму питань
    NO_QUESTIONS = "no_questions"       # Немає більше питань
    QUESTION_LIMIT = "question_limit"   # Досягнуто ліміту питань
    CONVERGED = "converged"             # Гіпотези зійшлись


@dataclass
class StopDecision:
    """Результат перевірки критеріїв зупинки"""
    reason: StopReason
    should_stop: bool
    message: str = ""

    # Накопичений список невідкладних станів
    emergencies: List[str] = field(default_factory=list)

    top_probability: float = 0.0
    probability_gap: float = 0.0

    @property
    def should_continue(self) -> bool:
        return not self.should_stop

    @property
    def stop(self) -> bool:
        return self.should_stop


class StopPolicy:
    """
    Перевірка критеріїв зупинки після кожного запиту /diagnosis.

    Функція чиста: не зберігає стану між викликами,
    накопичений список невідкладних станів передається ззовні.

    Приклад:
        policy = StopPolicy()

        decision = policy.evaluate(
            conditions=step.conditions,
            evidence=store.items(),
            question_count=4,
            remote_should_stop=step.should_stop,
            max_questions=8,
            has_question=step.question is not None,
        )

        if decision.should_stop:
            print(f"Зупинка: {decision.reason.value}")
    """

    def __init__(self, config: Optional[StoppingConfig] = None):
        self.config = config or StoppingConfig()

    def evaluate(
        self,
        conditions: Sequence[Condition],
        evidence: Sequence[EvidenceItem],
        question_count: int,
        remote_should_stop: bool,
        max_questions: int,
        has_question: bool = True,
        known_emergencies: Iterable[str] = (),
        has_emergency_evidence: bool = False,
    ) -> StopDecision:
        """
        Перевірити всі критерії зупинки.

        Args:
            conditions: Поточний знімок станів (повністю замінює попередній)
            evidence: Поточні докази
            question_count: Кількість завершених раундів питань
            remote_should_stop: Прапорець should_stop від Infermedica
            max_questions: Поточний ліміт питань
            has_question: Чи повернув сервіс наступне питання
            known_emergencies: Вже знайдені невідкладні стани
            has_emergency_evidence: Прапорець від Infermedica

        Returns:
            StopDecision
        """
        # 1. EMERGENCY SCAN (завжди, не зупиняє)
        emergencies = self.detect_emergencies(
            conditions, known_emergencies, has_emergency_evidence
        )

        ranked = rank_conditions(list(conditions))
        top = ranked[0].probability if ranked else 0.0
        gap = top - ranked[1].probability if len(ranked) >= 2 else 0.0

        def decide(reason: StopReason, should_stop: bool, message: str) -> StopDecision:
            return StopDecision(
                reason=reason,
                should_stop=should_stop,
                message=message,
                emergencies=emergencies,
                top_probability=top,
                probability_gap=gap,
            )

        if ranked:
            leader = ranked[0].display_name

            # 2. DOMINANCE
            if top > self.config.dominance_threshold:
                return decide(
                    StopReason.DOMINANCE, True,
                    f"Leading condition {leader} ({top:.1%})"
                )

            # 3. GAP
            if len(ranked) >= 2 and gap > self.config.gap_threshold:
                return decide(
                    StopReason.GAP, True,
                    f"{leader} leads the next condition by {gap:.1%}"
                )

            # 4. CONFIDENT
            if top > self.config.confident_threshold and remote_should_stop:
                return decide(
                    StopReason.CONFIDENT, True,
                    f"Service finished with {leader} at {top:.1%}"
                )

        # 5. MIN_QUESTIONS (перекриває все нижче)
        if question_count < self.config.min_questions:
            return decide(
                StopReason.CONTINUE, False,
                f"Minimum interview length not reached ({question_count}/{self.config.min_questions})"
            )

        # 6. REMOTE_STOP
        if remote_should_stop and question_count >= self.config.remote_stop_min_questions:
            return decide(
                StopReason.REMOTE_STOP, True,
                f"Service requested stop after {question_count} questions"
            )

        # 7. NO_QUESTIONS
        if not has_question:
            return decide(StopReason.NO_QUESTIONS, True, "No further questions available")

        # 8. QUESTION_LIMIT
        if question_count >= max_questions:
            return decide(
                StopReason.QUESTION_LIMIT, True,
                f"Question limit reached ({max_questions})"
            )

        # 9. CONVERGED
        if (
            ranked
            and question_count >= self.config.convergence_min_questions
            and top > self.config.convergence_threshold
        ):
            return decide(
                StopReason.CONVERGED, True,
                f"Converged on {ranked[0].display_name} ({top:.1%})"
            )

        # 10. CONTINUE
        return decide(
            StopReason.CONTINUE, False,
            f"Continuing interview ({len(evidence)} evidence items)"
        )

    def detect_emergencies(
        self,
        conditions: Sequence[Condition],
        known: Iterable[str] = (),
        has_emergency_evidence: bool = False,
    ) -> List[str]:
        """
        Знайти невідкладні стани серед гострих / тяжких кандидатів.

        Повертає накопичений список без дублікатів (порядок першої появи).
        """
        found: List[str] = list(dict.fromkeys(known))

        if has_emergency_evidence:
            found.append(EMERGENCY_EVIDENCE_MESSAGE)

        for condition in conditions:
            if not self._is_acute(condition):
                continue

            name = condition.display_name.lower()
            description = (condition.details.description or "").lower()

            for keyword in self.config.emergency_keywords:
                if keyword in name or keyword in description:
                    found.append(f"{condition.display_name} ({keyword})")

        return list(dict.fromkeys(found))

    def _is_acute(self, condition: Condition) -> bool:
        details = condition.details
        if details is None:
            return False
        return (
            details.acuteness in self.config.emergency_acuteness
            or details.severity in self.config.emergency_severity
        )

    def __repr__(self) -> str:
        return (
            f"StopPolicy("
            f"dominance={self.config.dominance_threshold:.0%}, "
            f"gap={self.config.gap_threshold:.0%}, "
            f"min_questions={self.config.min_questions})"
        )
