"""
HealthBuddy — Контролер інтерв'ю

Машина станів:
    COLLECTING_DEMOGRAPHICS → COLLECTING_SYMPTOMS → AWAITING_DIAGNOSIS_STEP
    → PRESENTING_QUESTION → AWAITING_ANSWER → ... → FINALIZED

Після кожної відповіді:
1. Докази оновлюються в EvidenceStore
2. Infermedica /diagnosis викликається з повним списком доказів
3. StopPolicy вирішує: наступне питання чи завершення

Кожен запит позначається interview_id, активним на момент відправлення;
відповідь для вже скинутого інтерв'ю відкидається.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from health_buddy.config import HealthBuddyConfig
from health_buddy.gateway.base import DiagnosisGateway, SymptomParser
from health_buddy.schemas import (
    AssessmentSnapshot,
    ChoiceId,
    Condition,
    Demographics,
    DiagnosisRequest,
    DiagnosisStep,
    EvidenceItem,
    GroupMultipleQuestion,
    InterviewQuestion,
    Sex,
    TravelRegion,
    rank_conditions,
)
from health_buddy.schemas.patient import Age
from health_buddy.storage import AssessmentStore

from .errors import GatewayError, StateError, ValidationError
from .evidence_store import EvidenceStore
from .listener import InterviewListener
from .risk_factors import geographic_risk_factors
from .stopping_criteria import StopDecision, StopPolicy, StopReason


logger = logging.getLogger(__name__)


class InterviewPhase(Enum):
    """Фаза інтерв'ю"""
    COLLECTING_DEMOGRAPHICS = "collecting_demographics"
    COLLECTING_SYMPTOMS = "collecting_symptoms"
    AWAITING_DIAGNOSIS_STEP = "awaiting_diagnosis_step"
    PRESENTING_QUESTION = "presenting_question"
    AWAITING_ANSWER = "awaiting_answer"
    FINALIZED = "finalized"


QUESTION_PHASES = (InterviewPhase.PRESENTING_QUESTION, InterviewPhase.AWAITING_ANSWER)


@dataclass
class RoundResult:
    """Результат одного кроку інтерв'ю"""
    interview_id: Optional[str]
    phase: InterviewPhase
    question_count: int

    question: Optional[InterviewQuestion] = None
    leading_conditions: List[Condition] = field(default_factory=list)
    stop_decision: Optional[StopDecision] = None
    emergencies: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    # Відповідь прийшла для вже скинутого інтерв'ю
    stale: bool = False

    snapshot: Optional[AssessmentSnapshot] = None

    @property
    def finalized(self) -> bool:
        return self.phase == InterviewPhase.FINALIZED


class InterviewController:
    """
    Контролер покрокового інтерв'ю.

    Приклад використання:
        controller = InterviewController(gateway=infermedica, parser=infermedica)

        controller.submit_age("34")
        controller.submit_sex("female")
        result = controller.submit_symptoms("I have a severe headache and nausea")

        while not result.finalized:
            item = result.question.items[0]
            result = controller.answer(item.id, "present")

        print(result.snapshot.top_condition.display_name)
    """

    def __init__(
        self,
        gateway: DiagnosisGateway,
        parser: SymptomParser,
        config: Optional[HealthBuddyConfig] = None,
        listener: Optional[InterviewListener] = None,
        assessment_store: Optional[AssessmentStore] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.gateway = gateway
        self.parser = parser
        self.config = config or HealthBuddyConfig()
        self.listener = listener or InterviewListener()
        self.assessment_store = assessment_store
        self.id_factory = id_factory

        self.stop_policy = StopPolicy(self.config.stopping)

        self._lock = threading.RLock()
        self.interview_id: Optional[str] = None
        self._reset_state()

    def _reset_state(self):
        """Скидання стану (interview_id призначається окремо)"""
        self._phase = InterviewPhase.COLLECTING_DEMOGRAPHICS
        self.age: Optional[int] = None
        self.sex: Optional[Sex] = None
        self.location: Optional[TravelRegion] = None

        self.evidence = EvidenceStore()
        self.conditions: List[Condition] = []
        self.emergencies: List[str] = []
        self.question_count = 0
        self.max_questions = self.config.interview.max_questions
        self.limit_extended = False

        self.current_question: Optional[InterviewQuestion] = None
        self.pending_selections: Dict[str, ChoiceId] = {}
        self.last_decision: Optional[StopDecision] = None
        self.snapshot: Optional[AssessmentSnapshot] = None
        # id збереженої оцінки; після продовження перезаписується той самий запис
        self._assessment_id: Optional[str] = None

        self.in_flight = False
        self.last_error: Optional[str] = None
        self._retry_counts_question: Optional[bool] = None
        self._held_question: Optional[InterviewQuestion] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def phase(self) -> InterviewPhase:
        return self._phase

    @property
    def is_finalized(self) -> bool:
        return self._phase == InterviewPhase.FINALIZED

    @property
    def can_extend(self) -> bool:
        """Чи можна продовжити після ліміту питань"""
        return (
            self.is_finalized
            and not self.limit_extended
            and self._held_question is not None
            and self.last_decision is not None
            and self.last_decision.reason == StopReason.QUESTION_LIMIT
        )

    @property
    def demographics(self) -> Demographics:
        if self.age is None or self.sex is None:
            raise StateError("Demographics are not collected yet")
        return Demographics(age=self.age, sex=self.sex, location=self.location)

    # =========================================================================
    # Demographics
    # =========================================================================

    def submit_age(self, value: Union[int, str]) -> int:
        """Вік: ціле число в (0, 120]"""
        with self._lock:
            self._require_phase(InterviewPhase.COLLECTING_DEMOGRAPHICS)

            try:
                age = int(str(value).strip())
            except ValueError:
                age = None

            cfg = self.config.interview
            if age is None or age <= cfg.min_age or age > cfg.max_age:
                raise ValidationError(
                    f"Invalid age: {value!r}",
                    user_message="Please enter a valid age in years (e.g., 30).",
                )

            self.age = age
            self._maybe_start_interview()
            return age

    def submit_sex(self, value: Union[Sex, str]) -> Sex:
        """Стать: одне зі значень InterviewConfig.allowed_sexes"""
        with self._lock:
            self._require_phase(InterviewPhase.COLLECTING_DEMOGRAPHICS)

            raw = value.value if isinstance(value, Sex) else str(value).strip().lower()
            if raw not in self.config.interview.allowed_sexes:
                options = ", ".join(f"'{s}'" for s in self.config.interview.allowed_sexes)
                raise ValidationError(
                    f"Invalid sex: {value!r}",
                    user_message=f"Please select from {options}.",
                )

            self.sex = Sex(raw)
            self._maybe_start_interview()
            return self.sex

    def set_travel_location(self, location: Optional[Union[TravelRegion, str]]) -> List[EvidenceItem]:
        """Регіон подорожі → predefined фактор ризику"""
        with self._lock:
            self._require_phase(
                InterviewPhase.COLLECTING_DEMOGRAPHICS,
                InterviewPhase.COLLECTING_SYMPTOMS,
            )
            try:
                factors = geographic_risk_factors(location)
            except ValueError as e:
                raise ValidationError(
                    f"Unknown travel region: {location!r}",
                    user_message="Please select one of the listed regions.",
                ) from e

            # Попередній регіон замінюється
            for previous in geographic_risk_factors(self.location):
                self.evidence.remove(previous.id)

            self.location = TravelRegion(location) if location else None
            self.evidence.upsert_batch(factors)
            return factors

    def _maybe_start_interview(self):
        if self.age is None or self.sex is None:
            return
        if self.interview_id is None:
            self.interview_id = self.id_factory()
        self._phase = InterviewPhase.COLLECTING_SYMPTOMS
        logger.info("Interview %s started (age=%s, sex=%s)", self.interview_id, self.age, self.sex.value)

    # =========================================================================
    # Free-text symptoms
    # =========================================================================

    def submit_symptoms(self, text: str, tag_initial: bool = False) -> RoundResult:
        """
        Розібрати опис симптомів і виконати перший запит /diagnosis.

        Якщо не знайдено жодного симптому — залишаємось у COLLECTING_SYMPTOMS.
        """
        with self._lock:
            self._require_phase(InterviewPhase.COLLECTING_SYMPTOMS)
            self._require_idle()

            text = (text or "").strip()
            if len(text) < self.config.interview.min_symptom_text_length:
                raise ValidationError(
                    "Symptom description is too short",
                    user_message=(
                        "Please provide a more detailed description of your symptoms "
                        f"(at least {self.config.interview.min_symptom_text_length} characters)."
                    ),
                )

            sent_id = self.interview_id
            demographics = self.demographics
            self.in_flight = True

        try:
            parsed = self.parser.parse(text, demographics, sent_id)
        except GatewayError as e:
            with self._lock:
                if sent_id != self.interview_id:
                    return self._stale_result(sent_id)
                self.in_flight = False
            logger.warning("Interview %s: symptom parsing failed: %s", sent_id, e)
            raise
        except Exception:
            self._release_failed(sent_id)
            logger.exception("Interview %s: symptom parser crashed", sent_id)
            raise

        with self._lock:
            if sent_id != self.interview_id:
                return self._stale_result(sent_id)
            self.in_flight = False

            parsed = parsed.relevant(self.config.interview.min_mention_relevance)
            if not parsed.mentions:
                raise ValidationError(
                    "No symptoms identified",
                    user_message=(
                        "I couldn't identify any symptoms from your description. "
                        "Could you please rephrase or provide more details? "
                        "For example, 'I have a headache and a fever.'"
                    ),
                )

            self.evidence.merge(parsed, tag_initial=tag_initial)
            self._phase = InterviewPhase.AWAITING_DIAGNOSIS_STEP
            logger.info("Interview %s: %d initial evidence items", sent_id, len(parsed.mentions))

        return self._round_trip(counts_question=False)

    # =========================================================================
    # Answers
    # =========================================================================

    def present_question(self) -> InterviewQuestion:
        """Питання показано користувачу → очікуємо відповідь"""
        with self._lock:
            self._require_phase(*QUESTION_PHASES)
            self._phase = InterviewPhase.AWAITING_ANSWER
            return self.current_question

    def answer(self, item_id: str, choice_id: Union[ChoiceId, str]) -> RoundResult:
        """
        Відповідь на single / group_single питання.

        Для group_multiple вибір лише накопичується (див. select).
        """
        with self._lock:
            question = self._require_question()
            if isinstance(question, GroupMultipleQuestion):
                return self.select(item_id, choice_id)

            item, choice = self._validate_choice(question, item_id, choice_id)
            self.evidence.upsert(EvidenceItem(id=item.id, choice_id=choice, name=item.name))
            self.current_question = None
            self._phase = InterviewPhase.AWAITING_DIAGNOSIS_STEP

        return self._round_trip(counts_question=True)

    def select(self, item_id: str, choice_id: Union[ChoiceId, str]) -> RoundResult:
        """Вибір для пункту group_multiple питання (без запиту до сервісу)"""
        with self._lock:
            question = self._require_question()
            if not isinstance(question, GroupMultipleQuestion):
                raise StateError(f"Question type {question.type} does not accept selections")

            item, choice = self._validate_choice(question, item_id, choice_id)
            self.pending_selections[item.id] = choice
            self._phase = InterviewPhase.AWAITING_ANSWER
            return self._result()

    @property
    def missing_selections(self) -> int:
        question = self.current_question
        if not isinstance(question, GroupMultipleQuestion):
            return 0
        return sum(1 for item in question.items if item.id not in self.pending_selections)

    def confirm_selection(self) -> RoundResult:
        """Підтвердити group_multiple: лише коли відповіли на всі пункти"""
        with self._lock:
            question = self._require_question()
            if not isinstance(question, GroupMultipleQuestion):
                raise StateError(f"Question type {question.type} does not need confirmation")

            missing = self.missing_selections
            if missing > 0:
                raise ValidationError(
                    f"Still missing {missing} answers",
                    user_message=(
                        f"Please answer all {len(question.items)} questions. "
                        f"You still have {missing} remaining."
                    ),
                )

            names = {item.id: item.name for item in question.items}
            self.evidence.upsert_batch(
                EvidenceItem(id=item_id, choice_id=choice, name=names.get(item_id))
                for item_id, choice in self.pending_selections.items()
            )
            self.pending_selections = {}
            self.current_question = None
            self._phase = InterviewPhase.AWAITING_DIAGNOSIS_STEP

        return self._round_trip(counts_question=True)

    def _validate_choice(self, question, item_id: str, choice_id):
        item = question.find_item(item_id)
        try:
            choice = ChoiceId(choice_id)
        except ValueError:
            choice = None

        if item is None or choice is None:
            raise ValidationError(
                f"Invalid answer {item_id}:{choice_id}",
                user_message="Invalid answer. Please select one of the provided options.",
            )
        return item, choice

    # =========================================================================
    # Round-trip
    # =========================================================================

    def retry(self) -> RoundResult:
        """Повторити невдалий запит з тими самими доказами"""
        with self._lock:
            self._require_phase(InterviewPhase.AWAITING_DIAGNOSIS_STEP)
            counts = bool(self._retry_counts_question)
        return self._round_trip(counts_question=counts)

    def _build_request(self) -> DiagnosisRequest:
        return DiagnosisRequest(
            age=Age(value=self.age),
            sex=self.sex,
            evidence=self.evidence.items(),
            evaluated_at=date.today(),
            extras=dict(self.config.gateway.diagnosis_extras),
        )

    def _round_trip(self, counts_question: bool) -> RoundResult:
        with self._lock:
            self._require_phase(InterviewPhase.AWAITING_DIAGNOSIS_STEP)
            self._require_idle()

            sent_id = self.interview_id
            request = self._build_request()
            self.in_flight = True
            self._retry_counts_question = counts_question

        logger.debug("Interview %s: /diagnosis with %d evidence items", sent_id, len(request.evidence))

        try:
            step = self.gateway.diagnose(request, sent_id)
        except GatewayError as e:
            with self._lock:
                if sent_id != self.interview_id:
                    return self._stale_result(sent_id)
                self.in_flight = False
                self.last_error = e.user_message
            logger.warning("Interview %s: diagnosis failed: %s", sent_id, e)
            self.listener.on_message(sent_id, e.user_message)
            raise
        except Exception:
            if self._release_failed(sent_id):
                self.listener.on_message(sent_id, self.last_error)
            logger.exception("Interview %s: diagnosis gateway crashed", sent_id)
            raise

        with self._lock:
            if sent_id != self.interview_id:
                return self._stale_result(sent_id)
            return self._apply_step(step, counts_question)

    def _release_failed(self, sent_id: Optional[str]) -> bool:
        """Завершити запит, що впав не з GatewayError; фаза лишається, можна повторити"""
        with self._lock:
            if sent_id != self.interview_id:
                return False
            self.in_flight = False
            if self._phase == InterviewPhase.AWAITING_DIAGNOSIS_STEP:
                self.last_error = GatewayError.default_message
            return True

    def _apply_step(self, step: DiagnosisStep, counts_question: bool) -> RoundResult:
        self.in_flight = False
        self.last_error = None
        self._retry_counts_question = None

        if counts_question:
            self.question_count += 1

        # Знімок станів повністю замінює попередній
        self.conditions = step.ranked_conditions

        decision = self.stop_policy.evaluate(
            conditions=self.conditions,
            evidence=self.evidence.items(),
            question_count=self.question_count,
            remote_should_stop=step.should_stop,
            max_questions=self.max_questions,
            has_question=step.question is not None,
            known_emergencies=self.emergencies,
            has_emergency_evidence=step.has_emergency_evidence,
        )
        new_emergencies = [e for e in decision.emergencies if e not in self.emergencies]
        self.emergencies = decision.emergencies
        self.last_decision = decision

        messages = [f"Emergency warning: {e}" for e in new_emergencies]
        for emergency in new_emergencies:
            logger.warning("Interview %s: emergency indicator %s", self.interview_id, emergency)

        leading = self.leading_conditions()
        if leading:
            self.listener.on_leading_conditions(self.interview_id, leading)

        if step.question is not None and decision.should_continue:
            self.current_question = step.question
            self.pending_selections = {}
            self._phase = InterviewPhase.PRESENTING_QUESTION
            self._notify(messages)
            self.listener.on_question(self.interview_id, step.question)
            logger.info(
                "Interview %s: question %d (%s)",
                self.interview_id, self.question_count, step.question.type,
            )
            return self._result(messages)

        messages.append(decision.message)
        self._notify(messages)

        self._held_question = step.question
        self._finalize()
        return self._result(messages)

    def _notify(self, messages: List[str]):
        for message in messages:
            self.listener.on_message(self.interview_id, message)

    def _finalize(self):
        self.current_question = None
        self.pending_selections = {}
        self._phase = InterviewPhase.FINALIZED

        snapshot = AssessmentSnapshot(
            interview_id=self.interview_id,
            age=self.age,
            sex=self.sex,
            location=self.location,
            conditions=self.conditions,
            evidence=self.evidence.items(),
            emergencies=list(self.emergencies),
            question_count=self.question_count,
            stop_reason=self.last_decision.reason.value if self.last_decision else None,
            assessment_id=self._assessment_id,
        )
        if self.assessment_store is not None:
            self._assessment_id = self.assessment_store.save(snapshot)
            snapshot = snapshot.model_copy(update={"assessment_id": self._assessment_id})

        self.snapshot = snapshot
        logger.info(
            "Interview %s finalized after %d questions (%s)",
            self.interview_id, self.question_count, snapshot.stop_reason,
        )
        self.listener.on_finalized(snapshot)

    def _stale_result(self, sent_id: Optional[str]) -> RoundResult:
        logger.info("Dropping response for stale interview %s", sent_id)
        return RoundResult(
            interview_id=sent_id,
            phase=self._phase,
            question_count=self.question_count,
            stale=True,
        )

    # =========================================================================
    # Limit extension / reset
    # =========================================================================

    def continue_past_limit(self) -> RoundResult:
        """
        Продовжити після ліміту питань (один раз, до max_questions * 1.5).
        Після цього ліміт стає жорстким.
        """
        with self._lock:
            if not self.can_extend:
                raise StateError("Interview cannot be extended")

            self.limit_extended = True
            self.max_questions = self.config.interview.extended_max_questions
            self.current_question = self._held_question
            self._held_question = None
            self.snapshot = None
            self._phase = InterviewPhase.PRESENTING_QUESTION
            logger.info("Interview %s extended to %d questions", self.interview_id, self.max_questions)
            return self._result()

    def reset(self) -> str:
        """Очистити стан, новий interview_id; запити в польоті стають застарілими"""
        with self._lock:
            old_id = self.interview_id
            self._reset_state()
            self.interview_id = self.id_factory()
            logger.info("Interview %s reset → %s", old_id, self.interview_id)
            return self.interview_id

    # =========================================================================
    # Queries
    # =========================================================================

    def leading_conditions(self, n: Optional[int] = None) -> List[Condition]:
        n = n or self.config.interview.leading_conditions_count
        return rank_conditions(self.conditions)[:n]

    def get_snapshot(self) -> AssessmentSnapshot:
        if self.snapshot is None:
            raise StateError("Interview is not finalized")
        return self.snapshot

    def _result(self, messages: Optional[List[str]] = None) -> RoundResult:
        return RoundResult(
            interview_id=self.interview_id,
            phase=self._phase,
            question_count=self.question_count,
            question=self.current_question,
            leading_conditions=self.leading_conditions(),
            stop_decision=self.last_decision,
            emergencies=list(self.emergencies),
            messages=list(messages or []),
            snapshot=self.snapshot,
        )

    def _require_phase(self, *phases: InterviewPhase):
        if self._phase not in phases:
            expected = ", ".join(p.value for p in phases)
            raise StateError(f"Action requires phase {expected}, current: {self._phase.value}")

    def _require_idle(self):
        if self.in_flight:
            raise StateError("A diagnosis request is already in flight")

    def _require_question(self) -> InterviewQuestion:
        self._require_phase(*QUESTION_PHASES)
        self._require_idle()
        if self.current_question is None:
            raise StateError("No question is pending")
        return self.current_question

    def __repr__(self) -> str:
        return (
            f"InterviewController(id={self.interview_id}, phase={self._phase.value}, "
            f"questions={self.question_count}/{self.max_questions}, evidence={len(self.evidence)})"
        )
