"""
Тести для модуля controller

Запуск: pytest tests/test_controller.py -v
Або демо: python tests/test_controller.py
"""

import pytest

from health_buddy.interview import (
    GatewayError,
    InterviewController,
    InterviewListener,
    InterviewPhase,
    StateError,
    StopReason,
    ValidationError,
)
from health_buddy.storage import InMemoryAssessmentStore

from fakes import (
    FakeDiagnosisGateway,
    FakeSymptomParser,
    group_multiple_question,
    make_parse_result,
    make_step,
    single_question,
)


SYMPTOMS = "I have a severe headache and nausea since yesterday"


class RecordingListener(InterviewListener):
    def __init__(self):
        self.leading = []
        self.questions = []
        self.finalized = []
        self.messages = []

    def on_message(self, interview_id, message):
        self.messages.append(message)

    def on_leading_conditions(self, interview_id, conditions):
        self.leading.append([c.id for c in conditions])

    def on_question(self, interview_id, question):
        self.questions.append(question.text)

    def on_finalized(self, snapshot):
        self.finalized.append(snapshot)


def make_controller(steps=(), default=None, parser=None, **kwargs):
    gateway = FakeDiagnosisGateway(steps, default=default)
    ids = iter(f"interview-{i}" for i in range(1, 100))
    controller = InterviewController(
        gateway=gateway,
        parser=parser or FakeSymptomParser(),
        id_factory=lambda: next(ids),
        **kwargs,
    )
    return controller, gateway


def start(controller, age="34", sex="female"):
    controller.submit_age(age)
    controller.submit_sex(sex)
    return controller.submit_symptoms(SYMPTOMS)


def test_demographics_validation():
    """Тест валідації віку та статі"""
    controller, _ = make_controller()

    for bad_age in ["abc", "0", "-5", "121", "34.5", ""]:
        with pytest.raises(ValidationError):
            controller.submit_age(bad_age)

    assert controller.submit_age(" 120 ") == 120
    assert controller.interview_id is None

    with pytest.raises(ValidationError) as exc_info:
        controller.submit_sex("unknown")
    assert "'male'" in exc_info.value.user_message

    controller.submit_sex("Female")
    assert controller.interview_id == "interview-1"
    assert controller.phase == InterviewPhase.COLLECTING_SYMPTOMS

    print(f"✓ Demographics: {controller}")


def test_symptoms_before_demographics_rejected():
    """Тест: опис симптомів лише після демографії"""
    controller, _ = make_controller()

    with pytest.raises(StateError):
        controller.submit_symptoms(SYMPTOMS)

    print("✓ Symptoms before demographics → StateError")


def test_full_interview_stops_on_dominance():
    """
    Тест повного сценарію:
    34 роки, жінка, 2 розпізнані симптоми,
    ймовірності 0.42 → 0.58 → 0.91 → зупинка DOMINANCE
    """
    steps = [
        make_step([0.42, 0.30], question=single_question("s_98", "Do you have a fever?")),
        make_step([0.58, 0.25], question=single_question("s_107", "Do you have a stiff neck?")),
        make_step([0.91, 0.05], question=single_question("s_13", "Do you have abdominal pain?")),
    ]
    store = InMemoryAssessmentStore()
    listener = RecordingListener()
    controller, gateway = make_controller(steps, assessment_store=store, listener=listener)

    result = start(controller)

    # Перший запит не рахується як питання
    assert result.question_count == 0
    assert result.phase == InterviewPhase.PRESENTING_QUESTION
    assert result.question.text == "Do you have a fever?"
    assert len(gateway.last_request.evidence) == 2
    assert gateway.calls[0][1] == "interview-1"

    controller.present_question()
    assert controller.phase == InterviewPhase.AWAITING_ANSWER

    result = controller.answer("s_98", "present")
    assert result.question_count == 1
    assert result.leading_conditions[0].probability == 0.58

    result = controller.answer("s_107", "absent")
    assert result.finalized
    assert result.question_count == 2
    assert result.stop_decision.reason == StopReason.DOMINANCE

    # У запиті повний список доказів
    payload = gateway.last_request.to_payload()
    assert [e["id"] for e in payload["evidence"]] == ["s_21", "s_156", "s_98", "s_107"]
    assert payload["age"] == {"value": 34, "unit": "year"}
    assert payload["sex"] == "female"

    snapshot = result.snapshot
    assert snapshot.assessment_id is not None
    assert store.get(snapshot.assessment_id).top_condition.id == "c_1"
    assert snapshot.stop_reason == "dominance"
    assert result.messages == [result.stop_decision.message]
    assert "Migraine" in result.messages[0]

    assert listener.questions == ["Do you have a fever?", "Do you have a stiff neck?"]
    assert len(listener.leading) == 3
    assert listener.finalized == [snapshot]
    assert listener.messages == result.messages

    print(f"✓ Interview finalized: {snapshot.top_condition.display_name} "
          f"after {snapshot.question_count} questions")


def test_short_text_and_no_mentions():
    """Тест: короткий опис і опис без розпізнаних симптомів"""
    parser = FakeSymptomParser(make_parse_result([("s_21", "present", 0.3), ("s_98", "present", 0.4)]))
    controller, gateway = make_controller(parser=parser)
    controller.submit_age("34")
    controller.submit_sex("male")

    with pytest.raises(ValidationError):
        controller.submit_symptoms("ache")
    assert parser.calls == []

    with pytest.raises(ValidationError) as exc_info:
        controller.submit_symptoms(SYMPTOMS)
    assert "rephrase" in exc_info.value.user_message

    assert controller.phase == InterviewPhase.COLLECTING_SYMPTOMS
    assert len(controller.evidence) == 0
    assert gateway.calls == []
    assert not controller.in_flight

    print("✓ No symptoms → stay in COLLECTING_SYMPTOMS")


def test_travel_location_adds_risk_factor():
    """Тест: регіон подорожі → фактор ризику в доказах"""
    controller, gateway = make_controller([make_step([0.3], question=single_question())])

    with pytest.raises(ValidationError):
        controller.set_travel_location("Atlantis")

    controller.set_travel_location("Europe")
    factors = controller.set_travel_location("Africa")
    assert [f.id for f in factors] == ["p_17"]
    assert "p_15" not in controller.evidence

    start(controller)
    payload = gateway.last_request.to_payload()
    assert {"id": "p_17", "choice_id": "present", "source": "predefined"} in payload["evidence"]

    # Після початку інтерв'ю регіон не змінюється
    with pytest.raises(StateError):
        controller.set_travel_location("Europe")

    print(f"✓ Travel risk factor: {payload['evidence']}")


def test_group_multiple_requires_all_items():
    """Тест group_multiple: підтвердження лише після відповіді на всі пункти"""
    steps = [
        make_step([0.4, 0.3], question=group_multiple_question(("s_1190", "s_1191"))),
        make_step([0.45, 0.3], question=single_question()),
    ]
    controller, gateway = make_controller(steps)
    start(controller)

    result = controller.answer("s_1190", "present")
    assert len(gateway.calls) == 1
    assert result.question_count == 0

    with pytest.raises(ValidationError) as exc_info:
        controller.confirm_selection()
    assert exc_info.value.user_message == "Please answer all 2 questions. You still have 1 remaining."

    # Повторний вибір замінює попередній
    controller.select("s_1191", "present")
    controller.select("s_1191", "unknown")
    assert controller.missing_selections == 0

    result = controller.confirm_selection()
    assert result.question_count == 1
    assert len(gateway.calls) == 2

    evidence = {e.id: e.choice_id.value for e in gateway.last_request.evidence}
    assert evidence["s_1190"] == "present"
    assert evidence["s_1191"] == "unknown"

    print(f"✓ group_multiple confirmed: {evidence}")


def test_invalid_answer():
    """Тест: відповідь на невідомий пункт або з невідомим вибором"""
    controller, gateway = make_controller([make_step([0.4], question=single_question("s_98"))])
    start(controller)

    with pytest.raises(ValidationError):
        controller.answer("s_999", "present")
    with pytest.raises(ValidationError):
        controller.answer("s_98", "sometimes")
    with pytest.raises(StateError):
        controller.confirm_selection()

    assert len(gateway.calls) == 1
    assert controller.phase == InterviewPhase.PRESENTING_QUESTION

    print("✓ Invalid answers rejected")


def test_gateway_failure_then_retry():
    """Тест: помилка сервісу не збільшує лічильник, retry повторює запит"""
    steps = [
        make_step([0.4, 0.3], question=single_question("s_98")),
        GatewayError("API error: 503 Service Unavailable", status_code=503),
        make_step([0.5, 0.3], question=single_question("s_107")),
    ]
    controller, gateway = make_controller(steps)
    start(controller)

    with pytest.raises(GatewayError):
        controller.answer("s_98", "present")

    assert controller.question_count == 0
    assert controller.phase == InterviewPhase.AWAITING_DIAGNOSIS_STEP
    assert not controller.in_flight
    assert "503" in controller.last_error
    assert "s_98" in controller.evidence

    result = controller.retry()
    assert result.question_count == 1
    assert result.question.items[0].id == "s_107"
    assert controller.last_error is None

    # Повторний запит містить ті самі докази
    assert gateway.calls[1][0].evidence == gateway.calls[2][0].evidence

    print(f"✓ Retry after failure: {controller}")


def test_failed_first_round_retry_does_not_count():
    """Тест: повтор першого запиту не рахується як питання"""
    steps = [
        GatewayError("timeout"),
        make_step([0.4], question=single_question()),
    ]
    controller, _ = make_controller(steps)

    with pytest.raises(GatewayError):
        start(controller)

    result = controller.retry()
    assert result.question_count == 0
    assert result.phase == InterviewPhase.PRESENTING_QUESTION

    print("✓ First round retry → question_count=0")


def test_unexpected_gateway_crash_allows_retry():
    """Тест: будь-який виняток сервісу завершує запит, retry доступний"""
    listener = RecordingListener()
    steps = [
        make_step([0.4, 0.3], question=single_question("s_98")),
        RuntimeError("connection pool exploded"),
        make_step([0.5, 0.3], question=single_question("s_107")),
    ]
    controller, gateway = make_controller(steps, listener=listener)
    start(controller)

    with pytest.raises(RuntimeError):
        controller.answer("s_98", "present")

    assert not controller.in_flight
    assert controller.phase == InterviewPhase.AWAITING_DIAGNOSIS_STEP
    assert controller.question_count == 0
    assert controller.last_error == GatewayError.default_message
    assert listener.messages[-1] == GatewayError.default_message

    result = controller.retry()
    assert result.question_count == 1
    assert result.question.items[0].id == "s_107"
    assert controller.last_error is None
    assert len(gateway.calls) == 3

    print("✓ RuntimeError → in_flight cleared, retry succeeds")


def test_unexpected_parser_crash_allows_resubmit():
    """Тест: виняток парсера не блокує повторний опис симптомів"""
    parser = FakeSymptomParser(error=RuntimeError("parser bug"))
    controller, _ = make_controller([make_step([0.4], question=single_question())], parser=parser)

    with pytest.raises(RuntimeError):
        start(controller)

    assert not controller.in_flight
    assert controller.phase == InterviewPhase.COLLECTING_SYMPTOMS

    parser.error = None
    result = controller.submit_symptoms(SYMPTOMS)
    assert result.phase == InterviewPhase.PRESENTING_QUESTION

    print("✓ Parser crash → resubmit works")


def test_parse_failure_after_reset_is_dropped():
    """Тест: помилка розбору для скинутого інтерв'ю не піднімається"""
    controller = None

    class ResettingParser(FakeSymptomParser):
        def parse(self, text, demographics, interview_id):
            controller.reset()
            raise GatewayError("API error: 500 Internal Server Error", status_code=500)

    controller, gateway = make_controller(parser=ResettingParser())
    result = start(controller)

    assert result.stale
    assert result.interview_id == "interview-1"
    assert controller.interview_id == "interview-2"
    assert controller.phase == InterviewPhase.COLLECTING_DEMOGRAPHICS
    assert not controller.in_flight
    assert gateway.calls == []

    print("✓ Stale parse failure dropped")


def test_stale_response_dropped_after_reset():
    """Тест: відповідь для скинутого інтерв'ю відкидається"""
    controller = None

    def reset_during_request():
        controller.reset()
        return make_step([0.95], question=single_question())

    controller, gateway = make_controller([reset_during_request])
    result = start(controller)

    assert result.stale
    assert result.interview_id == "interview-1"
    assert controller.interview_id == "interview-2"
    assert controller.phase == InterviewPhase.COLLECTING_DEMOGRAPHICS
    assert controller.conditions == []
    assert len(controller.evidence) == 0
    assert controller.question_count == 0
    assert not controller.in_flight

    print(f"✓ Stale response dropped: {controller}")


def test_overlapping_round_trip_rejected():
    """Тест: другий запит, поки перший у польоті → StateError"""
    controller = None
    errors = []

    def retry_during_request():
        try:
            controller.retry()
        except StateError as e:
            errors.append(e)
        return make_step([0.4], question=single_question())

    controller, gateway = make_controller([retry_during_request])
    start(controller)

    assert len(errors) == 1
    assert len(gateway.calls) == 1
    assert controller.phase == InterviewPhase.PRESENTING_QUESTION

    print(f"✓ Overlap rejected: {errors[0]}")


def test_question_limit_and_extension():
    """Тест: ліміт 8 питань, одне продовження до 12"""
    controller, gateway = make_controller(default=make_step([0.3, 0.25], question=single_question()))
    result = start(controller)

    while not result.finalized:
        result = controller.answer("s_98", "unknown")

    assert result.question_count == 8
    assert result.stop_decision.reason == StopReason.QUESTION_LIMIT
    assert controller.can_extend

    result = controller.continue_past_limit()
    assert result.phase == InterviewPhase.PRESENTING_QUESTION
    assert result.question is not None
    assert controller.max_questions == 12
    assert controller.snapshot is None

    while not result.finalized:
        result = controller.answer("s_98", "unknown")

    assert result.question_count == 12
    assert result.stop_decision.reason == StopReason.QUESTION_LIMIT
    assert not controller.can_extend

    with pytest.raises(StateError):
        controller.continue_past_limit()

    print(f"✓ Extended interview finalized after {result.question_count} questions")


def test_extension_overwrites_stored_assessment():
    """Тест: після продовження зберігається один запис оцінки"""
    store = InMemoryAssessmentStore()
    controller, _ = make_controller(
        default=make_step([0.3, 0.25], question=single_question()),
        assessment_store=store,
    )
    result = start(controller)

    while not result.finalized:
        result = controller.answer("s_98", "unknown")

    first_id = result.snapshot.assessment_id
    assert store.get(first_id).question_count == 8

    result = controller.continue_past_limit()
    while not result.finalized:
        result = controller.answer("s_98", "unknown")

    assert len(store.list()) == 1
    assert result.snapshot.assessment_id == first_id
    assert store.get(first_id).question_count == 12

    # Нове інтерв'ю зберігається під новим id
    controller.reset()
    result = start(controller)
    while not result.finalized:
        result = controller.answer("s_98", "unknown")

    assert result.snapshot.assessment_id != first_id
    assert len(store.list()) == 2

    print(f"✓ Extended assessment overwritten: {first_id}")


def test_no_extension_for_other_stop_reasons():
    """Тест: продовження лише після QUESTION_LIMIT"""
    controller, _ = make_controller([make_step([0.95], question=single_question())])
    result = start(controller)

    assert result.finalized
    assert not controller.can_extend
    with pytest.raises(StateError):
        controller.continue_past_limit()

    with pytest.raises(StateError):
        controller.answer("s_98", "present")

    print("✓ DOMINANCE → no extension")


def test_emergencies_reported_in_round():
    """Тест: невідкладні стани не зупиняють інтерв'ю"""
    steps = [
        make_step(
            [0.3, 0.2],
            question=single_question(),
            has_emergency_evidence=True,
            details={"acuteness": "acute", "description": "difficulty breathing"},
        ),
    ]
    controller, _ = make_controller(steps)
    result = start(controller)

    assert result.phase == InterviewPhase.PRESENTING_QUESTION
    assert "Emergency evidence detected by medical AI" in result.emergencies
    assert any("difficulty breathing" in e for e in result.emergencies)
    assert "Emergency warning: Emergency evidence detected by medical AI" in result.messages

    print(f"✓ Emergencies: {result.emergencies}")


def test_reset_starts_new_interview():
    """Тест скидання: новий id, порожній стан"""
    controller, _ = make_controller([make_step([0.4], question=single_question())])
    start(controller)

    new_id = controller.reset()

    assert new_id == "interview-2"
    assert controller.phase == InterviewPhase.COLLECTING_DEMOGRAPHICS
    assert controller.age is None and controller.sex is None
    assert controller.current_question is None
    assert controller.leading_conditions() == []

    controller.submit_age("50")
    controller.submit_sex("male")
    assert controller.interview_id == "interview-2"

    print(f"✓ Reset: {controller}")


def demo():
    """Демонстрація роботи InterviewController"""
    print("=" * 60)
    print("HealthBuddy — Тести InterviewController")
    print("=" * 60)

    tests = [
        test_demographics_validation,
        test_symptoms_before_demographics_rejected,
        test_full_interview_stops_on_dominance,
        test_short_text_and_no_mentions,
        test_travel_location_adds_risk_factor,
        test_group_multiple_requires_all_items,
        test_invalid_answer,
        test_gateway_failure_then_retry,
        test_failed_first_round_retry_does_not_count,
        test_unexpected_gateway_crash_allows_retry,
        test_unexpected_parser_crash_allows_resubmit,
        test_parse_failure_after_reset_is_dropped,
        test_stale_response_dropped_after_reset,
        test_overlapping_round_trip_rejected,
        test_question_limit_and_extension,
        test_extension_overwrites_stored_assessment,
        test_no_extension_for_other_stop_reasons,
        test_emergencies_reported_in_round,
        test_reset_starts_new_interview,
    ]

    try:
        for i, test in enumerate(tests, start=1):
            print(f"\n--- {i}. {test.__name__} ---")
            test()

        print("\n" + "=" * 60)
        print("✅ Всі тести пройдено успішно!")
        print("=" * 60)

    except Exception as e:
        print(f"\n❌ ПОМИЛКА: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    demo()
