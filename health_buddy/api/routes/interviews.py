"""
HealthBuddy — Interview Routes

Endpoints для покрокового інтерв'ю:
- Створення сесії (демографія)
- Опис симптомів
- Відповіді на питання (single / group_single / group_multiple)
- Повтор, продовження після ліміту, скидання
- Пояснення результатів
"""

from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException

from health_buddy.gateway import explain_assessment
from health_buddy.interview import RoundResult, StateError

from ..dependencies import (
    get_services, get_sessions,
    InterviewSession, ServicesManager, SessionManager,
)
from ..models import (
    AnswerRequest,
    CreateInterviewRequest,
    DemographicsRequest,
    ExplanationResponse,
    InterviewState,
    SymptomsRequest,
)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


def session_to_response(session: InterviewSession, result: Optional[RoundResult] = None) -> InterviewState:
    """Конвертувати сесію (і результат останнього кроку) в Pydantic модель"""
    return InterviewState(
        **session.to_dict(),
        messages=result.messages if result else [],
        stale=result.stale if result else False,
    )


def find_session(session_id: str, sessions: SessionManager) -> InterviewSession:
    session = sessions.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found"
        )
    return session


def run_exclusive(session: InterviewSession, action: Callable[[], RoundResult]) -> InterviewState:
    """
    Виконати дію над контролером під замком сесії.

    Паралельний запит до тієї ж сесії відхиляється, а не чекає.
    """
    if not session.lock.acquire(blocking=False):
        raise StateError("A request for this session is already in progress")

    try:
        result = action()
    finally:
        session.touch()
        session.lock.release()

    return session_to_response(session, result)


def apply_demographics(controller, age, sex, location):
    if location is not None:
        controller.set_travel_location(location)
    if age is not None:
        controller.submit_age(age)
    if sex is not None:
        controller.submit_sex(sex)


@router.post("", response_model=InterviewState, status_code=201)
def create_interview(
    request: CreateInterviewRequest,
    services: ServicesManager = Depends(get_services),
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """
    Створити нову сесію інтерв'ю.

    Приклад:
    ```json
    {
        "age": "34",
        "sex": "female",
        "location": "Africa"
    }
    ```
    """
    controller = services.create_controller()

    # Невалідна демографія → 422, сесія не створюється
    apply_demographics(controller, request.age, request.sex, request.location)

    session = sessions.create_session(controller)
    return session_to_response(session)


@router.get("/{session_id}", response_model=InterviewState)
def get_interview(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """Отримати поточний стан інтерв'ю"""
    return session_to_response(find_session(session_id, sessions))


@router.post("/{session_id}/symptoms", response_model=InterviewState)
def submit_symptoms(
    session_id: str,
    request: SymptomsRequest,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """
    Описати симптоми вільним текстом.

    Розпізнані симптоми стають доказами, після чого
    виконується перший запит до діагностичного сервісу.
    """
    session = find_session(session_id, sessions)
    return run_exclusive(
        session,
        lambda: session.controller.submit_symptoms(request.text, tag_initial=request.tag_initial),
    )


@router.post("/{session_id}/answer", response_model=InterviewState)
def answer_question(
    session_id: str,
    request: AnswerRequest,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """
    Відповісти на поточне питання.

    Для group_multiple відповідь лише запам'ятовується до /confirm.
    """
    session = find_session(session_id, sessions)
    return run_exclusive(
        session,
        lambda: session.controller.answer(request.item_id, request.choice_id),
    )


@router.post("/{session_id}/select", response_model=InterviewState)
def select_item(
    session_id: str,
    request: AnswerRequest,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """Вибір для одного пункту group_multiple питання"""
    session = find_session(session_id, sessions)
    return run_exclusive(
        session,
        lambda: session.controller.select(request.item_id, request.choice_id),
    )


@router.post("/{session_id}/confirm", response_model=InterviewState)
def confirm_selection(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """Підтвердити відповіді group_multiple (усі пункти мають бути відповідені)"""
    session = find_session(session_id, sessions)
    return run_exclusive(session, session.controller.confirm_selection)


@router.post("/{session_id}/retry", response_model=InterviewState)
def retry_round(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """Повторити запит, що завершився помилкою сервісу"""
    session = find_session(session_id, sessions)
    return run_exclusive(session, session.controller.retry)


@router.post("/{session_id}/continue", response_model=InterviewState)
def continue_interview(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """Продовжити після досягнення ліміту питань (один раз)"""
    session = find_session(session_id, sessions)
    return run_exclusive(session, session.controller.continue_past_limit)


@router.post("/{session_id}/reset", response_model=InterviewState)
def reset_interview(
    session_id: str,
    request: Optional[DemographicsRequest] = None,
    sessions: SessionManager = Depends(get_sessions)
) -> InterviewState:
    """
    Скинути інтерв'ю: новий interview_id, порожні докази.

    Не чекає на запити в польоті: їхні відповіді будуть відкинуті.
    """
    session = find_session(session_id, sessions)
    controller = session.controller

    controller.reset()
    if request is not None:
        apply_demographics(controller, request.age, request.sex, request.location)

    session.touch()
    return session_to_response(session)


@router.get("/{session_id}/explanation", response_model=ExplanationResponse)
def get_explanation(
    session_id: str,
    services: ServicesManager = Depends(get_services),
    sessions: SessionManager = Depends(get_sessions)
) -> ExplanationResponse:
    """Текстовий аналіз завершеної оцінки від генеративної моделі"""
    session = find_session(session_id, sessions)

    if services.generator is None:
        raise HTTPException(
            status_code=503,
            detail="Text generation service not available"
        )

    snapshot = session.controller.get_snapshot()
    explanation = explain_assessment(snapshot, services.generator)

    return ExplanationResponse(
        session_id=session_id,
        assessment_id=snapshot.assessment_id,
        explanation=explanation,
    )


@router.delete("/{session_id}")
def delete_interview(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
):
    """Закрити сесію"""
    if not sessions.delete_session(session_id):
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found"
        )
    return {"session_id": session_id, "deleted": True}
