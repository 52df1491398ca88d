"""
HealthBuddy — API Dependencies

Dependency Injection для FastAPI.
Створення клієнтів зовнішніх сервісів, зберігання сесій інтерв'ю.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional

import yaml

from health_buddy.config import HealthBuddyConfig
from health_buddy.gateway import (
    DiagnosisGateway,
    GeminiGateway,
    InfermedicaGateway,
    SymptomParser,
    TextGenerator,
)
from health_buddy.interview import InterviewController
from health_buddy.storage import AssessmentStore, InMemoryAssessmentStore, JsonAssessmentStore

from .config import config


logger = logging.getLogger(__name__)


class ServicesManager:
    """
    Менеджер зовнішніх сервісів — створює клієнти один раз.
    Singleton pattern.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._clear()

    def _clear(self):
        self.is_loaded = False
        self.config: Optional[HealthBuddyConfig] = None
        self.gateway: Optional[DiagnosisGateway] = None
        self.parser: Optional[SymptomParser] = None
        self.generator: Optional[TextGenerator] = None
        self.assessment_store: Optional[AssessmentStore] = None
        self.error: Optional[str] = None

    def load(self) -> bool:
        """Створити клієнти з конфігурації"""
        if self.is_loaded:
            return True

        try:
            self.config = config.build_config()

            infermedica = InfermedicaGateway.from_config(self.config.gateway)
            self.gateway = infermedica
            self.parser = infermedica
            self.generator = GeminiGateway.from_config(self.config.gateway)

            assessments_dir = config.assessments_dir or self.config.assessments_dir
            if assessments_dir:
                self.assessment_store = JsonAssessmentStore(assessments_dir)
            else:
                self.assessment_store = InMemoryAssessmentStore(max_assessments=config.max_assessments)

            if not self.config.gateway.infermedica_app_id:
                logger.warning("INFERMEDICA_APP_ID is not set, diagnosis calls will fail")

            self.is_loaded = True
            return True

        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            self.error = str(e)
            logger.exception("Failed to initialize services")
            return False

    def configure(
        self,
        gateway: DiagnosisGateway,
        parser: SymptomParser,
        generator: Optional[TextGenerator] = None,
        assessment_store: Optional[AssessmentStore] = None,
        health_config: Optional[HealthBuddyConfig] = None,
    ):
        """Підставити готові сервіси (тести, вбудовування)"""
        self.config = health_config or HealthBuddyConfig()
        self.gateway = gateway
        self.parser = parser
        self.generator = generator
        self.assessment_store = assessment_store or InMemoryAssessmentStore()
        self.error = None
        self.is_loaded = True

    def reset(self):
        self._clear()

    def create_controller(self) -> InterviewController:
        if not self.is_loaded:
            self.load()
        return InterviewController(
            gateway=self.gateway,
            parser=self.parser,
            config=self.config,
            assessment_store=self.assessment_store,
        )


class InterviewSession:
    """
    Сесія інтерв'ю.
    Обгортка над InterviewController для одного користувача.
    """

    def __init__(self, session_id: str, controller: InterviewController):
        self.session_id = session_id
        self.controller = controller
        self.lock = threading.Lock()

        self.created_at = datetime.now()
        self.updated_at = datetime.now()

    def touch(self):
        self.updated_at = datetime.now()

    def to_dict(self) -> dict:
        """Конвертувати в словник для API"""
        c = self.controller
        decision = c.last_decision

        return {
            "session_id": self.session_id,
            "interview_id": c.interview_id,
            "phase": c.phase.value,
            "age": c.age,
            "sex": c.sex.value if c.sex else None,
            "location": c.location.value if c.location else None,
            "question_count": c.question_count,
            "max_questions": c.max_questions,
            "can_extend": c.can_extend,
            "in_flight": c.in_flight,
            "evidence": [
                {**e.to_payload(), **({"name": e.name} if e.name else {})}
                for e in c.evidence
            ],
            "leading_conditions": [
                cond.model_dump(mode="json") for cond in c.leading_conditions()
            ],
            "current_question": (
                c.current_question.model_dump(mode="json") if c.current_question else None
            ),
            "pending_selections": {k: v.value for k, v in c.pending_selections.items()},
            "emergencies": list(c.emergencies),
            "stop_reason": decision.reason.value if decision and decision.should_stop else None,
            "last_error": c.last_error,
            "assessment_id": c.snapshot.assessment_id if c.snapshot else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class SessionManager:
    """
    Менеджер сесій інтерв'ю.
    Зберігає активні сесії в пам'яті.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self.sessions: Dict[str, InterviewSession] = {}
        self.lock = threading.Lock()

    def create_session(self, controller: InterviewController) -> InterviewSession:
        """Створити нову сесію"""
        session_id = str(uuid.uuid4())[:8]
        session = InterviewSession(session_id=session_id, controller=controller)

        with self.lock:
            # Очистка старих сесій
            self._cleanup_old_sessions()

            if len(self.sessions) >= config.max_sessions:
                oldest = min(self.sessions.values(), key=lambda s: s.updated_at)
                del self.sessions[oldest.session_id]

            self.sessions[session_id] = session

        return session

    def get_session(self, session_id: str) -> Optional[InterviewSession]:
        """Отримати сесію"""
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Видалити сесію"""
        with self.lock:
            if session_id in self.sessions:
                del self.sessions[session_id]
                return True
        return False

    def get_active_count(self) -> int:
        """Кількість активних сесій"""
        return len(self.sessions)

    def clear(self):
        with self.lock:
            self.sessions.clear()

    def _cleanup_old_sessions(self):
        """Видалити застарілі сесії"""
        timeout = timedelta(minutes=config.session_timeout_minutes)
        now = datetime.now()

        expired = [
            sid for sid, session in self.sessions.items()
            if now - session.updated_at > timeout
        ]

        for sid in expired:
            del self.sessions[sid]


# Глобальні менеджери
services_manager = ServicesManager()
session_manager = SessionManager()


# Dependency functions для FastAPI
def get_services() -> ServicesManager:
    """Dependency: отримати менеджер сервісів"""
    if not services_manager.is_loaded:
        services_manager.load()
    return services_manager


def get_sessions() -> SessionManager:
    """Dependency: отримати менеджер сесій"""
    return session_manager
