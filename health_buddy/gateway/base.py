"""
HealthBuddy — Інтерфейси зовнішніх сервісів

Контролер інтерв'ю працює лише через ці абстракції,
тому в тестах їх легко замінити фейками.
"""

from abc import ABC, abstractmethod

from health_buddy.schemas import Demographics, DiagnosisRequest, DiagnosisStep, ParseResult


class DiagnosisGateway(ABC):
    """Наступний крок діагностики (Infermedica /diagnosis)"""

    @abstractmethod
    def diagnose(self, request: DiagnosisRequest, interview_id: str) -> DiagnosisStep:
        """
        Отримати наступне питання та оновлені ймовірності.

        Raises:
            GatewayError: non-2xx, мережа або некоректна відповідь
        """


class SymptomParser(ABC):
    """Розбір вільного тексту (Infermedica /parse)"""

    @abstractmethod
    def parse(self, text: str, demographics: Demographics, interview_id: str) -> ParseResult:
        """
        Витягнути згадки симптомів з тексту.

        Raises:
            GatewayError: non-2xx, мережа або некоректна відповідь
        """


class TextGenerator(ABC):
    """Генерація тексту (Gemini)"""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Повернути відповідь моделі на prompt"""
