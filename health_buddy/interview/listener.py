"""
HealthBuddy — Слухач подій інтерв'ю

Відображення (чат, озвучення, графіки) підключається через цей порт.
"""

from typing import List

from health_buddy.schemas import AssessmentSnapshot, Condition


class InterviewListener:
    """Базовий слухач — нічого не робить"""

    def on_message(self, interview_id: str, message: str) -> None:
        """Повідомлення для користувача (помилка, попередження, підсумок)"""

    def on_leading_conditions(self, interview_id: str, conditions: List[Condition]) -> None:
        """Провідні стани (топ-N за ймовірністю) після кожної відповіді сервісу"""

    def on_question(self, interview_id: str, question) -> None:
        """Нове питання готове до показу"""

    def on_finalized(self, snapshot: AssessmentSnapshot) -> None:
        """Інтерв'ю завершено"""
