"""
HealthBuddy — Помилки інтерв'ю

- ValidationError: некоректний вік / стать / опис симптомів → перепитати
- GatewayError: помилка зовнішнього API → повідомити, дозволити повтор
- StateError: дія не відповідає поточній фазі
"""

from typing import Optional


class InterviewError(Exception):
    """Базова помилка інтерв'ю"""

    default_message = "An unknown error occurred."

    def __init__(self, message: Optional[str] = None, user_message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.user_message = user_message or message or self.default_message


class ValidationError(InterviewError):
    """Некоректні дані користувача (відновлюється на місці)"""

    default_message = "Invalid input. Please try again."


class GatewayError(InterviewError):
    """Помилка або некоректна відповідь зовнішнього API"""

    default_message = "The diagnosis service is unavailable."

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        response: Optional[object] = None,
    ):
        super().__init__(
            message,
            user_message=f"An error occurred: {message or self.default_message}. Please try again.",
        )
        self.status_code = status_code
        self.response = response


class StateError(InterviewError):
    """Дія надійшла у фазі, яка її не приймає"""

    default_message = "An unexpected state occurred. Please try again or refresh the page."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, user_message=self.default_message)
