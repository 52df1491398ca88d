"""
HealthBuddy — REST API модуль

FastAPI REST API для інтерв'ю симптомів.

Компоненти:
- app.py: FastAPI application
- routes/: API endpoints
- models.py: Pydantic models
- dependencies.py: Сервіси та сесії
- config.py: Налаштування сервера

Запуск:
    uvicorn health_buddy.api.app:app --reload --port 8000

Документація:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)

Endpoints:
    GET    /health                               - Health check
    POST   /api/interviews                       - Нова сесія (вік, стать, регіон)
    GET    /api/interviews/{id}                  - Стан сесії
    POST   /api/interviews/{id}/symptoms         - Опис симптомів
    POST   /api/interviews/{id}/answer           - Відповідь на питання
    POST   /api/interviews/{id}/select           - Вибір для group_multiple
    POST   /api/interviews/{id}/confirm          - Підтвердити group_multiple
    POST   /api/interviews/{id}/retry            - Повторити невдалий запит
    POST   /api/interviews/{id}/continue         - Продовжити після ліміту
    POST   /api/interviews/{id}/reset            - Скинути інтерв'ю
    GET    /api/interviews/{id}/explanation      - Пояснення результатів
    DELETE /api/interviews/{id}                  - Закрити сесію
    GET    /api/assessments                      - Збережені результати
"""

from .app import app
from .dependencies import services_manager, session_manager, get_services, get_sessions


__all__ = [
    "app",
    "services_manager",
    "session_manager",
    "get_services",
    "get_sessions",
]
