"""
HealthBuddy — Health Routes

Health check та інформація про систему.
"""

from fastapi import APIRouter, Depends

from ..config import config
from ..dependencies import get_services, get_sessions, ServicesManager, SessionManager
from ..models import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    services: ServicesManager = Depends(get_services),
    sessions: SessionManager = Depends(get_sessions)
) -> HealthResponse:
    """
    Перевірка стану сервера.

    Повертає:
    - Статус сервера
    - Які зовнішні сервіси налаштовані
    - Кількість активних сесій
    """
    return HealthResponse(
        status="ok" if services.is_loaded else "degraded",
        version=config.version,
        services_loaded=services.is_loaded,
        components={
            "diagnosis": services.gateway is not None,
            "parser": services.parser is not None,
            "text_generation": services.generator is not None,
            "assessment_store": services.assessment_store is not None,
        },
        active_sessions=sessions.get_active_count()
    )


@router.get("/")
def root():
    """Головна сторінка API"""
    return {
        "name": config.api_title,
        "version": config.version,
        "description": config.api_description,
        "docs": "/docs",
        "health": "/health",
    }
