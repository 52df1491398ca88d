"""
HealthBuddy — API Routes

Експорт всіх роутерів.
"""

from .health import router as health_router
from .interviews import router as interviews_router
from .assessments import router as assessments_router

__all__ = [
    'health_router',
    'interviews_router',
    'assessments_router',
]
