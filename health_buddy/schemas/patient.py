"""
HealthBuddy — Схеми даних пацієнта

Pydantic моделі для:
- Sex: стать пацієнта
- TravelRegion: регіон нещодавньої подорожі
- Age: вік у форматі Infermedica
- Demographics: вік + стать + регіон
"""

from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field


class Sex(str, Enum):
    """Стать пацієнта"""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class TravelRegion(str, Enum):
    """Регіон нещодавньої подорожі"""
    NONE = "No recent travel"
    NORTH_AMERICA = "United States/Canada"
    EUROPE = "Europe"
    ASIA = "Asia"
    AFRICA = "Africa"
    SOUTH_AMERICA = "South America"
    OCEANIA = "Australia/Oceania"
    MIDDLE_EAST = "Middle East"


class Age(BaseModel):
    """Вік у форматі {value, unit}"""
    value: int = Field(..., gt=0, le=120)
    unit: Literal["year"] = "year"


class Demographics(BaseModel):
    """
    Демографічні дані, потрібні для кожного запиту до Infermedica.

    Приклад:
        demographics = Demographics(age=34, sex=Sex.FEMALE)
        demographics.age_payload()  # {"value": 34, "unit": "year"}
    """
    age: int = Field(..., gt=0, le=120, description="Вік у роках")
    sex: Sex
    location: Optional[TravelRegion] = None

    def age_payload(self) -> dict:
        return Age(value=self.age).model_dump()
