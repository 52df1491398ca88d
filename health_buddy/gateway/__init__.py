"""
HealthBuddy — Зовнішні сервіси

Компоненти:
- base.py: DiagnosisGateway, SymptomParser, TextGenerator (абстракції)
- infermedica.py: InfermedicaGateway (/parse, /diagnosis)
- gemini.py: GeminiGateway (generateContent)
- prompts.py: build_assessment_prompt, explain_assessment
"""

from .base import DiagnosisGateway, SymptomParser, TextGenerator
from .infermedica import InfermedicaGateway, normalize_text
from .gemini import GeminiGateway, extract_text, NO_RESPONSE
from .prompts import build_assessment_prompt, explain_assessment

__all__ = [
    'DiagnosisGateway',
    'SymptomParser',
    'TextGenerator',
    'InfermedicaGateway',
    'normalize_text',
    'GeminiGateway',
    'extract_text',
    'NO_RESPONSE',
    'build_assessment_prompt',
    'explain_assessment',
]
