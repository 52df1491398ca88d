"""
HealthBuddy — Клієнт Infermedica API

Endpoints:
    POST /parse      - розбір вільного тексту → згадки симптомів
    POST /diagnosis  - наступне питання + ймовірності станів

Кожен запит несе заголовок Interview-Id; сервіс не зберігає сесію,
тому /diagnosis завжди отримує повний список доказів.
"""

import logging
import re
from typing import Optional

import requests
from pydantic import ValidationError as SchemaError

from health_buddy.config import GatewayConfig
from health_buddy.interview.errors import GatewayError
from health_buddy.schemas import Demographics, DiagnosisRequest, DiagnosisStep, ParseResult

from .base import DiagnosisGateway, SymptomParser


logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Обрізати, стиснути пробіли, lowercase"""
    return re.sub(r"\s+", " ", text.strip()).lower()


class InfermedicaGateway(DiagnosisGateway, SymptomParser):
    """
    HTTP клієнт Infermedica.

    Приклад:
        gateway = InfermedicaGateway(app_id="...", app_key="...")
        parsed = gateway.parse("headache and nausea", demographics, interview_id)
        step = gateway.diagnose(request, interview_id)
    """

    def __init__(
        self,
        base_url: str = "https://api.infermedica.com/v3",
        app_id: Optional[str] = None,
        app_key: Optional[str] = None,
        timeout: float = 15.0,
        min_relevance: float = 0.4,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self.app_key = app_key
        self.timeout = timeout
        self.min_relevance = min_relevance
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: GatewayConfig, **kwargs) -> "InfermedicaGateway":
        return cls(
            base_url=config.infermedica_url,
            app_id=config.infermedica_app_id,
            app_key=config.infermedica_app_key,
            timeout=config.timeout_seconds,
            **kwargs,
        )

    def _headers(self, interview_id: str) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Interview-Id": interview_id,
        }
        if self.app_id:
            headers["App-Id"] = self.app_id
        if self.app_key:
            headers["App-Key"] = self.app_key
        return headers

    def _post(self, endpoint: str, payload: dict, interview_id: str) -> dict:
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.post(
                url,
                json=payload,
                headers=self._headers(interview_id),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Infermedica request to %s failed: %s", endpoint, e)
            raise GatewayError(f"Request to {endpoint} failed: {e}") from e

        if not response.ok:
            detail = response.text
            try:
                detail = response.json().get("message", detail)
            except (ValueError, AttributeError):
                pass
            raise GatewayError(
                f"API error: {response.status_code} {response.reason}: {detail}".rstrip(": "),
                status_code=response.status_code,
                response=detail,
            )

        try:
            return response.json() if response.content else {}
        except ValueError as e:
            raise GatewayError("Failed to parse API response", status_code=response.status_code) from e

    def parse(self, text: str, demographics: Demographics, interview_id: str) -> ParseResult:
        payload = {
            "age": demographics.age_payload(),
            "sex": demographics.sex.value,
            "text": normalize_text(text),
            "context": [],
            "include_tokens": True,
            "correct_spelling": True,
            "concept_types": ["symptom", "risk_factor"],
        }

        data = self._post("/parse", payload, interview_id)

        try:
            result = ParseResult.model_validate(data)
        except SchemaError as e:
            raise GatewayError("Received an invalid response format for symptom analysis") from e

        return result.relevant(self.min_relevance)

    def diagnose(self, request: DiagnosisRequest, interview_id: str) -> DiagnosisStep:
        if not interview_id:
            raise GatewayError("Interview ID is required for diagnosis")

        data = self._post("/diagnosis", request.to_payload(), interview_id)

        try:
            return DiagnosisStep.model_validate(data)
        except SchemaError as e:
            raise GatewayError("Received an invalid response format for diagnosis") from e
