"""
HealthBuddy — Клієнт Gemini API

Генерація пояснень до результатів (поза циклом інтерв'ю).
"""

import logging
from typing import Optional

import requests

from health_buddy.config import GatewayConfig
from health_buddy.interview.errors import GatewayError

from .base import TextGenerator


logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"


class GeminiGateway(TextGenerator):
    """HTTP клієнт generateContent"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: GatewayConfig, **kwargs) -> "GeminiGateway":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_url,
            timeout=config.timeout_seconds,
            **kwargs,
        )

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise GatewayError("Gemini API key is not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", e)
            raise GatewayError(f"Gemini request failed: {e}") from e

        if not response.ok:
            raise GatewayError(
                f"Gemini API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                response=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError("Failed to parse Gemini response") from e

        return extract_text(data)


def extract_text(data: dict) -> str:
    """candidates[0].content.parts[0].text або 'No response'"""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE
    return text or NO_RESPONSE
