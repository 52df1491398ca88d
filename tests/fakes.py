"""
Фейкові сервіси для тестів контролера та API.

Запити записуються, відповіді видаються зі списку кроків.
"""

from typing import Callable, List, Optional, Sequence, Tuple, Union

from health_buddy.gateway import DiagnosisGateway, SymptomParser, TextGenerator
from health_buddy.schemas import DiagnosisStep, ParseResult


def make_conditions(probabilities: Sequence[float], details: Optional[dict] = None) -> List[dict]:
    """c_1, c_2, ... з заданими ймовірностями"""
    names = ["Migraine", "Tension headache", "Sinusitis", "Common cold", "Influenza"]
    conditions = []
    for i, p in enumerate(probabilities):
        condition = {
            "id": f"c_{i + 1}",
            "name": names[i % len(names)],
            "common_name": names[i % len(names)],
            "probability": p,
        }
        if details:
            condition["details"] = details
        conditions.append(condition)
    return conditions


def single_question(item_id: str = "s_98", text: str = "Do you have a fever?") -> dict:
    return {
        "type": "single",
        "text": text,
        "items": [{
            "id": item_id,
            "name": text.rstrip("?"),
            "choices": [
                {"id": "present", "label": "Yes"},
                {"id": "absent", "label": "No"},
                {"id": "unknown", "label": "Don't know"},
            ],
        }],
    }


def group_multiple_question(item_ids: Sequence[str] = ("s_1190", "s_1191")) -> dict:
    return {
        "type": "group_multiple",
        "text": "Please check all the symptoms you have",
        "items": [
            {
                "id": item_id,
                "name": f"Symptom {item_id}",
                "choices": [
                    {"id": "present", "label": "Yes"},
                    {"id": "absent", "label": "No"},
                    {"id": "unknown", "label": "Don't know"},
                ],
            }
            for item_id in item_ids
        ],
    }


def make_step(
    probabilities: Sequence[float],
    question: Optional[dict] = None,
    should_stop: bool = False,
    has_emergency_evidence: bool = False,
    details: Optional[dict] = None,
) -> DiagnosisStep:
    return DiagnosisStep.model_validate({
        "question": question,
        "conditions": make_conditions(probabilities, details),
        "should_stop": should_stop,
        "has_emergency_evidence": has_emergency_evidence,
    })


def make_parse_result(mentions: Sequence[Tuple[str, str, float]]) -> ParseResult:
    """[(id, choice_id, relevance), ...]"""
    return ParseResult.model_validate({
        "mentions": [
            {"id": m_id, "choice_id": choice, "name": f"Mention {m_id}", "relevance": relevance}
            for m_id, choice, relevance in mentions
        ]
    })


StepLike = Union[DiagnosisStep, Exception, Callable[[], DiagnosisStep]]


class FakeDiagnosisGateway(DiagnosisGateway):
    """
    Видає кроки по черзі; коли черга порожня — повторює default.

    Елемент черги може бути винятком (буде піднятий) або функцією
    (викликається під час запиту, наприклад для скидання інтерв'ю).
    """

    def __init__(self, steps: Sequence[StepLike] = (), default: Optional[DiagnosisStep] = None):
        self.steps = list(steps)
        self.default = default
        self.calls = []

    def diagnose(self, request, interview_id):
        self.calls.append((request, interview_id))

        step = self.steps.pop(0) if self.steps else self.default
        if isinstance(step, Exception):
            raise step
        if callable(step):
            step = step()
        if step is None:
            raise AssertionError("FakeDiagnosisGateway has no more steps")
        return step

    @property
    def last_request(self):
        return self.calls[-1][0]


class FakeSymptomParser(SymptomParser):
    def __init__(self, result: Optional[ParseResult] = None, error: Optional[Exception] = None):
        self.result = result or make_parse_result([("s_21", "present", 0.9), ("s_156", "present", 0.8)])
        self.error = error
        self.calls = []

    def parse(self, text, demographics, interview_id):
        self.calls.append((text, demographics, interview_id))
        if self.error is not None:
            raise self.error
        return self.result


class FakeTextGenerator(TextGenerator):
    def __init__(self, reply: str = "Clinical Summary: likely migraine."):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.reply
