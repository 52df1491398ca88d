"""
HealthBuddy — Збереження результатів оцінки

AssessmentStore зберігає знімки завершених інтерв'ю під згенерованим id.

Реалізації:
- InMemoryAssessmentStore: словник у пам'яті
- JsonAssessmentStore: JSON файли healthAssessment_<id>.json
"""

import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from health_buddy.schemas import AssessmentSnapshot


logger = logging.getLogger(__name__)

FILE_PREFIX = "healthAssessment_"


class AssessmentStore(ABC):
    """Порт збереження знімків оцінки"""

    @abstractmethod
    def save(self, snapshot: AssessmentSnapshot) -> str:
        """Зберегти знімок, повернути його id"""

    @abstractmethod
    def get(self, assessment_id: str) -> Optional[AssessmentSnapshot]:
        """Отримати знімок за id"""

    @abstractmethod
    def list(self) -> List[AssessmentSnapshot]:
        """Всі знімки, новіші першими"""

    @staticmethod
    def _assign_id(snapshot: AssessmentSnapshot) -> AssessmentSnapshot:
        if snapshot.assessment_id:
            return snapshot
        return snapshot.model_copy(update={"assessment_id": str(uuid.uuid4())})


class InMemoryAssessmentStore(AssessmentStore):
    """
    Знімки в пам'яті процесу.

    max_assessments обмежує кількість знімків: при переповненні
    видаляється найстаріший (None → без обмеження).
    """

    def __init__(self, max_assessments: Optional[int] = None):
        self.max_assessments = max_assessments
        self._snapshots: Dict[str, AssessmentSnapshot] = {}
        self._lock = threading.Lock()

    def save(self, snapshot: AssessmentSnapshot) -> str:
        snapshot = self._assign_id(snapshot)
        with self._lock:
            self._snapshots[snapshot.assessment_id] = snapshot

            if self.max_assessments is not None:
                while len(self._snapshots) > self.max_assessments:
                    oldest = min(self._snapshots.values(), key=lambda s: s.timestamp)
                    del self._snapshots[oldest.assessment_id]
                    logger.debug("Assessment %s evicted", oldest.assessment_id)
        return snapshot.assessment_id

    def get(self, assessment_id: str) -> Optional[AssessmentSnapshot]:
        return self._snapshots.get(assessment_id)

    def list(self) -> List[AssessmentSnapshot]:
        return sorted(self._snapshots.values(), key=lambda s: s.timestamp, reverse=True)


class JsonAssessmentStore(AssessmentStore):
    """
    Знімки у JSON файлах.

    Приклад:
        store = JsonAssessmentStore("data/assessments")
        assessment_id = store.save(snapshot)
        store.get(assessment_id)
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, assessment_id: str) -> Path:
        return self.directory / f"{FILE_PREFIX}{assessment_id}.json"

    def save(self, snapshot: AssessmentSnapshot) -> str:
        snapshot = self._assign_id(snapshot)
        path = self._path(snapshot.assessment_id)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info("Assessment %s saved to %s", snapshot.assessment_id, path)
        return snapshot.assessment_id

    def get(self, assessment_id: str) -> Optional[AssessmentSnapshot]:
        path = self._path(assessment_id)
        if not path.exists():
            return None
        return self._load(path)

    def list(self) -> List[AssessmentSnapshot]:
        snapshots = [self._load(p) for p in self.directory.glob(f"{FILE_PREFIX}*.json")]
        return sorted(snapshots, key=lambda s: s.timestamp, reverse=True)

    @staticmethod
    def _load(path: Path) -> AssessmentSnapshot:
        with open(path, "r", encoding="utf-8") as f:
            return AssessmentSnapshot.model_validate(json.load(f))
