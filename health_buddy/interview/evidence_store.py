"""
HealthBuddy — Сховище доказів

Впорядкований за вставкою список доказів без дублікатів за id.
Повторний upsert того ж id замінює попередній запис і переносить його в кінець.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Union
from pydantic import ValidationError as SchemaError

from health_buddy.schemas import EvidenceItem, ParseResult

from .errors import ValidationError


EvidenceLike = Union[EvidenceItem, dict]


class EvidenceStore:
    """
    Дедуплікований список доказів, який надсилається в кожен запит /diagnosis.

    Приклад:
        store = EvidenceStore()
        store.upsert(EvidenceItem(id="s_21", choice_id="present"))
        store.upsert(EvidenceItem(id="s_21", choice_id="absent"))

        len(store)          # 1
        store.get("s_21")   # choice_id=absent
    """

    def __init__(self, items: Optional[Iterable[EvidenceLike]] = None):
        self._items: Dict[str, EvidenceItem] = {}
        if items:
            self.upsert_batch(items)

    @staticmethod
    def _coerce(item: EvidenceLike) -> EvidenceItem:
        if isinstance(item, EvidenceItem):
            return item
        try:
            return EvidenceItem.model_validate(item)
        except SchemaError as e:
            raise ValidationError(f"Invalid evidence item: {item!r}") from e

    def upsert(self, item: EvidenceLike) -> EvidenceItem:
        """Вставити або замінити доказ за id"""
        item = self._coerce(item)
        self._items.pop(item.id, None)
        self._items[item.id] = item
        return item

    def upsert_batch(self, items: Iterable[EvidenceLike]) -> List[EvidenceItem]:
        """
        Застосувати пакет атомарно: спочатку валідуються всі елементи,
        потім замінюються існуючі записи й пакет додається в кінець.
        """
        batch: Dict[str, EvidenceItem] = {}
        for raw in items:
            item = self._coerce(raw)
            batch.pop(item.id, None)
            batch[item.id] = item

        merged = {k: v for k, v in self._items.items() if k not in batch}
        merged.update(batch)
        self._items = merged
        return list(batch.values())

    def merge(self, parse_result: ParseResult, tag_initial: bool = False) -> List[EvidenceItem]:
        """
        Засіяти сховище результатом розбору вільного тексту.

        Кожна згадка стає доказом без source (динамічний),
        якщо tag_initial=False.
        """
        return self.upsert_batch(
            mention.to_evidence(tag_initial=tag_initial)
            for mention in parse_result.mentions
        )

    def remove(self, evidence_id: str) -> Optional[EvidenceItem]:
        return self._items.pop(evidence_id, None)

    def get(self, evidence_id: str) -> Optional[EvidenceItem]:
        return self._items.get(evidence_id)

    def items(self) -> List[EvidenceItem]:
        return list(self._items.values())

    def to_payload(self) -> List[dict]:
        return [item.to_payload() for item in self._items.values()]

    def clear(self) -> None:
        self._items = {}

    def __contains__(self, evidence_id: object) -> bool:
        return evidence_id in self._items

    def __iter__(self) -> Iterator[EvidenceItem]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"EvidenceStore(items={len(self._items)})"
