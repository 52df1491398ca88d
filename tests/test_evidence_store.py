"""
Тести для модуля evidence_store

Запуск: pytest tests/test_evidence_store.py -v
Або демо: python tests/test_evidence_store.py
"""

import pytest


def test_upsert_deduplicates():
    """Тест заміни доказу з тим самим id"""
    from health_buddy.interview import EvidenceStore
    from health_buddy.schemas import ChoiceId, EvidenceItem

    store = EvidenceStore()
    store.upsert(EvidenceItem(id="s_21", choice_id=ChoiceId.PRESENT))
    store.upsert(EvidenceItem(id="s_98", choice_id=ChoiceId.ABSENT))
    store.upsert(EvidenceItem(id="s_21", choice_id=ChoiceId.ABSENT))

    assert len(store) == 2
    assert store.get("s_21").choice_id == ChoiceId.ABSENT

    # Замінений запис переноситься в кінець
    assert [e.id for e in store] == ["s_98", "s_21"]

    print(f"✓ Upsert: {[(e.id, e.choice_id.value) for e in store]}")


def test_upsert_accepts_dicts():
    """Тест перетворення словника в EvidenceItem"""
    from health_buddy.interview import EvidenceStore
    from health_buddy.schemas import ChoiceId, EvidenceSource

    store = EvidenceStore()
    item = store.upsert({"id": "p_17", "choice_id": "present", "source": "predefined"})

    assert item.choice_id == ChoiceId.PRESENT
    assert item.source == EvidenceSource.PREDEFINED
    assert "p_17" in store
    assert "s_1" not in store

    print(f"✓ Dict upsert: {item}")


def test_invalid_item_rejected():
    """Тест відхилення некоректних доказів"""
    from health_buddy.interview import EvidenceStore, ValidationError

    store = EvidenceStore()

    with pytest.raises(ValidationError):
        store.upsert({"id": "s_21", "choice_id": "maybe"})

    with pytest.raises(ValidationError):
        store.upsert({"id": "", "choice_id": "present"})

    assert len(store) == 0
    print("✓ Invalid evidence rejected")


def test_batch_is_atomic():
    """Тест атомарності пакету: помилка → сховище не змінюється"""
    from health_buddy.interview import EvidenceStore, ValidationError

    store = EvidenceStore([{"id": "s_21", "choice_id": "present"}])

    with pytest.raises(ValidationError):
        store.upsert_batch([
            {"id": "s_21", "choice_id": "absent"},
            {"id": "s_98", "choice_id": "wrong"},
        ])

    assert len(store) == 1
    assert store.get("s_21").choice_id.value == "present"

    applied = store.upsert_batch([
        {"id": "s_98", "choice_id": "present"},
        {"id": "s_21", "choice_id": "absent"},
    ])

    assert [e.id for e in applied] == ["s_98", "s_21"]
    assert [e.id for e in store] == ["s_98", "s_21"]
    assert store.get("s_21").choice_id.value == "absent"

    print(f"✓ Batch: {store.to_payload()}")


def test_merge_parse_result():
    """Тест засіювання згадками з /parse"""
    from health_buddy.interview import EvidenceStore
    from health_buddy.schemas import EvidenceSource, ParseResult

    parsed = ParseResult.model_validate({
        "mentions": [
            {"id": "s_21", "choice_id": "present", "common_name": "Headache"},
            {"id": "s_156", "choice_id": "absent", "name": "Nausea"},
        ]
    })

    store = EvidenceStore()
    store.merge(parsed)

    assert all(e.is_dynamic for e in store)
    assert store.get("s_21").name == "Headache"
    assert store.get("s_156").name == "Nausea"

    tagged = EvidenceStore()
    tagged.merge(parsed, tag_initial=True)
    assert all(e.source == EvidenceSource.INITIAL for e in tagged)

    print(f"✓ Merge: dynamic={store.to_payload()}, tagged={tagged.to_payload()}")


def test_payload_omits_display_name():
    """Тест: назва для відображення не йде в запит"""
    from health_buddy.interview import EvidenceStore
    from health_buddy.schemas import ChoiceId, EvidenceItem, EvidenceSource

    store = EvidenceStore([
        EvidenceItem(id="s_21", choice_id=ChoiceId.PRESENT, name="Headache"),
        EvidenceItem(id="p_17", choice_id=ChoiceId.PRESENT, source=EvidenceSource.PREDEFINED),
    ])

    assert store.to_payload() == [
        {"id": "s_21", "choice_id": "present"},
        {"id": "p_17", "choice_id": "present", "source": "predefined"},
    ]
    assert store.get("p_17").is_risk_factor
    assert not store.get("s_21").is_risk_factor

    store.clear()
    assert len(store) == 0

    print("✓ Payload without names")


def demo():
    """Демонстрація роботи EvidenceStore"""
    print("=" * 60)
    print("HealthBuddy — Тести EvidenceStore")
    print("=" * 60)

    try:
        print("\n--- 1. Upsert ---")
        test_upsert_deduplicates()
        test_upsert_accepts_dicts()

        print("\n--- 2. Validation ---")
        test_invalid_item_rejected()
        test_batch_is_atomic()

        print("\n--- 3. Parse merge ---")
        test_merge_parse_result()
        test_payload_omits_display_name()

        print("\n" + "=" * 60)
        print("✅ Всі тести пройдено успішно!")
        print("=" * 60)

    except Exception as e:
        print(f"\n❌ ПОМИЛКА: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    demo()
