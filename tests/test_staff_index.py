from __future__ import annotations

from staff_index import NameResolver, build_staff_index, normalize_staff_record


def test_eligibility_sets_are_unioned_across_aliases_and_meta() -> None:
    person = normalize_staff_record({
        "id": 7,
        "name": "Ayşe Yılmaz",
        "areas": "Triaj, Kırmızı",
        "skills": ["resüsitasyon"],
        "meta": {"tags": ["Sarı"], "shiftCodes": "m|n"},
    })

    assert person.id == "7"
    assert person.name == "Ayşe Yılmaz"
    assert person.name_canonical == "AYSE YILMAZ"
    assert person.areas == {"TRIAJ", "KIRMIZI", "RESUSITASYON", "SARI"}
    assert person.allowed_shift_codes == {"M", "N"}
    assert person.night_allowed is True
    assert person.weekend_off is False


def test_missing_eligibility_fields_mean_unrestricted() -> None:
    person = normalize_staff_record({"id": "1", "name": "Ali"})

    assert person.areas == frozenset()
    assert person.allowed_shift_codes == frozenset()


def test_records_without_identity_are_dropped() -> None:
    staff = build_staff_index([
        {"id": "1", "fullName": "Bir Kişi"},
        {"name": "Sadece Ad"},
        {"pid": 42},
        {"areas": ["Triaj"]},
        "bozuk kayıt",
        None,
        {"id": "1", "name": "Tekrar Eden"},
    ])

    assert [p.id for p in staff] == ["1", "Sadece Ad", "42"]
    assert staff[0].name == "Bir Kişi"
    assert staff[2].name == "42"


def test_night_and_weekend_flags() -> None:
    staff = build_staff_index([
        {"id": "1", "name": "A", "nightAllowed": False},
        {"id": "2", "name": "B", "meta": {"geceYasak": True, "weekendOff": True}},
        {"id": "3", "name": "C", "nightAllowed": None, "weekendOff": 1},
    ])

    assert [p.night_allowed for p in staff] == [False, False, True]
    assert [p.weekend_off for p in staff] == [False, True, True]


def _resolver() -> NameResolver:
    return NameResolver(build_staff_index([
        {"id": "1", "name": "Ahmet Can Yılmaz"},
        {"id": "2", "name": "Mehmet Demir"},
        {"id": "3", "name": "Ali Demir", "code": "AD-3"},
        {"id": "4", "name": "Zeynep Kaya"},
    ]))


def test_resolver_prefers_exact_id_then_canonical_name() -> None:
    resolver = _resolver()

    assert resolver.resolve("2") == "2"
    assert resolver.resolve(4) == "4"
    assert resolver.resolve("ahmet can yilmaz") == "1"
    assert resolver.resolve("ad-3") == "3"


def test_resolver_first_and_last_token_match() -> None:
    resolver = _resolver()

    assert resolver.resolve("Ahmet Yılmaz") == "1"
    assert resolver.resolve("Zeynep Nur Kaya") == "4"


def test_resolver_last_name_only_when_unique() -> None:
    resolver = _resolver()

    assert resolver.resolve("Yılmaz") == "1"
    assert resolver.resolve("Demir") is None
    assert resolver.resolve("Kemal Sunal") is None
    assert resolver.resolve(None) is None


def test_resolve_id_like_falls_back_to_raw_value() -> None:
    resolver = _resolver()

    assert resolver.resolve_id_like("Mehmet Demir") == "2"
    assert resolver.resolve_id_like("X-99") == "X-99"
    assert resolver.resolve_id_like(None) is None
