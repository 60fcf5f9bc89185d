"""
Personel indeksi ve isim çözümleyici.

Farklı şekillerdeki ham personel kayıtlarını tek tip StaffMember listesine
çevirir; isim/kod/ID referanslarını personel ID'sine bağlayan NameResolver
her çalıştırmada bu listeden yeniden kurulur.
"""

from typing import Dict, Iterable, List, Optional

from models import StaffMember
from utils import arr_from_any, canon_name, name_tokens, normalize_id


ID_KEYS = ("id", "pid", "tc", "code")
NAME_KEYS = ("name", "fullName", "displayName", "AD SOYAD", "ad")
AREA_KEYS = ("areas", "workAreas", "skills", "tags")
SHIFT_KEYS = ("shiftCodes", "shifts", "allowedShifts", "vardiyaKodlari", "vardiya", "vardiyalar")


def _first_present(record: Dict, keys) -> Optional[object]:
    for key in keys:
        val = record.get(key)
        if val is not None and val != "":
            return val
    return None


def _collect(record: Dict, meta: Dict, keys) -> frozenset:
    out = set()
    for src in (record, meta):
        for key in keys:
            for item in arr_from_any(src.get(key)):
                c = canon_name(item)
                if c:
                    out.add(c)
    return frozenset(out)


def normalize_staff_record(raw) -> Optional[StaffMember]:
    """Tek bir ham kaydı normalize et; kimliksiz kayıt None döner"""
    if not isinstance(raw, dict):
        return None
    meta = raw.get("meta") if isinstance(raw.get("meta"), dict) else {}

    pid = normalize_id(_first_present(raw, ID_KEYS))
    name_raw = _first_present(raw, NAME_KEYS)
    name = str(name_raw).strip() if name_raw is not None else ""
    if not pid and not name:
        return None
    pid = pid or name
    name = name or pid

    night_allowed = not (
        raw.get("nightAllowed") is False
        or meta.get("nightAllowed") is False
        or meta.get("geceYasak") is True
    )

    return StaffMember(
        id=pid,
        name=name,
        name_canonical=canon_name(name),
        role=raw.get("role") or meta.get("role") or None,
        code=raw.get("code") or meta.get("code") or None,
        areas=_collect(raw, meta, AREA_KEYS),
        allowed_shift_codes=_collect(raw, meta, SHIFT_KEYS),
        weekend_off=bool(raw.get("weekendOff") or meta.get("weekendOff")),
        night_allowed=night_allowed,
    )


def build_staff_index(raw_records: Iterable) -> List[StaffMember]:
    staff = []
    seen = set()
    for raw in raw_records or []:
        person = normalize_staff_record(raw)
        if person is None or person.id in seen:
            continue
        seen.add(person.id)
        staff.append(person)
    return staff


class NameResolver:
    """Ham isim/kod/ID -> personel ID (çalıştırma başına kurulur, global durum yok)"""

    def __init__(self, staff: List[StaffMember]):
        self.by_id: Dict[str, StaffMember] = {p.id: p for p in staff}
        self._canon_to_id: Dict[str, str] = {}
        self._first_last_to_id: Dict[str, str] = {}
        self._last_name_ids: Dict[str, List[str]] = {}

        for p in staff:
            self._canon_to_id.setdefault(p.name_canonical, p.id)
            tokens = name_tokens(p.name_canonical)
            if tokens:
                self._first_last_to_id.setdefault(f"{tokens[0]} {tokens[-1]}", p.id)
                self._last_name_ids.setdefault(tokens[-1], []).append(p.id)
        # Kodlar isimleri ezmesin
        for p in staff:
            if p.code:
                self._canon_to_id.setdefault(canon_name(p.code), p.id)

    def person(self, pid) -> Optional[StaffMember]:
        return self.by_id.get(normalize_id(pid) or "")

    def resolve_name(self, raw) -> Optional[str]:
        """
        Sadece isim tabanlı çözümleme:
        1. Tam kanonik eşleşme (isim veya kod)
        2. İlk + son kelime eşleşmesi
        3. Soyad, personel içinde tekilse
        """
        c = canon_name(raw)
        if not c:
            return None
        if c in self._canon_to_id:
            return self._canon_to_id[c]
        tokens = c.split(" ")
        guess = f"{tokens[0]} {tokens[-1]}"
        if guess in self._canon_to_id:
            return self._canon_to_id[guess]
        if guess in self._first_last_to_id:
            return self._first_last_to_id[guess]
        ids = self._last_name_ids.get(tokens[-1], [])
        if len(ids) == 1:
            return ids[0]
        return None

    def resolve(self, raw) -> Optional[str]:
        """Önce birebir ID, sonra isim sezgileri"""
        if raw is None:
            return None
        pid = normalize_id(raw)
        if pid and pid in self.by_id:
            return pid
        return self.resolve_name(raw)

    def resolve_id_like(self, raw) -> Optional[str]:
        """Kanonik isim eşleşmesi yoksa ham değeri ID kabul et"""
        if raw is None:
            return None
        c = canon_name(raw)
        if c in self._canon_to_id:
            return self._canon_to_id[c]
        return normalize_id(raw)
