"""
Çizelge motorunda kullanılan veri yapıları (yalnızca utils'e bağlı).
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from utils import ym_key


@dataclass(frozen=True)
class StaffMember:
    """Normalize edilmiş personel kaydı - bir çalıştırma boyunca değişmez"""
    id: str
    name: str
    name_canonical: str
    role: Optional[str] = None
    code: Optional[str] = None
    areas: FrozenSet[str] = frozenset()
    allowed_shift_codes: FrozenSet[str] = frozenset()
    weekend_off: bool = False
    night_allowed: bool = True


@dataclass(frozen=True)
class DutyRow:
    id: str
    label: str
    shift_code: str = ""
    default_count: int = 0
    pattern: Optional[Tuple[int, ...]] = None
    weekend_off: bool = False


@dataclass(frozen=True)
class SupervisorPolicy:
    primary_id: Optional[str] = None
    assistant_ids: Tuple[str, ...] = ()
    fallback_pool_ids: Tuple[str, ...] = ()
    weekday_only: bool = True
    escalation_days: FrozenSet[int] = frozenset()
    blackout_days: FrozenSet[int] = frozenset()
    min_assistants_on_escalation: int = 1


@dataclass
class LeaveIndex:
    """
    İki paralel izin tablosu:
      by_staff_id:       {pid: {"YYYY-MM": {gün, ...}}}
      by_canonical_name: {kanonik_ad: {"YYYY-MM": {gün, ...}}}
    Kişi iki tablodan herhangi birinde varsa izinlidir.
    """
    by_staff_id: Dict[str, Dict[str, Set[int]]] = field(default_factory=dict)
    by_canonical_name: Dict[str, Dict[str, Set[int]]] = field(default_factory=dict)

    def add_for_id(self, pid: str, ym: str, gun: int):
        if pid and gun:
            self.by_staff_id.setdefault(pid, {}).setdefault(ym, set()).add(gun)

    def add_for_name(self, canon: str, ym: str, gun: int):
        if canon and gun:
            self.by_canonical_name.setdefault(canon, {}).setdefault(ym, set()).add(gun)

    def discard_for_id(self, pid: str, ym: str, gun: int):
        _discard(self.by_staff_id, pid, ym, gun)

    def discard_for_name(self, canon: str, ym: str, gun: int):
        _discard(self.by_canonical_name, canon, ym, gun)

    def days_for(self, person: StaffMember, yil: int, month0: int) -> Set[int]:
        ym = ym_key(yil, month0)
        days = set(self.by_staff_id.get(person.id, {}).get(ym, ()))
        days |= self.by_canonical_name.get(person.name_canonical, {}).get(ym, set())
        return days

    def is_on_leave(self, person: StaffMember, yil: int, month0: int, gun: int) -> bool:
        ym = ym_key(yil, month0)
        if gun in self.by_staff_id.get(person.id, {}).get(ym, ()):
            return True
        return gun in self.by_canonical_name.get(person.name_canonical, {}).get(ym, ())


def _discard(table: Dict[str, Dict[str, Set[int]]], key: str, ym: str, gun: int):
    bucket = table.get(key)
    if not bucket or ym not in bucket:
        return
    bucket[ym].discard(gun)
    if not bucket[ym]:
        del bucket[ym]
    if not bucket:
        del table[key]


@dataclass(frozen=True)
class Issue:
    """Karşılanamayan ihtiyaç kaydı"""
    day: int
    row_id: str
    label: str
    required: int
    assigned: int
    reason: Optional[str] = None

    def to_dict(self) -> Dict:
        out = {
            "day": self.day, "rowId": self.row_id, "label": self.label,
            "required": self.required, "assigned": self.assigned,
        }
        if self.reason is not None:
            out["reason"] = self.reason
        return out


@dataclass
class RosterResult:
    named_assignments: Dict[int, Dict[str, List[str]]] = field(default_factory=dict)
    issues: List[Issue] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "namedAssignments": {
                str(gun): {row_id: list(names) for row_id, names in satirlar.items()}
                for gun, satirlar in self.named_assignments.items()
            },
            "issues": [i.to_dict() for i in self.issues],
        }
