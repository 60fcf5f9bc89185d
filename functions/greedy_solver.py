"""
Greedy çizelge motoru — RosterEngine sınıfı ve generate_roster giriş noktası.

Her gün için önce "Servis Sorumlusu" satırları politika ile, sonra diğer
satırlar pin + tohumlu rastgele havuz ile doldurulur. Karşılanamayan ihtiyaç
hata değil, Issue kaydıdır.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set
import logging

from leaves import build_leave_index
from models import DutyRow, Issue, LeaveIndex, RosterResult, StaffMember, SupervisorPolicy
from need_matrix import build_need_matrix
from parsers import parse_duty_rows
from pins import resolve_pins
from rng import Mulberry32, month_seed
from staff_index import NameResolver, build_staff_index
from supervisor import derive_supervisor_candidates, resolve_policy
from utils import (
    LEAVE_POLICIES, area_keywords, canon_name, get_days_in_month,
    is_night_code, is_supervisor_label, is_weekend, validate_year_month,
)

logger = logging.getLogger(__name__)

NO_SUPERVISOR_REASON = "no supervisor candidate"


@dataclass
class RunState:
    """Tek bir çalıştırmaya ait değişken durum"""
    rng: Mulberry32
    used_today: Set[str] = field(default_factory=set)
    supervisor_usage: Dict[str, int] = field(default_factory=dict)
    night_workers: Dict[int, Set[str]] = field(default_factory=dict)

    def start_day(self):
        self.used_today = set()

    def worked_night(self, pid: str, gun: int) -> bool:
        return pid in self.night_workers.get(gun, ())


class RosterEngine:
    """Aylık nöbet çizelgesi oluşturucu"""

    def __init__(self, yil: int, month0: int, rows: List[DutyRow], staff: List[StaffMember],
                 leaves: LeaveIndex, pins: Dict[int, Dict[str, List[str]]],
                 policy: SupervisorPolicy, overrides: Optional[Dict] = None,
                 leave_policy: str = "hard", force_pins: bool = True,
                 require_eligibility: bool = True, rng: Optional[Mulberry32] = None):
        validate_year_month(yil, month0)
        if leave_policy not in LEAVE_POLICIES:
            raise ValueError(f"Geçersiz izin politikası: {leave_policy!r}")

        self.yil = yil
        self.month0 = month0
        self.rows = list(rows)
        self.staff = sorted(staff, key=lambda p: p.id)
        self.by_id = {p.id: p for p in self.staff}
        self.leaves = leaves
        self.pins = pins or {}
        self.policy = policy
        self.leave_policy = leave_policy
        self.force_pins = force_pins
        self.require_eligibility = require_eligibility
        self.days_in_month = get_days_in_month(yil, month0 + 1)
        self.need = build_need_matrix(self.rows, overrides, yil, month0)
        self.state = RunState(rng=rng or Mulberry32(month_seed(yil, month0)))

        pool_ids = policy.fallback_pool_ids
        if pool_ids:
            self.supervisor_pool = [self.by_id[pid] for pid in pool_ids if pid in self.by_id]
        else:
            self.supervisor_pool = derive_supervisor_candidates(self.staff)

    # ============================================
    # KISIT KONTROLLERİ
    # ============================================

    def needs_rest(self, p: StaffMember, row: DutyRow, gun: int) -> bool:
        """Gece üstüne gece yok: dün gece satırında çalışan bugün gece satırına yazılmaz"""
        return is_night_code(row.shift_code) and self.state.worked_night(p.id, gun - 1)

    def kesin_engel_var_mi(self, p: StaffMember, row: DutyRow, gun: int) -> bool:
        """Zorunlu pinler dahil herkes için geçerli kısıtlar"""
        if p.weekend_off and is_weekend(self.yil, self.month0, gun):
            return True
        if not p.night_allowed and is_night_code(row.shift_code):
            return True
        return self.needs_rest(p, row, gun)

    def is_eligible(self, p: StaffMember, row: DutyRow, gun: int) -> bool:
        """Alan ve vardiya kodu uyumu"""
        if not self.require_eligibility:
            return True

        if p.areas and not any(k in p.areas for k in area_keywords(row.label)):
            return False
        shift = canon_name(row.shift_code)
        if shift and p.allowed_shift_codes and shift not in p.allowed_shift_codes:
            return False
        return True

    def is_on_leave(self, p: StaffMember, gun: int) -> bool:
        if self.leave_policy == "ignore":
            return False
        # "soft" şimdilik "hard" ile aynı: tam dışlama
        return self.leaves.is_on_leave(p, self.yil, self.month0, gun)

    def kisi_uygun_mu(self, p: StaffMember, row: DutyRow, gun: int) -> bool:
        if p.id in self.state.used_today:
            return False
        if self.is_on_leave(p, gun):
            return False
        if self.kesin_engel_var_mi(p, row, gun):
            return False
        return self.is_eligible(p, row, gun)

    # ============================================
    # YERLEŞTİRME
    # ============================================

    def _yaz(self, p: StaffMember, row: DutyRow, gun: int, names: List[str], supervisor: bool = False):
        names.append(p.name)
        self.state.used_today.add(p.id)
        if is_night_code(row.shift_code):
            self.state.night_workers.setdefault(gun, set()).add(p.id)
        if supervisor:
            self.state.supervisor_usage[p.id] = self.state.supervisor_usage.get(p.id, 0) + 1

    def _pinleri_yaz(self, row: DutyRow, gun: int, need: int, names: List[str], supervisor: bool = False):
        for pid in self.pins.get(gun, {}).get(row.id, []):
            if len(names) >= need:
                break
            p = self.by_id.get(pid)
            if p is None or p.id in self.state.used_today:
                continue
            # zorunlu pin yalnızca izin ve alan/vardiya kontrolünü atlar
            if self.kesin_engel_var_mi(p, row, gun):
                continue
            if not self.force_pins and not self.kisi_uygun_mu(p, row, gun):
                continue
            self._yaz(p, row, gun, names, supervisor)

    def _dene(self, p: Optional[StaffMember], row: DutyRow, gun: int, names: List[str]) -> bool:
        if p is None or not self.kisi_uygun_mu(p, row, gun):
            return False
        self._yaz(p, row, gun, names, supervisor=True)
        return True

    def supervisor_need(self, row: DutyRow, gun: int) -> int:
        if self.policy.weekday_only and is_weekend(self.yil, self.month0, gun):
            return 0
        need = self.need[gun].get(row.id, 0)
        if gun in self.policy.escalation_days:
            need = max(need, 1 + self.policy.min_assistants_on_escalation)
        return need

    def assign_supervisor_row(self, row: DutyRow, gun: int, issues: List[Issue]) -> List[str]:
        """
        Sıra: pin > birincil sorumlu (kapalı gün değilse) > yardımcılar >
        yedek havuz (en az kullanılan önce, eşitlikte tohumlu rastgele)
        """
        need = self.supervisor_need(row, gun)
        names: List[str] = []
        if need <= 0:
            return names

        self._pinleri_yaz(row, gun, need, names, supervisor=True)

        if len(names) < need and self.policy.primary_id and gun not in self.policy.blackout_days:
            self._dene(self.by_id.get(self.policy.primary_id), row, gun, names)

        for aid in self.policy.assistant_ids:
            if len(names) >= need:
                break
            self._dene(self.by_id.get(aid), row, gun, names)

        if len(names) < need:
            adaylar = [p for p in sorted(self.supervisor_pool, key=lambda x: x.id)
                       if self.kisi_uygun_mu(p, row, gun)]
            kura = {p.id: self.state.rng.random() for p in adaylar}
            adaylar.sort(key=lambda p: (self.state.supervisor_usage.get(p.id, 0), kura[p.id]))
            for p in adaylar:
                if len(names) >= need:
                    break
                self._dene(p, row, gun, names)

        if len(names) < need:
            issues.append(Issue(day=gun, row_id=row.id, label=row.label, required=need,
                                assigned=len(names), reason=NO_SUPERVISOR_REASON))
        return names

    def assign_row(self, row: DutyRow, gun: int, issues: List[Issue]) -> List[str]:
        need = self.need[gun].get(row.id, 0)
        names: List[str] = []
        if need <= 0:
            return names

        self._pinleri_yaz(row, gun, need, names)

        havuz = [p for p in self.staff if self.kisi_uygun_mu(p, row, gun)]
        while len(names) < need and havuz:
            self._yaz(self.state.rng.draw(havuz), row, gun, names)

        if len(names) < need:
            issues.append(Issue(day=gun, row_id=row.id, label=row.label, required=need,
                                assigned=len(names)))
        return names

    def dagit(self) -> RosterResult:
        result = RosterResult()
        supervisor_rows = [r for r in self.rows if is_supervisor_label(r.label)]
        diger_rows = [r for r in self.rows if not is_supervisor_label(r.label)]

        for gun in range(1, self.days_in_month + 1):
            self.state.start_day()
            gunluk: Dict[str, List[str]] = {}
            for row in supervisor_rows:
                gunluk[row.id] = self.assign_supervisor_row(row, gun, result.issues)
            for row in diger_rows:
                gunluk[row.id] = self.assign_row(row, gun, result.issues)
            result.named_assignments[gun] = gunluk

        for issue in result.issues:
            logger.debug("Eksik atama gün=%s satır=%s %s/%s", issue.day, issue.label,
                         issue.assigned, issue.required)
        logger.info("Çizelge üretildi ym=%s-%02d gün=%d satır=%d personel=%d sorun=%d",
                    self.yil, self.month0 + 1, self.days_in_month, len(self.rows),
                    len(self.staff), len(result.issues))
        return result


def build_roster_engine(yil: int, month0: int, rows: Iterable, overrides: Optional[Dict] = None, *,
                        staff_records: Iterable = (), leave_sources: Iterable = (),
                        leave_suppress: Optional[Dict] = None, pins_tree: Optional[Dict] = None,
                        supervisor_config: Optional[Dict] = None,
                        supervisor_pool: Optional[Iterable] = None, role: str = "Nurse",
                        leave_policy: str = "hard", force_pins: bool = True,
                        require_eligibility: bool = True,
                        rng: Optional[Mulberry32] = None) -> RosterEngine:
    """Tüm indeksleri bu çağrı için sıfırdan kurar; girdiler salt okunur kabul edilir"""
    validate_year_month(yil, month0)

    staff = build_staff_index(staff_records)
    resolver = NameResolver(staff)
    leaves = build_leave_index(leave_sources, staff, yil, month0,
                               suppress=leave_suppress, resolver=resolver)
    pins = resolve_pins(pins_tree, role, yil, month0, resolver)
    policy = resolve_policy(supervisor_config, resolver, pool=supervisor_pool)

    return RosterEngine(
        yil=yil, month0=month0, rows=parse_duty_rows(rows), staff=staff,
        leaves=leaves, pins=pins, policy=policy, overrides=overrides,
        leave_policy=leave_policy, force_pins=force_pins,
        require_eligibility=require_eligibility, rng=rng,
    )


def generate_roster(yil: int, month0: int, rows: Iterable, overrides: Optional[Dict] = None,
                    **kwargs) -> RosterResult:
    """Ham girdilerden aylık çizelge üret; sonuç her zaman eksiksiz döner"""
    return build_roster_engine(yil, month0, rows, overrides, **kwargs).dagit()
