"""
İzin indeksi — farklı kaynak şekillerini tek LeaveIndex'te birleştirir.

Desteklenen şekiller (detect_leave_shape):
  events               [{personId|personName, date | {year, month, day}}]
  grid                 [{name|code|id, "1": "Yİ", "G02": "x", days: {...}}]
  wrapped              {rows: [...]} / {items: [...]}
  nested_ym_first      {"YYYY-MM": {pid: {gün: kayıt}}}
  nested_year_buckets  {pid: {"YYYY": {"M": {gün: kayıt}}}}
  nested_ym_buckets    {pid: {"YYYY-MM": {gün: kayıt}}}
  row_map              {herhangi: {satır}}  -> grid
"""

from typing import Dict, Iterable, List, Optional
import logging

from models import LeaveIndex, StaffMember
from staff_index import NameResolver
from utils import (
    _safe_int, canon_name, day_from_key, is_leave_cell, is_ym_key,
    normalize_id, parse_day_key, parse_iso_date, ym_key,
)

logger = logging.getLogger(__name__)

EVENT_ID_KEYS = ("personId", "id", "pid")
EVENT_NAME_KEYS = ("personName", "name", "fullName", "AD SOYAD")
EVENT_CODE_KEYS = ("personCode", "code")
GRID_NAME_KEYS = ("fullName", "name", "AD SOYAD", "personName", "employeeName", "title")
GRID_ID_KEYS = ("id", "pid", "tc", "tcNo")
GRID_DAY_CONTAINERS = ("days", "DAYS", "gunler")
GRID_SKIP_KEYS = frozenset(
    GRID_NAME_KEYS + GRID_ID_KEYS + GRID_DAY_CONTAINERS + ("code", "personCode", "year", "month")
)


def _first(record: Dict, keys) -> Optional[object]:
    for key in keys:
        val = record.get(key)
        if val is not None and val != "":
            return val
    return None


def _record_code(rec) -> object:
    if isinstance(rec, dict):
        return rec.get("code", rec.get("type"))
    return rec


class _Collector:
    """Bir hedef ay için izin günlerini toplar"""

    def __init__(self, index: LeaveIndex, resolver: NameResolver, yil: int, month0: int):
        self.index = index
        self.resolver = resolver
        self.yil = yil
        self.month0 = month0
        self.ym = ym_key(yil, month0)

    def put(self, pid: Optional[str], name_raw, gun: int):
        if not gun:
            return
        if pid:
            self.index.add_for_id(pid, self.ym, gun)
        elif name_raw:
            self.index.add_for_name(canon_name(name_raw), self.ym, gun)

    def put_ref(self, ref, gun: int):
        """Ham referans (ID, isim veya kod) ile kaydet"""
        pid = self.resolver.resolve(ref)
        self.put(pid, ref, gun)

    def in_month(self, yil, ay1) -> bool:
        return yil == self.yil and ay1 == self.month0 + 1


# ============================================
# ŞEKİL TESPİTİ
# ============================================

def _looks_like_event(x) -> bool:
    if not isinstance(x, dict):
        return False
    has_person = any(x.get(k) is not None for k in EVENT_ID_KEYS + EVENT_NAME_KEYS + EVENT_CODE_KEYS)
    has_date = bool(x.get("date")) or all(x.get(k) is not None for k in ("year", "month", "day"))
    return has_person and has_date


def detect_leave_shape(data) -> Optional[str]:
    if isinstance(data, list):
        if any(_looks_like_event(x) for x in data):
            return "events"
        if data and isinstance(data[0], dict):
            return "grid"
        return None
    if not isinstance(data, dict) or not data:
        return None
    if isinstance(data.get("rows"), list) or isinstance(data.get("items"), list):
        return "wrapped"

    first_key = next(iter(data))
    if is_ym_key(first_key):
        return "nested_ym_first"
    sample = data[first_key]
    if not isinstance(sample, dict):
        return None
    if any(str(k).isdigit() and len(str(k)) == 4 for k in sample):
        return "nested_year_buckets"
    if any(is_ym_key(k) for k in sample):
        return "nested_ym_buckets"
    return "row_map"


# ============================================
# ŞEKİL ADAPTÖRLERİ
# ============================================

def collect_events(events: List, col: _Collector):
    """[{personId|personName|personCode, date | year/month/day}]"""
    for x in events:
        if not isinstance(x, dict):
            continue
        date_val = x.get("date")
        if isinstance(date_val, dict):
            ymd = (_safe_int(date_val.get("year"), None), _safe_int(date_val.get("month"), None),
                   _safe_int(date_val.get("day"), None))
        elif date_val:
            ymd = parse_iso_date(date_val)
        else:
            ymd = (_safe_int(x.get("year"), None), _safe_int(x.get("month"), None),
                   _safe_int(x.get("day"), None))
        if not ymd or not col.in_month(ymd[0], ymd[1]) or not ymd[2]:
            continue

        pid = normalize_id(_first(x, EVENT_ID_KEYS))
        if pid:
            col.put(pid, None, ymd[2])
            continue
        ref = _first(x, EVENT_CODE_KEYS) or _first(x, EVENT_NAME_KEYS)
        if ref is not None:
            col.put_ref(ref, ymd[2])


def collect_grid(rows: List, col: _Collector):
    """[{ad|kod|id, <gün anahtarları>: hücre, days: {...}}]"""
    for row in rows:
        if not isinstance(row, dict):
            continue
        pid = normalize_id(_first(row, GRID_ID_KEYS))
        ref = _first(row, ("code", "personCode")) or _first(row, GRID_NAME_KEYS)
        if not pid:
            if ref is None:
                continue
            pid = col.resolver.resolve(ref)

        sources = [row] + [row[k] for k in GRID_DAY_CONTAINERS if isinstance(row.get(k), dict)]
        for obj in sources:
            for key, val in obj.items():
                if obj is row and key in GRID_SKIP_KEYS:
                    continue
                ymd = parse_iso_date(key)
                if ymd:
                    gun = ymd[2] if col.in_month(ymd[0], ymd[1]) else None
                else:
                    gun = day_from_key(key)
                if gun and is_leave_cell(val):
                    col.put(pid, ref, gun)


def _collect_person_days(person_key, days, yil, ay1, col: _Collector):
    if not isinstance(days, dict) or not col.in_month(yil, ay1):
        return
    for d_key, rec in days.items():
        gun = parse_day_key(d_key)
        if gun and is_leave_cell(_record_code(rec)):
            col.put_ref(person_key, gun)


def _split_ym(key):
    parts = str(key).split("-")
    return _safe_int(parts[0], None), _safe_int(parts[1], None) if len(parts) > 1 else None


def collect_nested_ym_first(data: Dict, col: _Collector):
    """{"YYYY-MM": {pid: {gün: kayıt}}}"""
    for ym, by_pid in data.items():
        yil, ay1 = _split_ym(ym)
        if not isinstance(by_pid, dict):
            continue
        for pid, days in by_pid.items():
            _collect_person_days(pid, days, yil, ay1, col)


def collect_nested_year_buckets(data: Dict, col: _Collector):
    """{pid: {"YYYY": {"M": {gün: kayıt}}}}"""
    for pid, by_year in data.items():
        if not isinstance(by_year, dict):
            continue
        for y_key, by_month in by_year.items():
            if not isinstance(by_month, dict):
                continue
            for m_key, days in by_month.items():
                _collect_person_days(pid, days, _safe_int(y_key, None), _safe_int(m_key, None), col)


def collect_nested_ym_buckets(data: Dict, col: _Collector):
    """{pid: {"YYYY-MM": {gün: kayıt}}}; isim anahtarlı depolar da bu şekildedir"""
    for pid, by_ym in data.items():
        if not isinstance(by_ym, dict):
            continue
        for ym, days in by_ym.items():
            yil, ay1 = _split_ym(ym)
            _collect_person_days(pid, days, yil, ay1, col)


def _collect_any(data, col: _Collector):
    shape = detect_leave_shape(data)
    if shape == "events":
        collect_events(data, col)
    elif shape == "grid":
        collect_grid(data, col)
    elif shape == "wrapped":
        inner = data["rows"] if isinstance(data.get("rows"), list) else data["items"]
        _collect_any(inner, col)
    elif shape == "nested_ym_first":
        collect_nested_ym_first(data, col)
    elif shape == "nested_year_buckets":
        collect_nested_year_buckets(data, col)
    elif shape == "nested_ym_buckets":
        collect_nested_ym_buckets(data, col)
    elif shape == "row_map":
        collect_grid([v for v in data.values() if isinstance(v, dict)], col)


# ============================================
# BASTIRMA (suppress) KATMANI
# ============================================

def apply_suppress(index: LeaveIndex, suppress: Optional[Dict], resolver: NameResolver,
                   yil: int, month0: int):
    """
    {"ids": {pid: {ym: {gün: true}}}, "canon": {ad: {ym: {gün: true}}}}
    Kaynak sırasından bağımsız olarak en son uygulanır ve her zaman kazanır.
    """
    if not isinstance(suppress, dict):
        return
    ym = ym_key(yil, month0)

    def _days(by_ym):
        if not isinstance(by_ym, dict):
            return []
        days = by_ym.get(ym)
        if not isinstance(days, dict):
            return []
        return [d for d in (parse_day_key(k) for k, v in days.items() if v) if d]

    ids = suppress.get("ids")
    for pid_raw, by_ym in (ids.items() if isinstance(ids, dict) else []):
        pid = normalize_id(pid_raw)
        person = resolver.person(pid)
        for gun in _days(by_ym):
            index.discard_for_id(pid, ym, gun)
            if person:
                index.discard_for_name(person.name_canonical, ym, gun)

    canons = suppress.get("canon")
    for name_raw, by_ym in (canons.items() if isinstance(canons, dict) else []):
        canon = canon_name(name_raw)
        pid = resolver.resolve_name(name_raw)
        for gun in _days(by_ym):
            index.discard_for_name(canon, ym, gun)
            if pid:
                index.discard_for_id(pid, ym, gun)


# ============================================
# GİRİŞ NOKTASI
# ============================================

def normalize_leaves(sources: Iterable, resolver: NameResolver, yil: int, month0: int,
                     suppress: Optional[Dict] = None) -> LeaveIndex:
    index = LeaveIndex()
    col = _Collector(index, resolver, yil, month0)
    for data in sources or []:
        _collect_any(data, col)
    apply_suppress(index, suppress, resolver, yil, month0)

    logger.info("İzinler birleştirildi ym=%s id=%d isim=%d",
                col.ym, len(index.by_staff_id), len(index.by_canonical_name))
    return index


def build_leave_index(sources: Iterable, staff: List[StaffMember], yil: int, month0: int,
                      suppress: Optional[Dict] = None,
                      resolver: Optional[NameResolver] = None) -> LeaveIndex:
    resolver = resolver or NameResolver(staff)
    return normalize_leaves(sources, resolver, yil, month0, suppress)
