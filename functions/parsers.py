"""
Request verisi parse fonksiyonları — ham JSON'u motor girdilerine çevirir.
"""

from typing import Dict, Iterable, List, Optional

from models import DutyRow
from utils import _safe_int, normalize_id, validate_year_month


DEFAULT_ROLE = "Nurse"
DEFAULT_LEAVE_POLICY = "hard"


# ============================================
# GÖREV SATIRLARI
# ============================================

def _parse_pattern(raw) -> Optional[tuple]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 7:
        return None
    return tuple(max(0, _safe_int(x, 0)) for x in raw)


def parse_duty_row(raw, idx: int = 0) -> Optional[DutyRow]:
    if isinstance(raw, DutyRow):
        return raw
    if not isinstance(raw, dict):
        return None
    row_id = normalize_id(raw.get("id")) or f"row-{idx}"
    label = str(raw.get("label") or raw.get("ad") or "").strip()
    return DutyRow(
        id=row_id,
        label=label,
        shift_code=str(raw.get("shiftCode") or raw.get("vardiya") or "").strip(),
        default_count=max(0, _safe_int(raw.get("defaultCount", 0), 0)),
        pattern=_parse_pattern(raw.get("pattern")),
        weekend_off=bool(raw.get("weekendOff", False)),
    )


def parse_duty_rows(raw_rows: Optional[Iterable]) -> List[DutyRow]:
    """Satırları parse et; aynı ID'li ikinci satır atlanır"""
    rows = []
    seen = set()
    for idx, raw in enumerate(raw_rows or []):
        row = parse_duty_row(raw, idx)
        if row is None or row.id in seen:
            continue
        seen.add(row.id)
        rows.append(row)
    return rows


def parse_overrides(raw) -> Dict[str, Dict[int, int]]:
    """{satırId: {gün: sayı}}, gün anahtarları int'e çevrilir"""
    out: Dict[str, Dict[int, int]] = {}
    if not isinstance(raw, dict):
        return out
    for row_id, by_day in raw.items():
        if not isinstance(by_day, dict):
            continue
        for day_key, value in by_day.items():
            gun = _safe_int(day_key, None)
            count = _safe_int(value, None)
            if gun is None or count is None:
                continue
            out.setdefault(str(row_id), {})[gun] = count
    return out


# ============================================
# ÇİZELGE İSTEĞİ
# ============================================

def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "evet", "yes")
    return bool(value)


def parse_year_month0(data: Dict) -> tuple:
    """'yil' + 'ay' (1-12) veya 'month0' (0-11); geçersiz değer ValueError"""
    yil = int(data.get("yil", data.get("year", 2025)))
    if data.get("month0") is not None:
        month0 = int(data["month0"])
    else:
        month0 = int(data.get("ay", data.get("month", 1))) - 1
    validate_year_month(yil, month0)
    return yil, month0


def parse_leave_sources(data: Dict) -> List:
    """'leaveSources': kaynak listesi, 'leaves': tek bir kaynak (herhangi bir şekil)"""
    sources = []
    if isinstance(data.get("leaveSources"), list):
        sources.extend(data["leaveSources"])
    single = data.get("leaves", data.get("izinler"))
    if single is not None:
        sources.append(single)
    return sources


def parse_roster_request(data: Dict) -> Dict:
    """HTTP gövdesini generate_roster anahtar argümanlarına çevir"""
    yil, month0 = parse_year_month0(data)
    leave_policy = str(data.get("leavePolicy") or DEFAULT_LEAVE_POLICY).strip().lower()

    return {
        "yil": yil,
        "month0": month0,
        "rows": parse_duty_rows(data.get("rows", data.get("gorevler", []))),
        "overrides": parse_overrides(data.get("overrides")),
        "staff_records": data.get("personeller", data.get("staff", [])) or [],
        "leave_sources": parse_leave_sources(data),
        "leave_suppress": data.get("leaveSuppress"),
        "pins_tree": data.get("pins"),
        "supervisor_config": data.get("supervisorConfig"),
        "supervisor_pool": data.get("supervisorPool"),
        "role": str(data.get("rol", data.get("role", DEFAULT_ROLE)) or DEFAULT_ROLE),
        "leave_policy": leave_policy,
        "force_pins": _as_bool(data.get("forcePins"), True),
        "require_eligibility": _as_bool(data.get("requireEligibility"), True),
    }
