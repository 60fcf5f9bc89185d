"""
İhtiyaç matrisi: her satır için günlük gerekli kişi sayısı.
"""

from typing import Dict, List, Optional

from models import DutyRow
from utils import _safe_int, get_days_in_month, is_weekend, monday_index


def _override_for(overrides: Optional[Dict], row_id: str, gun: int):
    if not isinstance(overrides, dict):
        return None
    by_day = overrides.get(row_id)
    if not isinstance(by_day, dict):
        return None
    if gun in by_day:
        return by_day[gun]
    return by_day.get(str(gun))


def row_need(row: DutyRow, overrides: Optional[Dict], yil: int, month0: int, gun: int) -> int:
    """
    Öncelik: gün override'ı > haftalık desen (Pzt..Paz) > varsayılan sayı.
    Hafta sonu kapalı satırlar Cmt/Paz günleri her durumda 0'dır.
    """
    if row.weekend_off and is_weekend(yil, month0, gun):
        return 0
    value = _override_for(overrides, row.id, gun)
    if value is None:
        if row.pattern is not None and len(row.pattern) == 7:
            value = row.pattern[monday_index(yil, month0, gun)]
        else:
            value = row.default_count
    return max(0, _safe_int(value, 0))


def build_need_matrix(rows: List[DutyRow], overrides: Optional[Dict],
                      yil: int, month0: int) -> Dict[int, Dict[str, int]]:
    gun_sayisi = get_days_in_month(yil, month0 + 1)
    return {
        gun: {row.id: row_need(row, overrides, yil, month0, gun) for row in rows}
        for gun in range(1, gun_sayisi + 1)
    }
