"""
Manuel sabitlemeler (pin): rol -> "YYYY-MM" -> gün -> satırId -> [personelId]
"""

import copy
from typing import Dict, List, Optional

from staff_index import NameResolver
from utils import _safe_int, normalize_id, ym_key


def resolve_pins(tree: Optional[Dict], role: str, yil: int, month0: int,
                 resolver: NameResolver) -> Dict[int, Dict[str, List[str]]]:
    """Ay için pin haritasını çıkar; tanınmayan personel referansları yok sayılır"""
    if not isinstance(tree, dict):
        return {}
    by_ym = tree.get(role)
    by_day = by_ym.get(ym_key(yil, month0)) if isinstance(by_ym, dict) else None
    if not isinstance(by_day, dict):
        return {}

    pins = {}
    for day_key, by_row in by_day.items():
        gun = _safe_int(day_key, None)
        if gun is None or gun < 1 or not isinstance(by_row, dict):
            continue
        for row_id, refs in by_row.items():
            if not isinstance(refs, (list, tuple)):
                refs = [refs]
            ids = []
            for ref in refs:
                pid = resolver.resolve(ref)
                if pid is not None and pid not in ids:
                    ids.append(pid)
            if ids:
                pins.setdefault(gun, {})[str(row_id)] = ids
    return pins


def set_roster_pin(tree: Optional[Dict], role: str, yil: int, month0: int,
                   row_id: str, gun: int, person_id) -> Dict:
    """Pin ekle; güncellenmiş bir kopya döner"""
    out = copy.deepcopy(tree) if isinstance(tree, dict) else {}
    pid = normalize_id(person_id)
    if pid is None:
        return out
    slot = (out.setdefault(role, {})
               .setdefault(ym_key(yil, month0), {})
               .setdefault(str(gun), {})
               .setdefault(str(row_id), []))
    if pid not in [normalize_id(x) for x in slot]:
        slot.append(pid)
    return out


def clear_roster_pin(tree: Optional[Dict], role: str, yil: int, month0: int,
                     row_id: str, gun: int, person_id=None) -> Dict:
    """Pin kaldır; person_id verilmezse hücredeki tüm pinler silinir"""
    out = copy.deepcopy(tree) if isinstance(tree, dict) else {}
    by_day = out.get(role, {}).get(ym_key(yil, month0), {})
    by_row = by_day.get(str(gun))
    if by_row is None:
        by_row = by_day.get(gun)
    if not isinstance(by_row, dict) or str(row_id) not in by_row:
        return out
    if person_id is None:
        by_row[str(row_id)] = []
    else:
        pid = normalize_id(person_id)
        by_row[str(row_id)] = [x for x in by_row[str(row_id)] if normalize_id(x) != pid]
    return out
