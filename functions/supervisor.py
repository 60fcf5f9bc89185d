"""
Servis sorumlusu politikası — ham yapılandırmayı SupervisorPolicy'ye çevirir.
"""

from typing import Dict, Iterable, List, Optional
import re

from models import StaffMember, SupervisorPolicy
from staff_index import NameResolver
from utils import SUPERVISOR_KEYWORDS, _safe_int, arr_from_any, canon_name, iter_day_set

_SUPERVISOR_ROLE_RE = re.compile(r"SORUMLU|SUPERVIS")


def _resolve_refs(refs, resolver: NameResolver) -> List[str]:
    out = []
    for ref in arr_from_any(refs):
        pid = resolver.resolve_id_like(ref)
        if pid and pid not in out:
            out.append(pid)
    return out


def resolve_policy(raw_config: Optional[Dict], resolver: NameResolver,
                   pool: Optional[Iterable] = None) -> SupervisorPolicy:
    """
    Kişi referansları ID veya serbest isim olabilir. Gün kümeleri
    (assistDays, offDays) hem [1, 5] hem {"1": true} biçiminde gelebilir.
    """
    cfg = raw_config if isinstance(raw_config, dict) else {}

    primary_raw = cfg.get("primary", cfg.get("primaryId"))
    primary_id = resolver.resolve_id_like(primary_raw) if primary_raw not in (None, "") else None

    fallback = _resolve_refs(cfg.get("fallbackPool"), resolver)
    if not fallback and pool:
        fallback = _resolve_refs(list(pool), resolver)

    min_assist_raw = cfg.get("ensureAssistCount", cfg.get("minAssistantsOnEscalation", 1))
    min_assist = max(0, _safe_int(min_assist_raw, 1))

    return SupervisorPolicy(
        primary_id=primary_id,
        assistant_ids=tuple(_resolve_refs(cfg.get("assistants"), resolver)),
        fallback_pool_ids=tuple(fallback),
        weekday_only=cfg.get("weekdayOnly") is not False,
        escalation_days=frozenset(iter_day_set(cfg.get("assistDays"))),
        blackout_days=frozenset(iter_day_set(cfg.get("offDays"))),
        min_assistants_on_escalation=min_assist,
    )


def derive_supervisor_candidates(staff: List[StaffMember]) -> List[StaffMember]:
    """Havuz tanımlı değilse rol/alan/vardiya kodundan sorumlu adaylarını türet"""
    out = []
    for p in staff:
        if p.role and _SUPERVISOR_ROLE_RE.search(canon_name(p.role)):
            out.append(p)
            continue
        if any(kw in p.areas or kw in p.allowed_shift_codes for kw in SUPERVISOR_KEYWORDS):
            out.append(p)
    return out
