"""
Ortak yardımcı fonksiyonlar ve sabitler — proje bağımlılığı yok (yaprak modül).
"""

from datetime import date
from typing import Any, Iterable, List, Optional, Tuple
import calendar
import re
import unicodedata


# ============================================
# SABITLER
# ============================================

NIGHT_SHIFT_CODES = frozenset({"N", "V1", "V2", "SV"})

SUPERVISOR_ROW_KEYWORD = "SERVIS SORUMLUSU"

SUPERVISOR_KEYWORDS = ("SORUMLU", "SERVIS SORUMLUSU", "SUPERVIZOR", "SUPERVISOR", "SV")

LEAVE_POLICIES = ("hard", "soft", "ignore")

NEGATIVE_LEAVE_CELLS = frozenset({"hayır", "hayir", "no", "0", "false"})

# Etiket -> alan anahtar kelimeleri (kanonik). Sıra önemli: ilk eşleşme kazanır.
AREA_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("SERVIS SORUMLUSU", SUPERVISOR_KEYWORDS),
    ("SUPERVIZOR", ("SUPERVIZOR", "SUPERVISOR", "SV")),
    ("EKIP SORUMLUSU", ("EKIP SORUMLUSU", "SORUMLU")),
    ("RESUSITASYON", ("RESUSITASYON",)),
    ("KIRMIZI VE SARI GOREVLENDIRME", ("KIRMIZI", "SARI")),
    ("KIRMIZI", ("KIRMIZI",)),
    ("SARI", ("SARI",)),
    ("COCUK", ("COCUK",)),
    ("YESIL", ("YESIL",)),
    ("ECZANE", ("ECZANE",)),
    ("CERRAHI MUDAHELE", ("CERRAHI MUDAHELE", "CERRAHI")),
    ("CERRAHI", ("CERRAHI",)),
    ("ASI", ("ASI",)),
    ("TRIAJ", ("TRIAJ",)),
)

_YM_RE = re.compile(r"^\d{4}-\d{2}$")
_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DAY_TOKEN_RE = re.compile(r"\d{1,2}")
_SPLIT_RE = re.compile(r"[;,|]")


# ============================================
# İSİM KANONİKLEŞTİRME
# ============================================

def strip_diacritics(text: str) -> str:
    """Aksanları kaldır (Ş->S, İ->I, ı->i ...)"""
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("ı", "i").replace("ß", "ss")


def canon_name(value) -> str:
    """Kanonik isim: büyük harf, aksansız, tek boşluklu"""
    if value is None:
        return ""
    text = strip_diacritics(str(value).strip().upper())
    return " ".join(text.split())


def name_tokens(value) -> List[str]:
    return [t for t in canon_name(value).split(" ") if t]


def area_keywords(label) -> Tuple[str, ...]:
    """Satır etiketinden uygunluk anahtar kelimelerini türet"""
    s = canon_name(label)
    for key, words in AREA_KEYWORDS:
        if key in s:
            return words
    return (s.split(" ")[0],) if s else ()


def is_supervisor_label(label) -> bool:
    return SUPERVISOR_ROW_KEYWORD in canon_name(label)


def is_night_code(shift_code) -> bool:
    return canon_name(shift_code) in NIGHT_SHIFT_CODES


# ============================================
# HAM VERİ YARDIMCILARI
# ============================================

def _safe_int(value, default=0):
    try:
        return int(value)
    except (ValueError, TypeError):
        try:
            return int(float(value))
        except (ValueError, TypeError, OverflowError):
            return default


def normalize_id(pid) -> Optional[str]:
    """ID'yi karşılaştırılabilir string'e normalize et (12.0 -> '12')"""
    if pid is None or isinstance(pid, bool):
        return None
    if isinstance(pid, float) and pid.is_integer():
        pid = int(pid)
    raw = str(pid).strip()
    return raw or None


def arr_from_any(value) -> List[Any]:
    """Liste, ayraçlı metin veya tekil değeri listeye çevir"""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v for v in value if v is not None and v != ""]
    if isinstance(value, str):
        return [x.strip() for x in _SPLIT_RE.split(value) if x.strip()]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [value]
    return []


def is_leave_cell(value) -> bool:
    """Hücre izin sayılır mı? Boş ve negatif işaretler (hayır/no/0) hariç"""
    if value is None or value is False:
        return False
    s = str(value).strip()
    if not s:
        return False
    return s.lower() not in NEGATIVE_LEAVE_CELLS


def day_from_key(key) -> Optional[int]:
    """'5', 'G05', 'gun_12' gibi anahtarlardan gün numarası çıkar"""
    for tok in _DAY_TOKEN_RE.findall(str(key)):
        n = int(tok)
        if 1 <= n <= 31:
            return n
    return None


def parse_day_key(key) -> Optional[int]:
    """İç içe izin haritalarındaki gün anahtarı: '7', 7 veya 'YYYY-MM-DD'"""
    if isinstance(key, int) and not isinstance(key, bool):
        day = key
    else:
        s = str(key).strip()
        m = _YMD_RE.match(s)
        if m:
            day = int(m.group(3))
        else:
            day = _safe_int(s, None)
    if day is None or not 1 <= day <= 31:
        return None
    return day


def parse_iso_date(value) -> Optional[Tuple[int, int, int]]:
    """'YYYY-MM-DD...' -> (yıl, ay, gün)"""
    m = _YMD_RE.match(str(value or "").strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def is_ym_key(key) -> bool:
    return bool(_YM_RE.match(str(key)))


def iter_day_set(value) -> Iterable[int]:
    """Gün kümesi: [1, 2] veya {"1": true, "2": true}"""
    if isinstance(value, dict):
        raw = value.keys()
    elif isinstance(value, (list, tuple, set, frozenset)):
        raw = value
    else:
        return []
    days = []
    for v in raw:
        d = _safe_int(v, None)
        if d is not None:
            days.append(d)
    return days


# ============================================
# TAKVİM
# ============================================

def ym_key(yil: int, month0: int) -> str:
    return f"{yil}-{month0 + 1:02d}"


def get_days_in_month(yil, ay):
    return calendar.monthrange(yil, ay)[1]


def monday_index(yil: int, month0: int, gun: int) -> int:
    """Pazartesi=0 ... Pazar=6"""
    return date(yil, month0 + 1, gun).weekday()


def is_weekend(yil: int, month0: int, gun: int) -> bool:
    return monday_index(yil, month0, gun) >= 5


def gun_adi(yil: int, month0: int, gun: int) -> str:
    gunler = ["Pazartesi", "Sali", "Carsamba", "Persembe", "Cuma", "Cumartesi", "Pazar"]
    return gunler[monday_index(yil, month0, gun)]


def validate_year_month(yil, month0) -> None:
    """Çağıran sözleşmesi: geçersiz yıl/ay programlama hatasıdır"""
    if isinstance(yil, bool) or not isinstance(yil, int) or not 1 <= yil <= 9999:
        raise ValueError(f"Geçersiz yıl değeri: {yil!r}")
    if isinstance(month0, bool) or not isinstance(month0, int) or not 0 <= month0 <= 11:
        raise ValueError(f"Geçersiz ay değeri (0-11): {month0!r}")
