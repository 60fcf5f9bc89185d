"""
Nöbet Çizelgesi — Firebase Cloud Functions giriş noktası.
1 endpoint: cizelge_olustur
"""

from firebase_functions import https_fn
from firebase_admin import initialize_app, storage
from datetime import datetime, timedelta
import json
import logging

from excel_export import create_excel
from greedy_solver import generate_roster
from parsers import parse_roster_request
from utils import ym_key

initialize_app()
logger = logging.getLogger(__name__)


# ============================================
# CORS VE HATA YARDIMCILARI
# ============================================

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type'
}


def _cors_preflight():
    return https_fn.Response("", status=204, headers=CORS_HEADERS)


def _json_response(payload: dict, status: int = 200):
    return https_fn.Response(json.dumps(payload, ensure_ascii=False), status=status,
                             headers={**CORS_HEADERS, 'Content-Type': 'application/json; charset=utf-8'})


def _error_response(e: Exception, context: str = ""):
    logger.exception("Sunucu hatası [%s]", context)
    error_type = type(e).__name__
    if isinstance(e, (ValueError, TypeError)):
        detail = f"Geçersiz veri formatı: {str(e)[:200]}"
        status = 400
    elif isinstance(e, KeyError):
        detail = f"Eksik alan: {str(e)[:200]}"
        status = 400
    else:
        detail = "Beklenmeyen bir hata oluştu. Lütfen tekrar deneyin."
        status = 500
    return _json_response({
        "error": detail,
        "error_type": error_type,
        "context": context,
    }, status=status)


def _upload_excel(kwargs: dict, result) -> str:
    excel_file = create_excel(kwargs["yil"], kwargs["month0"], kwargs["rows"], result)
    bucket = storage.bucket()
    ym = ym_key(kwargs["yil"], kwargs["month0"])
    dosya_adi = f"cizelgeler/{kwargs['role']}_{ym}_{int(datetime.now().timestamp())}.xlsx"
    blob = bucket.blob(dosya_adi)
    blob.upload_from_file(
        excel_file,
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    return blob.generate_signed_url(version="v4", expiration=timedelta(hours=1), method="GET")


# ============================================
# ENDPOINT: cizelge_olustur
# ============================================

@https_fn.on_request(min_instances=0, max_instances=10, timeout_sec=120, memory=512)
def cizelge_olustur(req: https_fn.Request) -> https_fn.Response:
    if req.method == 'OPTIONS':
        return _cors_preflight()

    try:
        data = req.get_json(silent=True)
        if not data:
            return _json_response({"error": "Veri gönderilmedi"}, status=400)

        try:
            kwargs = parse_roster_request(data)
        except (ValueError, TypeError) as ve:
            return _json_response({"error": f"Geçersiz parametre değeri: {ve}", "error_type": "ValueError"},
                                  status=400)

        result = generate_roster(**kwargs)

        payload = {
            "basari": True,
            "rol": kwargs["role"],
            "ym": ym_key(kwargs["yil"], kwargs["month0"]),
            **result.to_dict(),
        }
        if data.get("excel"):
            payload["excelUrl"] = _upload_excel(kwargs, result)

        return _json_response(payload)

    except Exception as e:
        return _error_response(e, "cizelge_olustur")
