"""
Excel export fonksiyonu — RosterResult'ı çalışma kitabına döker.
"""

from collections import Counter
from datetime import date
from typing import List
import io

import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from models import DutyRow, RosterResult
from utils import get_days_in_month, gun_adi, is_weekend


TR_GUNLER = {
    "Pazar": "Paz", "Cumartesi": "Cmt", "Cuma": "Cum",
    "Persembe": "Prş", "Pazartesi": "Pzt", "Sali": "Sal", "Carsamba": "Çar"
}


def create_excel(yil: int, month0: int, rows: List[DutyRow], result: RosterResult):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Nöbet Listesi"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    weekend_fill = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")
    issue_fill = PatternFill(start_color="F8CBAD", end_color="F8CBAD", fill_type="solid")
    center = Alignment(horizontal='center', vertical='center')
    border = Border(
        left=Side(style='thin'), right=Side(style='thin'),
        top=Side(style='thin'), bottom=Side(style='thin')
    )

    headers = ["Tarih", "Gün"]
    for r in rows:
        headers.append(f"{r.label} ({r.shift_code})" if r.shift_code else r.label)
    ws.append(headers)

    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center
        cell.border = border

    eksik_hucreler = {(i.day, i.row_id) for i in result.issues}

    for gun in range(1, get_days_in_month(yil, month0 + 1) + 1):
        dt = date(yil, month0 + 1, gun)
        row_data = [dt.strftime("%d.%m.%Y"), TR_GUNLER[gun_adi(yil, month0, gun)]]
        atamalar = result.named_assignments.get(gun, {})
        for r in rows:
            names = atamalar.get(r.id, [])
            row_data.append(", ".join(names) if names else "-")
        ws.append(row_data)

        if is_weekend(yil, month0, gun):
            for cell in ws[ws.max_row]:
                cell.fill = weekend_fill
        for col_idx, r in enumerate(rows, start=3):
            if (gun, r.id) in eksik_hucreler:
                ws.cell(row=ws.max_row, column=col_idx).fill = issue_fill

    # Sorunlar sayfası
    ws_issue = wb.create_sheet("Sorunlar")
    ws_issue.append(["Gün", "Görev", "Gereken", "Atanan", "Açıklama"])
    for i in result.issues:
        ws_issue.append([i.day, i.label, i.required, i.assigned, i.reason or "yetersiz aday"])

    # İstatistik sayfası
    ws_stat = wb.create_sheet("İstatistik")
    ws_stat.append(["Personel", "Nöbet Sayısı"])
    sayac = Counter()
    for satirlar in result.named_assignments.values():
        for names in satirlar.values():
            sayac.update(names)
    for ad, adet in sorted(sayac.items(), key=lambda x: (-x[1], x[0])):
        ws_stat.append([ad, adet])

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output
