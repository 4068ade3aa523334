from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from registration_reports.analytics.dashboard import build_dashboard
from registration_reports.analytics.logistics import (
    calculate_daily_arrivals,
    calculate_meal_requirements,
)
from registration_reports.models.registration import AttendeeRecord
from registration_reports.reporting.sheets import (
    ACCOMMODATION_COLUMNS,
    ARRIVAL_SUMMARY_COLUMNS,
    BADGE_MANIFEST_COLUMNS,
    CONTACT_COLUMNS,
    DAILY_ARRIVAL_COLUMNS,
    MEAL_PLAN_COLUMNS,
    MEAL_PLANNING_COLUMNS,
    REGISTRATION_COLUMNS,
    Row,
    SheetData,
    accommodation_rows,
    analytics_sheets,
    arrival_summary_rows,
    badge_manifest_rows,
    contact_rows,
    daily_arrival_rows,
    meal_plan_rows,
    meal_planning_rows,
    registration_rows,
)
from registration_reports.utils.config import EventSettings
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

MASTER_REPORT_LABEL = "GREAT_DAYS_Report"


def _autosize_columns(ws):
    """
    Size each column to its widest cell, header included.
    """
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = max_len + 2


def _freeze_header(ws):
    """
    Freeze the header row.
    """
    ws.freeze_panes = "A2"


def _bold_totals(ws):
    """
    Bold any Total row.
    """
    for r in range(1, ws.max_row + 1):
        if str(ws.cell(row=r, column=1).value).lower() == "total":
            for c in range(1, ws.max_column + 1):
                ws.cell(row=r, column=c).font = Font(bold=True)


def report_filename(label: str, now: Optional[datetime] = None) -> str:
    """<Label>_<yyyy-MM-dd_HHmm>.xlsx"""
    now = now or datetime.now()
    return f"{label}_{now.strftime('%Y-%m-%d_%H%M')}.xlsx"


def write_workbook(sheets: Sequence[SheetData], output_path: Path) -> Path:
    """
    Write one sheet per dataset, in the order given.

    Zero-row datasets become header-only sheets. Writer errors propagate.
    """
    if not sheets:
        raise ValueError("A workbook needs at least one sheet")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet in sheets:
            df = pd.DataFrame(list(sheet.rows), columns=list(sheet.columns) if sheet.columns else None)
            df.to_excel(writer, sheet_name=sheet.name, index=False)

            if sheet.name not in writer.book.sheetnames:
                writer.book.create_sheet(sheet.name)
            ws = writer.book[sheet.name]

            _freeze_header(ws)
            _autosize_columns(ws)
            _bold_totals(ws)

    logger.info("Wrote workbook %s (%d sheets)", output_path, len(sheets))
    return output_path


def export_dataset(
    rows: Sequence[Row],
    label: str,
    sheet_name: str = "Sheet1",
    output_dir: Path = Path("output"),
    columns: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Single-sheet export."""
    path = Path(output_dir) / report_filename(label, now)
    return write_workbook([SheetData(sheet_name, rows, columns)], path)


# ============================================================
# NAMED REPORTS
# ============================================================

def master_report_sheets(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
) -> list[SheetData]:
    """Fixed sheet order; the admin team prints these in this order."""
    settings = settings or EventSettings()
    return [
        SheetData("All Registrations", registration_rows(records, settings.timezone), REGISTRATION_COLUMNS),
        SheetData("Accommodation", accommodation_rows(records), ACCOMMODATION_COLUMNS),
        SheetData("Meal Planning", meal_planning_rows(records), MEAL_PLANNING_COLUMNS),
        SheetData("Daily Arrivals", daily_arrival_rows(records), DAILY_ARRIVAL_COLUMNS),
        SheetData("Contacts", contact_rows(records), CONTACT_COLUMNS),
    ]


def generate_master_report(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    settings: Optional[EventSettings] = None,
    now: Optional[datetime] = None,
) -> Path:
    path = Path(output_dir) / report_filename(MASTER_REPORT_LABEL, now)
    return write_workbook(master_report_sheets(records, settings), path)


def export_analytics_report(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    settings: Optional[EventSettings] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Path:
    summary = build_dashboard(records, settings, today=today)
    path = Path(output_dir) / report_filename("Analytics_Report", now)
    return write_workbook(analytics_sheets(summary), path)


def export_badge_manifest(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    now: Optional[datetime] = None,
) -> Path:
    now = now or datetime.now()
    return export_dataset(
        badge_manifest_rows(records, generated_at=now),
        "Badge_Manifest",
        "Badge Manifest",
        output_dir,
        BADGE_MANIFEST_COLUMNS,
        now,
    )


def export_daily_arrivals(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    now: Optional[datetime] = None,
) -> Path:
    return export_dataset(
        arrival_summary_rows(calculate_daily_arrivals(records)),
        "Daily_Arrivals",
        "Arrivals",
        output_dir,
        ARRIVAL_SUMMARY_COLUMNS,
        now,
    )


def export_meal_plan(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    settings: Optional[EventSettings] = None,
    now: Optional[datetime] = None,
) -> Path:
    return export_dataset(
        meal_plan_rows(calculate_meal_requirements(records, settings)),
        "Meal_Plan",
        "Meals",
        output_dir,
        MEAL_PLAN_COLUMNS,
        now,
    )


def export_accommodation_list(
    records: Sequence[AttendeeRecord],
    output_dir: Path,
    now: Optional[datetime] = None,
) -> Path:
    return export_dataset(
        accommodation_rows(records),
        "Accommodation_List",
        "Accommodation",
        output_dir,
        ACCOMMODATION_COLUMNS,
        now,
    )
