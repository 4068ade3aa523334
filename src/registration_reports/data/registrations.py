# src/registration_reports/data/registrations.py
"""
Registration snapshot loading.

Sources:
- the registrations table (any SQLAlchemy URL / engine)
- an export file (.csv, .json, .xlsx)

Bad rows are skipped with a warning; a bad source raises.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from registration_reports.models.registration import AttendeeRecord
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

REGISTRATIONS_SQL = "SELECT * FROM registrations ORDER BY created_at DESC"


def records_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[AttendeeRecord]:
    records = []
    skipped = []
    for idx, row in enumerate(rows):
        try:
            records.append(AttendeeRecord.from_mapping(row))
        except (KeyError, ValueError, TypeError) as e:
            skipped.append((idx, str(e)))

    if skipped:
        logger.warning("Skipped %d invalid registration row(s)", len(skipped))
        for idx, error in skipped:
            logger.warning("  - Row %d: %s", idx, error)

    return records


def records_from_frame(df: pd.DataFrame) -> List[AttendeeRecord]:
    if df is None or df.empty:
        return []
    return records_from_rows(df.to_dict(orient="records"))


def load_registrations_from_db(source: Union[str, Engine]) -> List[AttendeeRecord]:
    """Fetch the full registrations table once."""
    engine = create_engine(source) if isinstance(source, str) else source

    with engine.connect() as conn:
        df = pd.read_sql(text(REGISTRATIONS_SQL), conn)

    logger.info("Loaded %d registrations from database", len(df))
    return records_from_frame(df)


def load_registrations_file(path: Union[str, Path]) -> List[AttendeeRecord]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Registrations file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str)
    elif suffix in (".xlsx", ".xls"):
        df = pd.read_excel(path, dtype=str)
    elif suffix == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in registrations file: {e}")
        if isinstance(data, dict):
            data = data.get("registrations", data.get("data"))
        if not isinstance(data, list):
            raise ValueError("Registrations JSON must be a list or contain a 'registrations' list")
        records = records_from_rows(data)
        logger.info("Loaded %d registrations from %s", len(records), path)
        return records
    else:
        raise ValueError(f"Unsupported registrations file type: {suffix}")

    records = records_from_frame(df)
    logger.info("Loaded %d registrations from %s", len(records), path)
    return records
