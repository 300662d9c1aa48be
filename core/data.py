from __future__ import annotations

import csv
import io
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from core.filters import DashboardFilters, apply_filters, filter_options, normalize_filters


logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
CSV_SUFFIXES = (".csv",)
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES + CSV_SUFFIXES
CSV_ENCODINGS = ("utf-8-sig", "latin-1")
CSV_DELIMITERS = ",;\t"

Source = Union[bytes, str, Path]


class SpreadsheetError(ValueError):
    """The uploaded file could not be turned into prospect records."""


def _as_buffer(source: Source):
    if isinstance(source, bytes):
        return io.BytesIO(source)
    return source


def _read_bytes(source: Source) -> bytes:
    if isinstance(source, bytes):
        return source
    return Path(source).read_bytes()


def _sniff_separator(text: str) -> str:
    """Pick the delimiter from the header line; pt-BR exports use ";"."""
    lines = text.splitlines()
    if not lines:
        return ","
    try:
        return csv.Sniffer().sniff(lines[0], delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        # single-column sheet
        return ","


def _read_csv(source: Source) -> pd.DataFrame:
    raw = _read_bytes(source)
    last_exc: Optional[Exception] = None
    for encoding in CSV_ENCODINGS:
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
            continue
        return pd.read_csv(io.StringIO(text), sep=_sniff_separator(text), dtype=str)
    raise SpreadsheetError(f"Could not decode CSV file: {last_exc}")


def _read_frame(source: Source, filename: str) -> pd.DataFrame:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SpreadsheetError(f"Unsupported file type '{suffix or filename}'. Use XLSX or CSV.")
    try:
        if suffix in CSV_SUFFIXES:
            return _read_csv(source)
        # first sheet only
        return pd.read_excel(_as_buffer(source), sheet_name=0, dtype=object, engine="openpyxl")
    except SpreadsheetError:
        raise
    except pd.errors.EmptyDataError as exc:
        raise SpreadsheetError("The spreadsheet appears to be empty.") from exc
    except (ValueError, OSError, csv.Error, zipfile.BadZipFile, pd.errors.ParserError) as exc:
        raise SpreadsheetError(f"Could not read {filename}: {exc}") from exc


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """One mapping per row, header -> cell. Blank cells are dropped from the mapping."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    df = df.loc[:, [c for c in df.columns if c and not c.startswith("Unnamed:")]]
    df = df.loc[:, ~df.columns.duplicated()]
    df = df.dropna(how="all")
    records: List[Dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        records.append({k: v for k, v in row.items() if not pd.isna(v)})
    return records


def read_spreadsheet(source: Source, filename: str) -> List[Dict[str, Any]]:
    """Read the first sheet of an XLSX/CSV file into an ordered list of record mappings."""
    df = _read_frame(source, filename)
    records = frame_to_records(df)
    if not records:
        raise SpreadsheetError("The spreadsheet appears to be empty.")
    logger.info("Loaded %d prospect rows from %s", len(records), filename)
    return records


def load_dashboard_data(records: Sequence[Mapping[str, Any]]) -> Dict[str, object]:
    records = list(records)
    return {
        "records": records,
        "row_count": len(records),
        "filter_options": filter_options(records),
    }


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: List[Mapping[str, Any]] = list(data_ctx.get("records", []) or [])
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    return {
        "filters": filt,
        "records": records,
        "filtered_records": apply_filters(records, filt),
    }
