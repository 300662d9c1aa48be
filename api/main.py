from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, File, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import DashboardRequest
from core.data import SpreadsheetError, load_dashboard_data, prepare_context, read_spreadsheet
from core.metrics_channels import compute_channels
from core.metrics_goal import DEFAULTS, compute_goal
from core.metrics_overview import compute_overview
from core.metrics_pipeline import compute_kanban
from core.metrics_search import compute_search
from core.metrics_trend import compute_cumulative_series, compute_trend


app = FastAPI(title="Prospecting Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _context(body: DashboardRequest) -> dict:
    if not body.records:
        raise SpreadsheetError("No prospect records supplied. Upload a spreadsheet first.")
    data_ctx = load_dashboard_data(body.records)
    return prepare_context(body.filters.model_dump(), data_ctx)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    status = 400 if isinstance(exc, SpreadsheetError) else 500
    return JSONResponse(status_code=status, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/upload")
def upload(file: UploadFile = File(...)):
    try:
        payload = file.file.read()
        records = read_spreadsheet(payload, file.filename or "")
        return _json({"filename": file.filename, "row_count": len(records), "records": records})
    except Exception as exc:
        logger.exception("upload failed")
        return _error(exc)


@app.post("/meta/filters")
def meta_filters(body: DashboardRequest):
    try:
        data_ctx = load_dashboard_data(body.records)
        return _json(data_ctx["filter_options"])
    except Exception as exc:
        logger.exception("meta_filters failed")
        return _error(exc)


@app.post("/overview")
def overview(body: DashboardRequest):
    try:
        ctx = _context(body)
        return _json(compute_overview(ctx["filters"], ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/trend")
def trend(body: DashboardRequest):
    try:
        ctx = _context(body)
        return _json(compute_trend(ctx["filters"], ctx))
    except Exception as exc:
        logger.exception("trend failed")
        return _error(exc)


@app.post("/channels")
def channels(body: DashboardRequest):
    try:
        ctx = _context(body)
        return _json(compute_channels(ctx["filters"], ctx))
    except Exception as exc:
        logger.exception("channels failed")
        return _error(exc)


@app.post("/kanban")
def kanban(body: DashboardRequest):
    try:
        ctx = _context(body)
        return _json(compute_kanban(ctx["filters"], ctx))
    except Exception as exc:
        logger.exception("kanban failed")
        return _error(exc)


@app.post("/goal")
def goal(
    body: DashboardRequest,
    goal: int = Query(default=DEFAULTS.goal, ge=0),
    touches_per_cycle: int = Query(default=DEFAULTS.touches_per_cycle, ge=0),
    working_days: int = Query(default=DEFAULTS.working_days, ge=1),
):
    try:
        ctx = _context(body)
        return _json(
            compute_goal(ctx["filters"], ctx, goal=goal, touches_per_cycle=touches_per_cycle, working_days=working_days)
        )
    except Exception as exc:
        logger.exception("goal failed")
        return _error(exc)


@app.post("/search")
def search(body: DashboardRequest, q: str = Query(default=""), limit: int = Query(default=12, ge=1, le=200)):
    try:
        ctx = _context(body)
        return _json(compute_search(ctx, q=q, limit=limit))
    except Exception as exc:
        logger.exception("search failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, body: DashboardRequest):
    try:
        ctx = _context(body)
    except SpreadsheetError as exc:
        return _error(exc)

    filename = f"{page}.csv"
    if page == "trend":
        export_df = pd.DataFrame([asdict(p) for p in compute_cumulative_series(ctx["filtered_records"])])
    elif page == "channels":
        payload = compute_channels(ctx["filters"], ctx)
        volume = pd.DataFrame(payload["volume"]).rename(columns={"count": "volume"})
        efficiency = pd.DataFrame(payload["efficiency"]).rename(columns={"count": "meetings"})
        export_df = volume.merge(efficiency, on="channel", how="left")
    elif page in {"overview", "kanban", "records"}:
        export_df = pd.DataFrame(ctx["filtered_records"])
        filename = "records.csv"
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
