"""Cycle analysis endpoints: prediction, regularity, calendar status, log summary.

Every endpoint reads a fresh snapshot of the user's logs and settings and
runs the pure cycle core over it; nothing is cached between requests.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.cycles.base import CycleSettings, InvalidInputError, LogEntry, as_log_entries
from src.cycles.calendar_status import cycle_status
from src.cycles.config_loader import CycleDefaults
from src.cycles.log_summary import summarize_logs
from src.dependencies import Predictor, Store
from src.models.base import ErrorDetail
from src.models.cycles import (
    CyclePredictionRead,
    CycleStatusRead,
    LogSummaryRead,
    RegularityRead,
)
from src.services.storage import UserStore

router = APIRouter(
    prefix="/cycles",
    tags=["cycles"],
    responses={422: {"model": ErrorDetail}},
)
logger = logging.getLogger("auracycle.cycles.api")

# Upper bound on logs read per analysis
HISTORY_LIMIT = 5000


async def load_snapshot(
    store: UserStore, defaults: CycleDefaults
) -> tuple[list[LogEntry], CycleSettings]:
    """Read logs and settings and convert them to core inputs.

    Raises:
        HTTPException: 422 if a stored record holds an invalid date.
    """
    records = await store.logs.list(limit=HISTORY_LIMIT)
    settings_record = await store.settings.get()
    try:
        logs = as_log_entries(records)
        settings = CycleSettings.from_record(
            settings_record,
            default_cycle_length=defaults.average_cycle_length,
            default_period_length=defaults.average_period_length,
        )
    except InvalidInputError as exc:
        logger.warning("Stored cycle data rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    return logs, settings


@router.get("/prediction", response_model=CyclePredictionRead | None)
async def get_prediction(store: Store, predictor: Predictor) -> Any:
    """Next period forecast, or null when there is not enough history."""
    logs, settings = await load_snapshot(store, predictor.config.defaults)
    prediction = predictor.predict(logs, settings)
    return asdict(prediction) if prediction else None


@router.get("/regularity", response_model=RegularityRead)
async def get_regularity(store: Store, predictor: Predictor) -> Any:
    logs, _ = await load_snapshot(store, predictor.config.defaults)
    verdict = predictor.classify_regularity(logs)
    return asdict(verdict)


@router.get("/status", response_model=CycleStatusRead | None)
async def get_status(
    store: Store,
    predictor: Predictor,
    as_of: date | None = Query(default=None),
) -> Any:
    """Settings-based cycle day and countdown; null without a last period start."""
    _, settings = await load_snapshot(store, predictor.config.defaults)
    status = cycle_status(settings, as_of=as_of)
    return asdict(status) if status else None


@router.get("/summary", response_model=LogSummaryRead)
async def get_summary(store: Store, predictor: Predictor) -> Any:
    logs, _ = await load_snapshot(store, predictor.config.defaults)
    return asdict(summarize_logs(logs))
