"""CRUD endpoints for daily cycle logs."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import Store
from src.models.tracking import CycleLogCreate, CycleLogRead, CycleLogUpdate
from src.services.storage import RecordNotFoundError

router = APIRouter(prefix="/logs", tags=["cycle logs"])


@router.get("", response_model=list[CycleLogRead])
async def list_logs(
    store: Store,
    order: str = Query(default="-date", pattern=r"^-?[a-z_]+$"),
    limit: int = Query(default=200, ge=1, le=1000),
) -> Any:
    try:
        return await store.logs.list(limit=limit, order=order)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("", response_model=CycleLogRead, status_code=201)
async def create_log(store: Store, body: CycleLogCreate) -> Any:
    return await store.record_log(body.model_dump(mode="json", exclude_none=True))


@router.get("/{log_id}", response_model=CycleLogRead)
async def get_log(log_id: str, store: Store) -> Any:
    record = await store.logs.get(log_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Log entry not found")
    return record


@router.patch("/{log_id}", response_model=CycleLogRead)
async def update_log(log_id: str, store: Store, body: CycleLogUpdate) -> Any:
    updates = body.model_dump(mode="json", exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        return await store.logs.update(log_id, updates)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Log entry not found")


@router.delete("/{log_id}", status_code=204)
async def delete_log(log_id: str, store: Store) -> None:
    if not await store.logs.delete(log_id):
        raise HTTPException(status_code=404, detail="Log entry not found")
