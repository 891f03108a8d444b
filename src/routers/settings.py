"""Cycle settings endpoints (one settings record per user)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from src.dependencies import Store
from src.models.tracking import CycleSettingsRead, CycleSettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=CycleSettingsRead)
async def get_cycle_settings(store: Store) -> Any:
    """Return saved settings, or the defaults when none are saved yet."""
    return await store.settings.get() or CycleSettingsRead()


@router.put("", response_model=CycleSettingsRead)
async def put_cycle_settings(store: Store, body: CycleSettingsUpdate) -> Any:
    return await store.settings.save(body.model_dump(mode="json"))
