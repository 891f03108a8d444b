"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.predictor import CyclePredictor
from src.services.chat import ChatService
from src.services.storage import Database, UserStore, get_database, open_user_store


@dataclass(frozen=True)
class AuthContext:
    """Caller identity set by the session middleware."""

    user_id: str


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated user from the request state.

    The session middleware sets ``request.state.auth`` before routes run.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_user_store(
    user: CurrentUser, database: Annotated[Database, Depends(get_database)]
) -> UserStore:
    return open_user_store(user.user_id, database)


def get_predictor(config: Annotated[CycleConfig, Depends(get_cycle_config)]) -> CyclePredictor:
    return CyclePredictor(config)


def get_chat_service(settings: AppSettings) -> ChatService:
    return ChatService(settings)


# Annotated shortcuts for route signatures
Store = Annotated[UserStore, Depends(get_user_store)]
Predictor = Annotated[CyclePredictor, Depends(get_predictor)]
Chat = Annotated[ChatService, Depends(get_chat_service)]
