"""Chat assistant endpoint: relays the conversation to the LLM."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from src.dependencies import Chat, Predictor, Store
from src.models.cycles import ChatRequest, ChatResponse
from src.routers.cycles import load_snapshot
from src.services.chat import ChatUnavailableError, build_context, build_system_prompt

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger("auracycle.chat.api")


@router.post("", response_model=ChatResponse)
async def chat(body: ChatRequest, store: Store, predictor: Predictor, service: Chat) -> Any:
    """Answer the latest message.

    With ``includeContext`` the server builds the assistant prompt from the
    user's logs, settings and current prediction; otherwise the client's
    ``systemPrompt`` (or the default) is used as-is.
    """
    system_prompt = body.system_prompt
    if body.include_context:
        logs, settings = await load_snapshot(store, predictor.config.defaults)
        prediction = predictor.predict(logs, settings)
        system_prompt = build_system_prompt(build_context(logs, settings, prediction))

    messages = [m.model_dump() for m in body.messages]
    try:
        content = await run_in_threadpool(service.reply, messages, system_prompt)
    except ChatUnavailableError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))
    return ChatResponse(content=content)
