"""Chat assistant: user-data context and the Anthropic Messages relay.

The assistant sees a plain-text summary of the user's settings, recent logs
and the current cycle prediction, prepended to its persona prompt.  The
relay forwards only the most recent messages upstream.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

import anthropic

from src.config import Settings, get_settings
from src.cycles.base import CycleSettings, LogEntry, as_log_entries
from src.cycles.predictor import CyclePrediction

logger = logging.getLogger("auracycle.chat")

CONTEXT_LOG_LIMIT = 20

ASSISTANT_PROMPT = """You are Luna, a friendly and knowledgeable AI menstrual health assistant. \
You provide helpful, empathetic, and evidence-based advice about menstrual health, cycle \
tracking, symptoms, and wellness.

IMPORTANT: You are NOT a doctor. Always recommend consulting a healthcare provider for \
serious concerns. Be warm, supportive, and non-judgmental.

{context}
Provide a helpful, personalized response based on the user's data. Use markdown formatting \
for readability. Keep responses concise but informative."""


class ChatUnavailableError(RuntimeError):
    """Raised when the chat assistant cannot produce a reply.

    Attributes:
        status_code: HTTP status the API layer should answer with.
    """

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def build_context(
    logs: Iterable[LogEntry | Mapping[str, Any]],
    settings: CycleSettings | None = None,
    prediction: CyclePrediction | None = None,
    as_of: date | None = None,
) -> str:
    """Render the user's data as the assistant's context block.

    Args:
        logs:       Log entries; most recent first after sorting.
        settings:   Saved cycle settings, if any.
        prediction: Current prediction from the cycle core, if any.
        as_of:      Reference date for "days ago" (defaults to today).
    """
    today = as_of or date.today()
    entries = sorted(as_log_entries(logs), key=lambda e: e.date, reverse=True)
    lines = ["User's Menstrual Health Data:"]

    if settings is not None:
        lines.append(f"- Average cycle length: {settings.average_cycle_length} days")
        lines.append(f"- Average period length: {settings.average_period_length} days")
        if settings.last_period_start:
            days_since = (today - settings.last_period_start).days
            lines.append(
                f"- Last period started: {settings.last_period_start.isoformat()} "
                f"({days_since} days ago)"
            )
            lines.append(
                f"- Current cycle day: {days_since % settings.average_cycle_length + 1}"
            )

    if prediction is not None:
        lines.append(
            f"- Next period predicted: {prediction.predicted_date.isoformat()} "
            f"(range {prediction.range_start.isoformat()} to {prediction.range_end.isoformat()}, "
            f"{prediction.confidence.value} confidence; {prediction.insight})"
        )

    period_logs = [e for e in entries if e.is_period][:CONTEXT_LOG_LIMIT]
    if period_logs:
        lines.append("")
        lines.append("Recent Period Logs:")
        for e in period_logs:
            line = f"- {e.date.isoformat()}: Flow {e.flow_intensity or 'unspecified'}"
            if e.symptoms:
                line += f", Symptoms: {', '.join(e.symptoms)}"
            lines.append(line)

    symptom_logs = [e for e in entries if e.symptoms][:CONTEXT_LOG_LIMIT]
    if symptom_logs:
        lines.append("")
        lines.append("Recent Symptoms:")
        lines.extend(f"- {e.date.isoformat()}: {', '.join(e.symptoms)}" for e in symptom_logs)

    mood_logs = [e for e in entries if e.moods][:CONTEXT_LOG_LIMIT]
    if mood_logs:
        lines.append("")
        lines.append("Recent Moods:")
        lines.extend(f"- {e.date.isoformat()}: {', '.join(e.moods)}" for e in mood_logs)

    return "\n".join(lines) + "\n"


def build_system_prompt(context: str) -> str:
    return ASSISTANT_PROMPT.format(context=context)


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class ChatService:
    """Relay a conversation to the Anthropic Messages API.

    Usage::

        service = ChatService()
        text = service.reply(
            [{"role": "user", "content": "Why is my cycle late?"}],
            system_prompt=build_system_prompt(context),
        )
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: anthropic.Anthropic | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not self._settings.anthropic_api_key:
                raise ChatUnavailableError("ANTHROPIC_API_KEY is not configured", status_code=503)
            self._client = anthropic.Anthropic(api_key=self._settings.anthropic_api_key)
        return self._client

    def reply(
        self,
        messages: Sequence[Mapping[str, str]],
        system_prompt: str | None = None,
    ) -> str:
        """Send the tail of the conversation and return the reply text.

        Raises:
            ChatUnavailableError: No API key, or the upstream call failed.
        """
        s = self._settings
        history = [
            {"role": m["role"], "content": m["content"]}
            for m in list(messages)[-s.chat_history_limit:]
        ]
        client = self._get_client()
        try:
            response = client.messages.create(
                model=s.chat_model,
                max_tokens=s.chat_max_tokens,
                system=system_prompt or s.chat_default_system_prompt,
                messages=history,
            )
        except anthropic.APIStatusError as exc:
            logger.warning("Chat upstream returned %s: %s", exc.status_code, exc)
            raise ChatUnavailableError(
                f"Anthropic API error: {exc.status_code}", status_code=exc.status_code
            ) from exc
        except anthropic.APIError as exc:
            logger.warning("Chat upstream call failed: %s", exc)
            raise ChatUnavailableError(f"Anthropic API error: {exc}") from exc

        text_blocks = [b.text for b in response.content if getattr(b, "type", None) == "text"]
        return text_blocks[0] if text_blocks else ""
