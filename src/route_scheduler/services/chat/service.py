"""Chat-driven schedule editing."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Callable, Sequence

from ...config import settings
from ...errors import ScheduleValidationError
from ...schemas.chat import ChatRequest, ChatResponse, ConversationMessage
from ...schemas.jobs import Job
from ..llm.client import ChatCompletionService, get_chat_client
from ..routing.service import parse_calendar_date
from ..routing.timeline import parse_timestamp
from .prompts import build_system_prompt
from .task_parser import build_task, extract_task_payload, strip_task_payload

logger = logging.getLogger(__name__)

ASSISTANT_AUTHOR_ID = "trav-chat-service"


def _history_messages(history: Sequence[ConversationMessage]) -> list[dict]:
    messages = []
    for entry in history:
        author_id = entry.author.id if entry.author else None
        role = "assistant" if author_id == ASSISTANT_AUTHOR_ID else "user"
        messages.append({"role": role, "content": entry.text})
    return messages


def _schedule_date(payload: ChatRequest, today: Callable[[], date]) -> date:
    for job in payload.schedule:
        if job.start_date:
            try:
                return parse_timestamp(job.start_date).date()
            except ValueError:
                logger.warning("Ignoring unreadable startDate %r on job %s", job.start_date, job.id)
            break
    if payload.schedule_date:
        return parse_calendar_date(payload.schedule_date, "scheduleDate")
    return today()


def _sort_key(job: Job) -> datetime:
    if not job.start_date:
        return datetime.max
    try:
        return parse_timestamp(job.start_date)
    except ValueError:
        return datetime.max


def handle_chat(
    payload: ChatRequest,
    *,
    chat_client: ChatCompletionService | None = None,
    today: Callable[[], date] = date.today,
) -> ChatResponse:
    if not payload.message:
        raise ScheduleValidationError("Message is required")

    schedule_date = _schedule_date(payload, today)
    chat_client = chat_client or get_chat_client()
    messages = [
        {"role": "system", "content": build_system_prompt(payload.schedule)},
        *_history_messages(payload.conversation_history),
        {"role": "user", "content": payload.message},
    ]
    reply = chat_client.complete(
        messages,
        max_tokens=settings.chat_max_tokens,
        temperature=settings.chat_temperature,
    )
    logger.info("Assistant reply: %s", reply[:200])

    schedule = list(payload.schedule)
    added_task: Job | None = None
    try:
        task_payload = extract_task_payload(reply)
        if task_payload is not None:
            added_task = build_task(task_payload, schedule, schedule_date)
    except (json.JSONDecodeError, ValueError) as exc:
        logger.warning("Could not parse ADD_TASK from assistant reply: %s", exc)
        added_task = None

    if added_task is not None:
        schedule.append(added_task)
        schedule.sort(key=_sort_key)
        logger.info("Added task %s (%s) to schedule", added_task.id, added_task.title)

    return ChatResponse(
        response=strip_task_payload(reply),
        schedule=schedule,
        task_added=added_task is not None,
        added_task=added_task,
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    )
