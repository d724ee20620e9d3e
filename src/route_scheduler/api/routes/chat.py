"""Chat endpoint for schedule management."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from ...errors import ExternalServiceError, ScheduleValidationError
from ...schemas.chat import ChatRequest, ChatResponse
from ...services.chat.service import handle_chat

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse, status_code=status.HTTP_200_OK)
def chat(payload: ChatRequest) -> ChatResponse:
    try:
        return handle_chat(payload)
    except ScheduleValidationError:
        raise
    except ExternalServiceError as exc:
        raise ExternalServiceError("Failed to process chat message", exc.details) from exc
    except Exception as exc:
        logger.exception("Chat error: %s", exc)
        raise ExternalServiceError("Failed to process chat message", str(exc)) from exc
