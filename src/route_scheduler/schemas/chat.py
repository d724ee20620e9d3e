"""Chat request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .jobs import Job


class ChatAuthor(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None


class ConversationMessage(BaseModel):
    """One message of the client's chat transcript."""

    model_config = ConfigDict(extra="allow")

    author: Optional[ChatAuthor] = None
    text: str = ""


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_history: List[ConversationMessage] = Field(default_factory=list, alias="conversationHistory")
    schedule: List[Job] = Field(default_factory=list)
    schedule_date: Optional[str] = Field(
        default=None,
        alias="scheduleDate",
        description="Date (YYYY-MM-DD) for new tasks when the schedule is empty.",
    )


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    schedule: List[Job]
    task_added: bool = Field(alias="taskAdded")
    added_task: Optional[Job] = Field(default=None, alias="addedTask")
    timestamp: str
