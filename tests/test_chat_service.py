from datetime import date

import pytest

from src.route_scheduler.errors import ScheduleValidationError
from src.route_scheduler.schemas.chat import ChatRequest
from src.route_scheduler.services.chat import task_parser
from src.route_scheduler.services.chat.prompts import describe_schedule
from src.route_scheduler.services.chat.service import handle_chat


class ScriptedChat:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.messages: list[dict] = []
        self.options: dict = {}

    def complete(self, messages, *, max_tokens, temperature):
        self.messages = list(messages)
        self.options = {"max_tokens": max_tokens, "temperature": temperature}
        return self.reply


def _schedule() -> list[dict]:
    return [
        {
            "id": 4,
            "title": "Deck quote",
            "type": "Quote inspection",
            "startDate": "2024-03-01T09:00:00.000Z",
            "endDate": "2024-03-01T10:00:00.000Z",
            "location": {"formattedAddress": "12 King St, Parramatta", "latitude": -33.81, "longitude": 151.0},
            "duration": {"days": 0, "hours": 1, "minutes": 0},
        },
        {
            "id": 7,
            "title": "Bathroom reno",
            "type": "Job on site",
            "startDate": "2024-03-01T15:00:00.000Z",
            "endDate": "2024-03-01T17:00:00.000Z",
            "location": {"formattedAddress": "3 High St, Epping", "latitude": -33.77, "longitude": 151.08},
            "duration": {"days": 0, "hours": 2, "minutes": 0},
        },
    ]


def test_chat_adds_bunnings_task_on_schedule_date():
    reply = (
        'ADD_TASK: {"title": "Buy timber", "location": "Bunnings", "startTime": "2pm", '
        '"duration": "45 minutes", "description": "Decking boards", "type": "Task"}\n'
        "Done! I've added a Bunnings run at 2 PM."
    )
    chat = ScriptedChat(reply)
    payload = ChatRequest(message="Add a Bunnings trip at 2pm for timber", schedule=_schedule())

    response = handle_chat(payload, chat_client=chat)

    assert response.task_added is True
    task = response.added_task
    assert task.id == 8
    assert task.start_date == "2024-03-01T14:00:00.000Z"
    assert task.end_date == "2024-03-01T14:45:00.000Z"
    assert task.duration.minutes == 45
    assert task.location.latitude == pytest.approx(-33.77895597508021)
    assert task.model_dump(by_alias=True)["jobDescription"] == "Decking boards"
    assert [job.id for job in response.schedule] == [4, 8, 7]
    assert response.response == "Done! I've added a Bunnings run at 2 PM."
    assert chat.options == {"max_tokens": 300, "temperature": 0.7}


def test_chat_builds_messages_from_history():
    chat = ScriptedChat("What time works for you?")
    payload = ChatRequest(
        message="At the hardware store",
        conversationHistory=[
            {"author": {"id": "user-1"}, "text": "I need to pick up screws"},
            {"author": {"id": "trav-chat-service"}, "text": "Where should I schedule that?"},
        ],
        schedule=_schedule(),
    )

    response = handle_chat(payload, chat_client=chat)

    assert [message["role"] for message in chat.messages] == ["system", "user", "assistant", "user"]
    assert "9:00 AM-10:00 AM: Deck quote at 12 King St, Parramatta" in chat.messages[0]["content"]
    assert chat.messages[-1]["content"] == "At the hardware store"
    assert response.task_added is False
    assert response.added_task is None
    assert len(response.schedule) == 2


def test_chat_ignores_malformed_add_task():
    chat = ScriptedChat('ADD_TASK: {"title": "Broken", "location": } Added!')
    payload = ChatRequest(message="add it", schedule=_schedule())

    response = handle_chat(payload, chat_client=chat)

    assert response.task_added is False
    assert len(response.schedule) == 2


def test_chat_requires_message():
    with pytest.raises(ScheduleValidationError, match="Message is required"):
        handle_chat(ChatRequest(message=""), chat_client=ScriptedChat("unused"))


def test_chat_uses_today_when_schedule_is_empty():
    chat = ScriptedChat('ADD_TASK: {"title": "Quote", "location": "5 Smith St", "startTime": "10:30 AM", "duration": "1 hour", "type": "Quote inspection"}')
    payload = ChatRequest(message="quote at 10:30", schedule=[])

    response = handle_chat(payload, chat_client=chat, today=lambda: date(2025, 1, 20))

    task = response.added_task
    assert task.id == 1
    assert task.start_date == "2025-01-20T10:30:00.000Z"
    assert task.end_date == "2025-01-20T10:31:00.000Z"
    assert task.location.formatted_address == "5 Smith St"
    assert task.location.latitude is None


def test_describe_schedule_marks_missing_locations():
    schedule = ChatRequest(
        message="x",
        schedule=[{"id": 1, "title": "Lunch", "startDate": "2024-03-01T12:30:00.000Z", "endDate": "2024-03-01T13:15:00.000Z"}],
    ).schedule

    assert describe_schedule(schedule) == "- 12:30 PM-1:15 PM: Lunch at Location TBD"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2pm", (14, 0)),
        ("10:30 AM", (10, 30)),
        ("12:15 am", (0, 15)),
        ("12 PM", (12, 0)),
        ("around midday", (12, 0)),
        ("noon-ish", (12, 0)),
        ("whenever", (12, 0)),
        ("16:45", (16, 45)),
        (None, (12, 0)),
    ],
)
def test_parse_start_time(text, expected):
    assert task_parser.parse_start_time(text) == expected


@pytest.mark.parametrize(("text", "expected"), [("45 minutes", 45), ("90", 90), ("about an hour", 60), (None, 60)])
def test_parse_duration_minutes(text, expected):
    assert task_parser.parse_duration_minutes(text) == expected
