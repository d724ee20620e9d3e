import json

import httpx
import pytest

from src.route_scheduler.errors import ExternalServiceError
from src.route_scheduler.services.llm.client import ChatCompletionClient
from src.route_scheduler.services.routing.maps_client import GoogleMapsClient
from src.route_scheduler.services.routing.matrix import TravelMatrix
from src.route_scheduler.services.routing.osrm_client import OSRMClient, format_distance_text, format_duration_text


def _chat_client(handler) -> ChatCompletionClient:
    return ChatCompletionClient(
        api_key="test-key",
        base_url="https://llm.example/v1",
        model="test-model",
        max_retries=0,
        transport=httpx.MockTransport(handler),
    )


def test_chat_client_returns_first_choice_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "Hello"}}]})

    client = _chat_client(handler)
    reply = client.complete([{"role": "user", "content": "Hi"}], max_tokens=300, temperature=0.7)

    assert reply == "Hello"
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["max_tokens"] == 300
    assert seen["body"]["temperature"] == 0.7


def test_chat_client_raises_on_http_error():
    client = _chat_client(lambda request: httpx.Response(503, text="overloaded"))

    with pytest.raises(ExternalServiceError, match="Chat completion request failed"):
        client.complete([{"role": "user", "content": "Hi"}], max_tokens=10, temperature=0.0)


def test_chat_client_raises_on_empty_choices():
    client = _chat_client(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(ExternalServiceError, match="malformed"):
        client.complete([{"role": "user", "content": "Hi"}], max_tokens=10, temperature=0.0)


def test_chat_client_requires_api_key(monkeypatch):
    from src.route_scheduler.config import settings

    monkeypatch.setattr(settings, "openai_api_key", None)

    with pytest.raises(ValueError):
        ChatCompletionClient()


def test_google_client_requests_start_row_plus_destinations():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"status": "OK", "rows": [{"elements": []}]})

    client = GoogleMapsClient(api_key="maps-key", base_url="https://maps.example/api", transport=httpx.MockTransport(handler))
    client.distance_matrix((-33.7, 151.1), [(-33.8, 151.0), (-33.9, 151.2)])

    assert seen["params"]["origins"] == "-33.7,151.1|-33.8,151.0|-33.9,151.2"
    assert seen["params"]["destinations"] == "-33.8,151.0|-33.9,151.2"
    assert seen["params"]["key"] == "maps-key"
    assert seen["params"]["mode"] == "driving"


def test_google_client_rejects_non_ok_status():
    handler = lambda request: httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})
    client = GoogleMapsClient(api_key="maps-key", transport=httpx.MockTransport(handler))

    with pytest.raises(ExternalServiceError) as excinfo:
        client.distance_matrix((-33.7, 151.1), [(-33.8, 151.0)])

    assert "REQUEST_DENIED" in excinfo.value.details


def test_osrm_client_reshapes_table_into_rows():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "durations": [[600.0, 900.0], [0.0, 300.0], [None, 0.0]],
                "distances": [[5000.0, 7500.0], [0.0, 2500.0], [None, 0.0]],
            },
        )

    client = OSRMClient(base_url="http://osrm.local", transport=httpx.MockTransport(handler))
    data = client.distance_matrix((-33.7, 151.1), [(-33.8, 151.0), (-33.9, 151.2)])

    assert seen["path"] == "/table/v1/driving/151.1,-33.7;151.0,-33.8;151.2,-33.9"
    assert seen["params"]["sources"] == "0;1;2"
    assert seen["params"]["destinations"] == "1;2"

    matrix = TravelMatrix.from_response(data)
    assert matrix.lookup(0, 1).duration_seconds == 900.0
    assert matrix.lookup(0, 1).duration_text == "15 mins"
    assert matrix.lookup_between(0, 1).distance_text == "2.5 km"
    assert matrix.lookup(2, 0) is None


def test_duration_and_distance_text():
    assert format_duration_text(3900) == "1 hour 5 mins"
    assert format_duration_text(7200) == "2 hours"
    assert format_duration_text(20) == "1 min"
    assert format_distance_text(850) == "850 m"
    assert format_distance_text(12345) == "12.3 km"


@pytest.mark.parametrize(
    "data",
    [
        None,
        ["not", "rows"],
        {"rows": [{"elements": [{"status": "OK", "duration": {"value": "n/a"}}]}]},
        {"rows": ["bad-row"]},
    ],
)
def test_matrix_rejects_malformed_responses(data):
    with pytest.raises(ExternalServiceError, match="Distance matrix response malformed"):
        TravelMatrix.from_response(data)


def test_retries_until_a_response_succeeds():
    responses = iter([httpx.Response(503, text="busy"), httpx.Response(200, json={"status": "OK", "rows": []})])
    client = GoogleMapsClient(
        api_key="maps-key",
        max_retries=1,
        backoff_seconds=0,
        transport=httpx.MockTransport(lambda request: next(responses)),
    )

    assert client.distance_matrix((-33.7, 151.1), [(-33.8, 151.0)]) == {"status": "OK", "rows": []}


def test_osrm_client_gives_up_after_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502, text="bad gateway")

    client = OSRMClient(base_url="http://osrm.local", max_retries=2, backoff_seconds=0, transport=httpx.MockTransport(handler))

    with pytest.raises(ExternalServiceError, match="Distance matrix request failed") as excinfo:
        client.distance_matrix((-33.7, 151.1), [(-33.8, 151.0)])

    assert len(calls) == 3
    assert excinfo.value.details.startswith("HTTP 502")
