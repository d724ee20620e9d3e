"""Retrying JSON requests shared by the external service clients."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..errors import ExternalServiceError

logger = logging.getLogger(__name__)


def request_with_retries(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    service: str,
    max_retries: int,
    backoff_seconds: float,
    **kwargs: Any,
) -> Any:
    """Send a request and return its decoded JSON body.

    HTTP errors and unreadable bodies back off linearly, timeouts
    exponentially. Once ``max_retries`` is used up the failure is raised as
    ``ExternalServiceError("<service> request failed")`` (or ``timed out``).
    """
    attempt = 0
    while True:
        try:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            attempt += 1
            if attempt > max_retries:
                logger.error("%s failed: %s %s", service, exc.response.status_code, exc.response.text[:200])
                raise ExternalServiceError(
                    f"{service} request failed",
                    f"HTTP {exc.response.status_code}: {exc.response.text[:200]}",
                ) from exc
            time.sleep(backoff_seconds * attempt)
        except httpx.TimeoutException as exc:
            attempt += 1
            if attempt > max_retries:
                logger.warning("%s timed out after %d attempt(s)", service, attempt)
                raise ExternalServiceError(f"{service} request timed out", str(exc)) from exc
            time.sleep(backoff_seconds * (2 ** (attempt - 1)))
        except (httpx.HTTPError, ValueError) as exc:
            attempt += 1
            if attempt > max_retries:
                raise ExternalServiceError(f"{service} request failed", str(exc)) from exc
            time.sleep(backoff_seconds * attempt)
