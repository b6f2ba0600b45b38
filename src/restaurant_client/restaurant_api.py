"""HTTP adapter for the restaurant server's menu, order and feedback routes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from .config import Settings
from .exceptions import RestaurantAPIError, RestaurantRequestError
from .models import (
    FeedbackAck,
    FeedbackSubmission,
    MenuItem,
    OrderConfirmation,
    OrderRequest,
)


class RestaurantClient:
    """Thin restaurant API adapter with retries and typed responses."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep_fn: Callable[[float], None] | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.max_retries = settings.restaurant_max_retries
        self.retry_delay_seconds = settings.restaurant_retry_delay_seconds
        self._sleep = sleep_fn or time.sleep
        self._client = httpx.Client(
            base_url=str(settings.restaurant_api_base_url),
            timeout=settings.restaurant_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": "restaurant-order-client/0.1",
            },
            transport=transport,
        )

    def __enter__(self) -> RestaurantClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close underlying HTTP client."""
        self._client.close()

    def fetch_menu(self) -> list[MenuItem]:
        """Fetch and validate the menu listing."""
        payload = self._request_json("GET", self.settings.restaurant_menu_endpoint)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise RestaurantAPIError(
                f"Menu payload must be a list, got {type(payload).__name__}."
            )
        try:
            return [MenuItem.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise RestaurantAPIError(f"Malformed menu payload: {exc}") from exc

    def submit_order(self, customer: str, dish_ids: list[int]) -> OrderConfirmation:
        """Submit one order and return the server's confirmation."""
        request = OrderRequest(customer=customer, dish_ids=dish_ids)
        payload = self._request_json(
            "POST",
            self.settings.restaurant_order_endpoint,
            json_body=request.model_dump(),
        )
        if not isinstance(payload, dict):
            raise RestaurantAPIError("Order confirmation payload must be an object.")
        try:
            return OrderConfirmation.model_validate(payload)
        except ValidationError as exc:
            raise RestaurantAPIError(f"Malformed order confirmation: {exc}") from exc

    def submit_feedback(self, customer: str, comment: str) -> FeedbackAck:
        """Send one feedback comment for a customer."""
        submission = FeedbackSubmission(customer=customer, comment=comment)
        payload = self._request_json(
            "POST",
            self.settings.restaurant_feedback_endpoint,
            json_body=submission.model_dump(),
        )
        if not isinstance(payload, dict):
            return FeedbackAck()
        try:
            return FeedbackAck.model_validate(payload)
        except ValidationError as exc:
            raise RestaurantAPIError(f"Malformed feedback acknowledgement: {exc}") from exc

    def _request_json(
        self,
        method: str,
        endpoint: str,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | list[Any] | None:
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self._client.request(method=method, url=endpoint, json=json_body)
                response.raise_for_status()
                if not response.content:
                    return None
                try:
                    body: dict[str, Any] | list[Any] = response.json()
                except ValueError as exc:
                    raise RestaurantRequestError(
                        "Response was not valid JSON.",
                        category="unknown",
                        status_code=response.status_code,
                    ) from exc
                return body
            except httpx.HTTPStatusError as exc:
                last_error = exc
                # Never retry client errors (4xx) except 429 rate-limit.
                sc = exc.response.status_code
                if 400 <= sc < 500 and sc != 429:
                    category = "not_found" if sc == 404 else "validation"
                    raise RestaurantRequestError(
                        f"Restaurant API client error {sc}: {_error_detail(exc.response)}",
                        category=category,
                        status_code=sc,
                    ) from exc
                if attempt < self.max_retries:
                    self.logger.warning(
                        "Restaurant request %s %s failed (HTTP %d); retrying",
                        method,
                        endpoint,
                        sc,
                    )
                    self._sleep(self.retry_delay_seconds)
                    continue
                category = "rate_limit" if sc == 429 else "server" if sc >= 500 else "unknown"
                raise RestaurantRequestError(
                    f"Restaurant API request failed with status {sc}: "
                    f"{_error_detail(exc.response)}",
                    category=category,
                    status_code=sc,
                ) from exc
            except httpx.HTTPError as exc:
                last_error = exc
                if attempt < self.max_retries:
                    self.logger.warning(
                        "Restaurant request %s %s failed (%s); retrying",
                        method,
                        endpoint,
                        type(exc).__name__,
                    )
                    self._sleep(self.retry_delay_seconds)
                    continue
                raise RestaurantRequestError(
                    f"Could not reach restaurant server: {exc}",
                    category="network",
                    status_code=None,
                ) from exc

        raise RestaurantRequestError(
            "Restaurant API request failed after retries: "
            f"{last_error if last_error else 'unknown error'}",
            category="unknown",
            status_code=None,
        )


def _error_detail(response: httpx.Response) -> str:
    """Prefer the server's `{"error": ...}` message over the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return response.text[:300]
