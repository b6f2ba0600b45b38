"""Collect and submit customer feedback once an order is ready."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .exceptions import JournalError, RestaurantAPIError
from .journal import JournalWriter
from .lifecycle.models import FeedbackRequest
from .restaurant_api import RestaurantClient
from .ui.terminal_view import TerminalOrderView


class FeedbackCollector:
    """Prompt the customer for one comment and send it to the server."""

    def __init__(
        self,
        *,
        client: RestaurantClient,
        view: TerminalOrderView,
        read_line: Callable[[], str | None],
        logger: logging.Logger,
        journal: JournalWriter | None = None,
    ) -> None:
        self.client = client
        self.view = view
        self._read_line = read_line
        self.logger = logger
        self.journal = journal

    def collect(self, request: FeedbackRequest, comment: str | None = None) -> bool:
        """Submit feedback for `request`; returns True when the server accepted it.

        When `comment` is None the customer is prompted for one line. An
        empty comment skips submission.
        """
        if comment is None:
            self.view.render_feedback_prompt(request.customer)
            comment = self._read_line()
        if comment is None or not comment.strip():
            self.view.render_feedback_result(ok=False, message="Feedback skipped.")
            return False

        try:
            ack = self.client.submit_feedback(request.customer, comment.strip())
        except RestaurantAPIError as exc:
            self.logger.error("Feedback submission failed for order %s: %s", request.order_id, exc)
            self._record(
                "feedback_failed",
                {"order_id": request.order_id, "customer": request.customer, "error": str(exc)},
            )
            self.view.render_feedback_result(ok=False, message="Error submitting feedback.")
            return False

        self._record(
            "feedback_submitted",
            {"order_id": request.order_id, "customer": request.customer, "status": ack.status},
        )
        self.view.render_feedback_result(ok=True, message="Thank you for your feedback!")
        return True

    def _record(self, event_type: str, payload: dict[str, str]) -> None:
        if self.journal is None:
            return
        try:
            self.journal.write_event(event_type, payload=payload)
        except JournalError as exc:
            self.logger.error("Failed to write %s event to journal: %s", event_type, exc)
