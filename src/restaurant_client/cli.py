"""Order CLI: show the menu, place an order, track it and collect feedback."""

from __future__ import annotations

import argparse
import logging
import queue
import sys
import uuid
from dataclasses import asdict
from typing import Any

from rich.console import Console

from .config import Settings, load_settings
from .exceptions import (
    ConfigError,
    JournalError,
    OrderSelectionError,
    OrderTrackingError,
    RestaurantAPIError,
)
from .feedback import FeedbackCollector
from .input_reader import LineReader
from .journal import JournalWriter
from .lifecycle.clock import IntervalTickSource
from .lifecycle.controller import OrderLifecycleController
from .lifecycle.models import FeedbackRequest, Order, RenderInstruction
from .log_setup import setup_logger
from .models import OrderConfirmation
from .restaurant_api import RestaurantClient
from .selection import parse_dish_selection
from .ui.terminal_view import TerminalOrderView

_CANCEL_COMMANDS = {"c", "cancel"}
_INPUT_POLL_SECONDS = 0.1


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Order from the restaurant server and track the order until it is ready.",
    )
    parser.add_argument("--customer", type=str, default=None, help="Customer name for the order.")
    parser.add_argument(
        "--dishes",
        type=str,
        default=None,
        help="Comma-separated dish numbers from the menu, e.g. '1,3'.",
    )
    parser.add_argument(
        "--feedback",
        type=str,
        default=None,
        help="Feedback comment to submit once the order is ready (skips the prompt).",
    )
    parser.add_argument(
        "--tick-interval-seconds",
        type=float,
        default=None,
        help="Override TICK_INTERVAL_SECONDS for the countdown clock.",
    )
    return parser.parse_args()


class _SessionJournal:
    """Journal facade that never lets a write failure interrupt an order."""

    def __init__(
        self,
        journal: JournalWriter | None,
        logger: logging.Logger,
        session_id: str,
    ) -> None:
        self.journal = journal
        self.logger = logger
        self.session_id = session_id

    def write(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.journal is None:
            return
        try:
            self.journal.write_event(
                event_type,
                payload=payload,
                metadata={"session_id": self.session_id},
            )
        except JournalError:
            self.logger.error("Failed to write %s event to journal.", event_type)


def _prompt(console: Console, reader: LineReader, label: str) -> str:
    console.print(label, end="")
    line = reader.read_line()
    return line.strip() if line else ""


def _ensure_ticking(
    controller: OrderLifecycleController,
    tick_source: IntervalTickSource,
) -> None:
    if controller.is_terminal or tick_source.running:
        return
    state = controller.state
    raise OrderTrackingError(
        "Order countdown stopped unexpectedly in phase "
        f"{state.phase if state else 'unknown'}."
    )


def _track_order(
    *,
    order: Order,
    settings: Settings,
    args: argparse.Namespace,
    view: TerminalOrderView,
    reader: LineReader,
    journal: _SessionJournal,
    logger: logging.Logger,
) -> FeedbackRequest | None:
    """Run the countdown until the order is ready or cancelled."""
    feedback_requests: list[FeedbackRequest] = []

    def _render(instruction: RenderInstruction) -> None:
        view.render(instruction)
        journal.write(
            "order_render",
            {"order_id": order.order_id, "instruction": asdict(instruction)},
        )

    interval = args.tick_interval_seconds or settings.tick_interval_seconds
    tick_source = IntervalTickSource(interval, logger=logger)
    with OrderLifecycleController(
        tick_source=tick_source,
        on_render=_render,
        on_feedback=feedback_requests.append,
        logger=logger,
    ) as controller:
        controller.start(order)
        while not controller.is_terminal:
            if reader.eof:
                while not controller.wait(_INPUT_POLL_SECONDS):
                    _ensure_ticking(controller, tick_source)
                break
            try:
                line = reader.read_line(timeout=_INPUT_POLL_SECONDS)
            except queue.Empty:
                _ensure_ticking(controller, tick_source)
                continue
            if line is None or line.strip().lower() not in _CANCEL_COMMANDS:
                continue
            if controller.cancel():
                continue
            state = controller.state
            if state is not None and state.phase == "cancel_window_closed":
                view.render_error("The cancellation window has closed.")

    state = controller.state
    journal.write(
        "order_terminal",
        {
            "order_id": order.order_id,
            "phase": state.phase if state else None,
            "elapsed_units": state.elapsed if state else None,
            "phase_history": list(controller.phase_history),
        },
    )
    return feedback_requests[0] if feedback_requests else None


def _place_order(
    *,
    client: RestaurantClient,
    console: Console,
    view: TerminalOrderView,
    reader: LineReader,
    args: argparse.Namespace,
    journal: _SessionJournal,
) -> OrderConfirmation:
    menu = client.fetch_menu()
    journal.write("menu_fetched", {"menu_items": len(menu)})
    view.render_menu(menu)

    customer = args.customer or _prompt(console, reader, "Your name: ")
    raw_selection = args.dishes or _prompt(console, reader, "Dish numbers (comma-separated): ")
    dish_ids = parse_dish_selection(raw_selection, menu)

    console.print("Placing order...")
    confirmation = client.submit_order(customer, dish_ids)
    journal.write("order_confirmed", confirmation.model_dump())
    view.render_confirmation(confirmation)
    return confirmation


def main() -> int:
    """Run the interactive order workflow."""
    args = parse_args()
    session_id = uuid.uuid4().hex[:12]
    logger = setup_logger(session_id=session_id)
    console = Console()
    view = TerminalOrderView(console=console)

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    writer: JournalWriter | None = None
    if settings.journal_enabled:
        try:
            writer = JournalWriter(journal_dir=settings.journal_dir, session_id=session_id)
        except JournalError as exc:
            logger.error("Failed to initialize journal: %s", exc)
    journal = _SessionJournal(writer, logger, session_id)
    journal.write("startup", settings.safe_summary())

    reader = LineReader()
    exit_code = 0
    try:
        with RestaurantClient(settings=settings, logger=logger) as client:
            try:
                confirmation = _place_order(
                    client=client,
                    console=console,
                    view=view,
                    reader=reader,
                    args=args,
                    journal=journal,
                )
            except OrderSelectionError as exc:
                view.render_error(str(exc))
                exit_code = 3
                return exit_code

            order = Order.from_confirmation(
                confirmation,
                compression_factor=settings.demo_compression_factor,
            )
            feedback_request = _track_order(
                order=order,
                settings=settings,
                args=args,
                view=view,
                reader=reader,
                journal=journal,
                logger=logger,
            )
            if feedback_request is not None:
                collector = FeedbackCollector(
                    client=client,
                    view=view,
                    read_line=reader.read_line,
                    logger=logger,
                    journal=writer,
                )
                collector.collect(feedback_request, comment=args.feedback)
    except RestaurantAPIError as exc:
        exit_code = 4
        logger.error("Run failed: %s", exc)
        view.render_error(str(exc))
        journal.write("run_failure", {"error": str(exc)})
    except OrderTrackingError as exc:
        exit_code = 99
        logger.error("Order tracking failed: %s", exc)
        view.render_error(str(exc))
        journal.write("run_failure", {"error": str(exc), "type": type(exc).__name__})
    except Exception as exc:  # pragma: no cover
        exit_code = 99
        logger.exception("Unexpected failure: %s", exc)
        journal.write("run_failure_unhandled", {"error": str(exc), "type": type(exc).__name__})
    finally:
        journal.write("shutdown", {"exit_code": exit_code})

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
