"""Order lifecycle controller: drives one order's countdown to a terminal phase."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from .clock import TickSource
from .models import (
    FeedbackRequest,
    LifecycleState,
    Order,
    Phase,
    RenderInstruction,
    Transition,
)
from .transitions import apply_cancel, apply_tick, start_state

RenderSink = Callable[[RenderInstruction], None]
FeedbackTrigger = Callable[[FeedbackRequest], None]


class OrderLifecycleController:
    """Own the countdown state for one order and serialize ticks with cancels.

    Tick and cancel handling run under one re-entrant lock, so each is
    atomic relative to the other regardless of which thread delivers it.
    The tick source is stopped exactly once, on the ready transition, on
    cancellation, or on `close()`, whichever happens first.
    """

    def __init__(
        self,
        *,
        tick_source: TickSource,
        on_render: RenderSink,
        on_feedback: FeedbackTrigger | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._tick_source = tick_source
        self._on_render = on_render
        self._on_feedback = on_feedback
        self.logger = logger or logging.getLogger("restaurant_client")
        self._lock = threading.RLock()
        self._terminal = threading.Event()
        self._order: Order | None = None
        self._state: LifecycleState | None = None
        self._clock_started = False
        self._clock_released = False
        self._feedback_fired = False
        self._closed = False
        self.phase_history: list[Phase] = []

    def __enter__(self) -> OrderLifecycleController:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def order(self) -> Order | None:
        return self._order

    @property
    def state(self) -> LifecycleState | None:
        return self._state

    @property
    def cancel_available(self) -> bool:
        with self._lock:
            return self._state is not None and not self._closed and self._state.cancel_available

    @property
    def is_terminal(self) -> bool:
        return self._terminal.is_set()

    def start(self, order: Order) -> None:
        """Initialize countdown state for `order` and begin ticking."""
        with self._lock:
            if self._order is not None:
                raise RuntimeError("Controller already started; use one controller per order.")
            if self._closed:
                raise RuntimeError("Controller is closed.")
            self._order = order
            self._state = start_state(order)
            self.phase_history.append(self._state.phase)
            self._clock_started = True
        self.logger.info(
            "Tracking order %s for %s: prep=%d units, cancel window=%d units",
            order.order_id,
            order.customer,
            order.prep_units,
            order.cancel_window_units,
            extra={"order_id": order.order_id, "phase": "preparing"},
        )
        self._tick_source.start(self.tick)

    def tick(self) -> None:
        """Handle one clock tick; ignored once the order is terminal."""
        release_clock = False
        try:
            with self._lock:
                order, state = self._order, self._state
                if order is None or state is None or self._closed:
                    self.logger.debug("Ignoring tick for inactive controller.")
                    return
                if state.is_terminal:
                    self.logger.debug("Ignoring late tick for terminal order %s.", order.order_id)
                    return
                transition = apply_tick(order, state)
                release_clock = self._commit(order, transition)
                self._emit(order, transition)
        finally:
            if release_clock:
                self._tick_source.stop()

    def cancel(self) -> bool:
        """Cancel the order if the window is open.

        Returns True only for the call that actually cancelled the order;
        repeated or late invocations are no-ops.
        """
        release_clock = False
        try:
            with self._lock:
                order, state = self._order, self._state
                if order is None or state is None or self._closed:
                    return False
                transition = apply_cancel(order, state)
                if not transition.changed:
                    self.logger.debug(
                        "Cancellation ignored for order %s in phase %s.",
                        order.order_id,
                        state.phase,
                    )
                    return False
                release_clock = self._commit(order, transition)
                self._emit(order, transition)
        finally:
            if release_clock:
                self._tick_source.stop()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the order reaches a terminal phase or timeout expires."""
        return self._terminal.wait(timeout)

    def close(self) -> None:
        """Release the tick source; later ticks and cancels become no-ops."""
        with self._lock:
            self._closed = True
            release_clock = self._clock_started and not self._clock_released
            self._clock_released = True
        if release_clock:
            self._tick_source.stop()

    def _commit(self, order: Order, transition: Transition) -> bool:
        """Store the new state and report whether this call must stop the clock.

        Terminal bookkeeping happens here, before any render callback runs, so
        a failing render sink cannot leave a terminal order looking active.
        """
        self._state = transition.state
        if transition.state.phase != self.phase_history[-1]:
            self.phase_history.append(transition.state.phase)
        if not transition.stop_clock:
            return False

        self._terminal.set()
        release_clock = not self._clock_released
        self._clock_released = True
        self.logger.info(
            "Order %s reached %s after %d units.",
            order.order_id,
            transition.state.phase,
            transition.state.elapsed,
            extra={
                "order_id": order.order_id,
                "phase": transition.state.phase,
                "elapsed_units": transition.state.elapsed,
            },
        )
        return release_clock

    def _emit(self, order: Order, transition: Transition) -> None:
        try:
            for instruction in transition.renders:
                self._on_render(instruction)
        finally:
            if transition.fire_feedback:
                self._fire_feedback(order)

    def _fire_feedback(self, order: Order) -> None:
        if self._feedback_fired:
            return
        self._feedback_fired = True
        if self._on_feedback is not None:
            self._on_feedback(FeedbackRequest(order_id=order.order_id, customer=order.customer))
