"""Pure tick/cancel transition functions for one order's countdown."""

from __future__ import annotations

from .models import (
    PHASE_RANK,
    CancelClosedView,
    CancelledView,
    CancelOpenView,
    LifecycleState,
    Order,
    Phase,
    PreparingView,
    ReadyView,
    RenderInstruction,
    Transition,
    to_display_minutes,
)


def start_state(order: Order) -> LifecycleState:
    """Return the initial countdown state for a freshly confirmed order."""
    del order
    return LifecycleState(elapsed=0, phase="preparing")


def remaining_units(order: Order, state: LifecycleState) -> tuple[int, int]:
    """Return (remaining prep, remaining cancel window) in compressed units."""
    return (
        order.prep_units - state.elapsed,
        order.cancel_window_units - state.elapsed,
    )


def apply_tick(order: Order, state: LifecycleState) -> Transition:
    """Advance the shared clock by one unit and decide the next phase.

    Readiness is checked before the cancellation window, so when both
    countdowns run out on the same tick the order becomes ready and the
    window-closed notice is never rendered. Ticks arriving after a terminal
    phase leave the state untouched.
    """
    if state.is_terminal:
        return Transition(state=state)

    elapsed = state.elapsed + 1
    remaining_prep = order.prep_units - elapsed
    remaining_cancel = order.cancel_window_units - elapsed
    factor = order.compression_factor

    if remaining_prep <= 0:
        return Transition(
            state=_advance(state, elapsed=elapsed, phase="ready"),
            renders=(ReadyView(order_id=order.order_id),),
            stop_clock=True,
            fire_feedback=True,
        )

    renders: list[RenderInstruction] = []
    if remaining_cancel > 0:
        phase: Phase = "cancel_window_open"
        renders.append(
            CancelOpenView(remaining_minutes=to_display_minutes(remaining_cancel, factor))
        )
    else:
        phase = "cancel_window_closed"
        renders.append(CancelClosedView())
    renders.append(PreparingView(remaining_minutes=to_display_minutes(remaining_prep, factor)))
    return Transition(
        state=_advance(state, elapsed=elapsed, phase=phase),
        renders=tuple(renders),
    )


def apply_cancel(order: Order, state: LifecycleState) -> Transition:
    """Cancel the order if the window is open; otherwise a no-op."""
    if not state.cancel_available:
        return Transition(state=state)
    return Transition(
        state=_advance(state, elapsed=state.elapsed, phase="cancelled"),
        renders=(CancelledView(order_id=order.order_id),),
        stop_clock=True,
    )


def _advance(state: LifecycleState, *, elapsed: int, phase: Phase) -> LifecycleState:
    if PHASE_RANK[phase] < PHASE_RANK[state.phase]:
        raise ValueError(f"Invalid lifecycle transition: {state.phase} -> {phase}")
    return LifecycleState(elapsed=elapsed, phase=phase)
