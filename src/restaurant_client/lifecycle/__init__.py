"""Order lifecycle package: countdown state machine, tick source and controller."""

from .clock import IntervalTickSource, TickSource
from .controller import OrderLifecycleController
from .models import (
    CancelClosedView,
    CancelledView,
    CancelOpenView,
    FeedbackRequest,
    LifecycleState,
    Order,
    Phase,
    PreparingView,
    ReadyView,
    RenderInstruction,
    Transition,
    is_terminal_phase,
)
from .transitions import apply_cancel, apply_tick, start_state

__all__ = [
    "CancelClosedView",
    "CancelOpenView",
    "CancelledView",
    "FeedbackRequest",
    "IntervalTickSource",
    "LifecycleState",
    "Order",
    "OrderLifecycleController",
    "Phase",
    "PreparingView",
    "ReadyView",
    "RenderInstruction",
    "TickSource",
    "Transition",
    "apply_cancel",
    "apply_tick",
    "is_terminal_phase",
    "start_state",
]
