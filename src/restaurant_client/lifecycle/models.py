"""Typed value objects for the order lifecycle state machine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from ..models import OrderConfirmation

Phase = Literal[
    "preparing",
    "cancel_window_open",
    "cancel_window_closed",
    "ready",
    "cancelled",
]

TERMINAL_PHASES: frozenset[Phase] = frozenset({"ready", "cancelled"})

# Phases only ever move to an equal or higher rank.
PHASE_RANK: dict[Phase, int] = {
    "preparing": 0,
    "cancel_window_open": 1,
    "cancel_window_closed": 2,
    "ready": 3,
    "cancelled": 3,
}


def is_terminal_phase(phase: Phase) -> bool:
    """Return True when phase is terminal."""
    return phase in TERMINAL_PHASES


def to_compressed_units(minutes: float, compression_factor: int) -> int:
    """Convert real minutes into whole compressed demo units."""
    return math.ceil(minutes * compression_factor)


def to_display_minutes(units: int, compression_factor: int) -> int:
    """Round remaining compressed units up to whole display minutes."""
    return -(-units // compression_factor)


@dataclass(frozen=True, slots=True)
class Order:
    """One confirmed order, with durations in compressed units."""

    order_id: str
    customer: str
    prep_units: int
    cancel_window_units: int
    compression_factor: int = 3

    @classmethod
    def from_confirmation(
        cls,
        confirmation: OrderConfirmation,
        *,
        compression_factor: int,
    ) -> Order:
        return cls(
            order_id=str(confirmation.order_id),
            customer=confirmation.customer,
            prep_units=to_compressed_units(confirmation.prep_minutes, compression_factor),
            cancel_window_units=to_compressed_units(
                confirmation.cancel_window_minutes, compression_factor
            ),
            compression_factor=compression_factor,
        )


@dataclass(frozen=True, slots=True)
class LifecycleState:
    """Countdown state for one order; replaced wholesale on every transition."""

    elapsed: int = 0
    phase: Phase = "preparing"

    @property
    def is_terminal(self) -> bool:
        return is_terminal_phase(self.phase)

    @property
    def cancel_available(self) -> bool:
        return self.phase == "cancel_window_open"


@dataclass(frozen=True, slots=True)
class PreparingView:
    remaining_minutes: int
    kind: Literal["preparing"] = "preparing"


@dataclass(frozen=True, slots=True)
class CancelOpenView:
    remaining_minutes: int
    kind: Literal["cancel_open"] = "cancel_open"


@dataclass(frozen=True, slots=True)
class CancelClosedView:
    kind: Literal["cancel_closed"] = "cancel_closed"


@dataclass(frozen=True, slots=True)
class ReadyView:
    order_id: str
    kind: Literal["ready"] = "ready"


@dataclass(frozen=True, slots=True)
class CancelledView:
    order_id: str
    kind: Literal["cancelled"] = "cancelled"


RenderInstruction = PreparingView | CancelOpenView | CancelClosedView | ReadyView | CancelledView


@dataclass(frozen=True, slots=True)
class FeedbackRequest:
    """Hand-off to the feedback collector when an order becomes ready."""

    order_id: str
    customer: str


@dataclass(frozen=True, slots=True)
class Transition:
    """Result of applying one tick or cancel event to a lifecycle state."""

    state: LifecycleState
    renders: tuple[RenderInstruction, ...] = field(default_factory=tuple)
    stop_clock: bool = False
    fire_feedback: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.renders) or self.stop_clock
