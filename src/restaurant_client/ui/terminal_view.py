"""Rich-rendered terminal views for the menu, order countdown and feedback."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..lifecycle.models import (
    CancelClosedView,
    CancelledView,
    CancelOpenView,
    PreparingView,
    ReadyView,
    RenderInstruction,
)
from ..models import MenuItem, OrderConfirmation

CANCEL_HINT = "type 'c' + Enter to cancel"


class TerminalOrderView:
    """Presentation layer that turns lifecycle render instructions into output."""

    def __init__(self, *, console: Console) -> None:
        self.console = console

    def render_menu(self, items: list[MenuItem]) -> None:
        if not items:
            self.console.print("No menu items available.")
            return
        table = Table(title="Menu")
        table.add_column("#", justify="right")
        table.add_column("Dish", overflow="fold")
        table.add_column("Prep", justify="right")
        for item in items:
            table.add_row(str(item.item_id), item.name, f"{item.prep_minutes} mins")
        self.console.print(table)

    def render_confirmation(self, confirmation: OrderConfirmation) -> None:
        lines = [
            f"Order #{confirmation.order_id} Confirmed!",
            f"Items: {', '.join(confirmation.items) or '-'}",
            f"Total Prep Time: {_minutes(confirmation.prep_minutes)} mins.",
            f"Estimated Ready Time: {_minutes(confirmation.total_wait_minutes)} minutes.",
        ]
        self.console.print(Panel("\n".join(lines), title="Order Status", border_style="green"))

    def render(self, instruction: RenderInstruction) -> None:
        """Print one render instruction emitted by the lifecycle controller."""
        if isinstance(instruction, CancelOpenView):
            text = Text()
            text.append("Cancellation window: ", style="bold")
            text.append(f"{instruction.remaining_minutes} minutes remaining ")
            text.append(f"({CANCEL_HINT}).", style="dim")
            self.console.print(text)
        elif isinstance(instruction, CancelClosedView):
            self.console.print("Cancellation window has closed.", style="yellow")
        elif isinstance(instruction, PreparingView):
            self.console.print(
                f"Order Preparation: {instruction.remaining_minutes} minutes remaining."
            )
        elif isinstance(instruction, ReadyView):
            self.console.print(
                Panel(
                    f"Order #{instruction.order_id} is READY for collection!",
                    border_style="green",
                )
            )
        elif isinstance(instruction, CancelledView):
            self.console.print(
                Panel(
                    f"Order #{instruction.order_id} cancelled by user.",
                    border_style="red",
                )
            )
        else:
            raise TypeError(f"Unknown render instruction: {instruction!r}")

    def render_feedback_prompt(self, customer: str) -> None:
        self.console.print(
            Panel(
                f"We hope you enjoyed your meal, {customer}! Please share your thoughts "
                "(one line, empty to skip).",
                title="Share Your Feedback",
                border_style="cyan",
            )
        )

    def render_feedback_result(self, *, ok: bool, message: str) -> None:
        self.console.print(message, style="green" if ok else "red")

    def render_error(self, message: str) -> None:
        self.console.print(f"Error: {message}", style="bold red")


def _minutes(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"
