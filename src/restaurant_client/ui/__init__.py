"""Terminal UI helpers for the order client presentation layer."""

from .terminal_view import TerminalOrderView

__all__ = ["TerminalOrderView"]
