"""Menu CLI: fetch and print the restaurant menu."""

from __future__ import annotations

import sys

from rich.console import Console

from .config import load_settings
from .exceptions import ConfigError, RestaurantAPIError
from .log_setup import setup_logger
from .restaurant_api import RestaurantClient
from .ui.terminal_view import TerminalOrderView


def main() -> int:
    """Print the current menu and exit."""
    logger = setup_logger()
    view = TerminalOrderView(console=Console())

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    try:
        with RestaurantClient(settings=settings, logger=logger) as client:
            view.render_menu(client.fetch_menu())
    except RestaurantAPIError as exc:
        logger.error("Error loading menu: %s", exc)
        view.render_error(f"Error loading menu from server: {exc}")
        return 4
    return 0


if __name__ == "__main__":
    sys.exit(main())
