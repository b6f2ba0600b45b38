"""Order CLI smoke tests against a mock restaurant server."""

from __future__ import annotations

import io
import json
import sys
import threading
from pathlib import Path
from typing import Any

import httpx

from restaurant_client import cli
from restaurant_client.lifecycle.models import PreparingView, ReadyView, RenderInstruction
from restaurant_client.restaurant_api import RestaurantClient
from restaurant_client.ui.terminal_view import TerminalOrderView

_MENU = [
    {"id": 1, "name": "Chicken Biryani", "prepTime": 20},
    {"id": 2, "name": "Beef Burger", "prepTime": 15},
]


class _FakeServer:
    def __init__(self, *, prep_minutes: int, cancel_window: int) -> None:
        self.prep_minutes = prep_minutes
        self.cancel_window = cancel_window
        self.requests: list[tuple[str, str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        if request.url.path == "/menu":
            return httpx.Response(200, json=_MENU)
        if request.url.path == "/order":
            return httpx.Response(
                200,
                json={
                    "id": 1,
                    "customer": body["customer"],
                    "items": ["Chicken Biryani"],
                    "prepTime": self.prep_minutes,
                    "queueTime": 0,
                    "totalWaitTime": self.prep_minutes,
                    "cancelWindow": self.cancel_window,
                },
            )
        if request.url.path == "/feedback":
            return httpx.Response(200, json={"status": "Feedback received."})
        return httpx.Response(404, json={"error": "not found"})

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.requests]


class _DelayedCancelStream(io.StringIO):
    def __init__(self, delay_seconds: float) -> None:
        super().__init__()
        self.delay_seconds = delay_seconds
        self._sent = False

    def readline(self, size: int | None = -1) -> str:  # type: ignore[override]
        if self._sent:
            return ""
        threading.Event().wait(self.delay_seconds)
        self._sent = True
        return "c\n"


def _set_env(monkeypatch: Any, tmp_path: Path, *, tick: str = "0.005") -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RESTAURANT_API_BASE_URL", "http://restaurant.test")
    monkeypatch.setenv("RESTAURANT_MAX_RETRIES", "0")
    monkeypatch.setenv("DEMO_COMPRESSION_FACTOR", "1")
    monkeypatch.setenv("TICK_INTERVAL_SECONDS", tick)
    monkeypatch.setenv("JOURNAL_DIR", str(tmp_path / "journal"))


def _use_server(monkeypatch: Any, server: _FakeServer) -> None:
    def _factory(settings: Any, logger: Any) -> RestaurantClient:
        return RestaurantClient(
            settings=settings,
            logger=logger,
            transport=httpx.MockTransport(server),
        )

    monkeypatch.setattr(cli, "RestaurantClient", _factory)


def _journal(tmp_path: Path) -> list[dict[str, Any]]:
    files = sorted((tmp_path / "journal").glob("*.jsonl"))
    assert files
    return [json.loads(line) for line in files[0].read_text().splitlines() if line.strip()]


def test_order_ready_then_feedback_submitted(
    monkeypatch: Any, tmp_path: Path, capsys: Any
) -> None:
    _set_env(monkeypatch, tmp_path)
    server = _FakeServer(prep_minutes=3, cancel_window=1)
    _use_server(monkeypatch, server)
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(
        sys,
        "argv",
        ["restaurant-order", "--customer", "Yusuf", "--dishes", "1,7", "--feedback", "Tasty"],
    )

    assert cli.main() == 0

    assert server.paths() == ["/menu", "/order", "/feedback"]
    assert server.requests[1][2] == {"customer": "Yusuf", "dish_ids": [1]}
    assert server.requests[2][2] == {"customer": "Yusuf", "comment": "Tasty"}

    output = capsys.readouterr().out
    assert "Order #1 Confirmed!" in output
    assert "Order #1 is READY for collection!" in output
    assert "Thank you for your feedback!" in output

    events = _journal(tmp_path)
    event_types = [event["event_type"] for event in events]
    assert event_types[0] == "startup"
    assert "order_confirmed" in event_types
    assert event_types[-1] == "shutdown"
    terminal = next(event for event in events if event["event_type"] == "order_terminal")
    assert terminal["payload"]["phase"] == "ready"
    assert terminal["payload"]["elapsed_units"] == 3
    assert terminal["payload"]["phase_history"] == [
        "preparing",
        "cancel_window_closed",
        "ready",
    ]


def test_cancel_command_cancels_order_without_feedback(
    monkeypatch: Any, tmp_path: Path, capsys: Any
) -> None:
    _set_env(monkeypatch, tmp_path, tick="0.05")
    server = _FakeServer(prep_minutes=100, cancel_window=50)
    _use_server(monkeypatch, server)
    monkeypatch.setattr(sys, "stdin", _DelayedCancelStream(delay_seconds=0.15))
    monkeypatch.setattr(sys, "argv", ["restaurant-order", "--customer", "Mina", "--dishes", "2"])

    assert cli.main() == 0

    assert "/feedback" not in server.paths()
    output = capsys.readouterr().out
    assert "Order #1 cancelled by user." in output
    assert "READY" not in output

    events = _journal(tmp_path)
    terminal = next(event for event in events if event["event_type"] == "order_terminal")
    assert terminal["payload"]["phase"] == "cancelled"


def test_invalid_selection_exits_before_ordering(
    monkeypatch: Any, tmp_path: Path, capsys: Any
) -> None:
    _set_env(monkeypatch, tmp_path)
    server = _FakeServer(prep_minutes=3, cancel_window=1)
    _use_server(monkeypatch, server)
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(sys, "argv", ["restaurant-order", "--customer", "Ali", "--dishes", "9,x"])

    assert cli.main() == 3
    assert server.paths() == ["/menu"]
    assert "at least one valid dish" in capsys.readouterr().out


def test_prompts_read_from_stdin(monkeypatch: Any, tmp_path: Path, capsys: Any) -> None:
    _set_env(monkeypatch, tmp_path)
    server = _FakeServer(prep_minutes=1, cancel_window=1)
    _use_server(monkeypatch, server)
    monkeypatch.setattr(sys, "stdin", io.StringIO("Rania\n2\n"))
    monkeypatch.setattr(sys, "argv", ["restaurant-order"])

    assert cli.main() == 0
    assert server.requests[1][2] == {"customer": "Rania", "dish_ids": [2]}
    # stdin is exhausted by the time the order is ready, so feedback is skipped.
    assert "/feedback" not in server.paths()
    assert "Feedback skipped." in capsys.readouterr().out


def test_unreachable_server_exits_with_api_failure(monkeypatch: Any, tmp_path: Path) -> None:
    _set_env(monkeypatch, tmp_path)

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def _factory(settings: Any, logger: Any) -> RestaurantClient:
        return RestaurantClient(
            settings=settings,
            logger=logger,
            transport=httpx.MockTransport(_refuse),
        )

    monkeypatch.setattr(cli, "RestaurantClient", _factory)
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(sys, "argv", ["restaurant-order", "--customer", "Ali", "--dishes", "1"])

    assert cli.main() == 4
    event_types = [event["event_type"] for event in _journal(tmp_path)]
    assert "run_failure" in event_types


def test_invalid_config_exits_with_code_2(monkeypatch: Any, tmp_path: Path) -> None:
    _set_env(monkeypatch, tmp_path)
    monkeypatch.setenv("DEMO_COMPRESSION_FACTOR", "0")
    monkeypatch.setattr(sys, "argv", ["restaurant-order"])
    assert cli.main() == 2


def test_unusable_journal_dir_exits_with_code_2(monkeypatch: Any, tmp_path: Path) -> None:
    _set_env(monkeypatch, tmp_path)
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setenv("JOURNAL_DIR", str(blocker / "journal"))
    monkeypatch.setattr(sys, "argv", ["restaurant-order"])
    assert cli.main() == 2


def _render_failing_on(monkeypatch: Any, view_type: type) -> None:
    original = TerminalOrderView.render

    def _render(self: TerminalOrderView, instruction: RenderInstruction) -> None:
        if isinstance(instruction, view_type):
            raise RuntimeError("display failed")
        original(self, instruction)

    monkeypatch.setattr(TerminalOrderView, "render", _render)


def test_stalled_countdown_exits_with_code_99(
    monkeypatch: Any, tmp_path: Path, capsys: Any
) -> None:
    _set_env(monkeypatch, tmp_path)
    server = _FakeServer(prep_minutes=3, cancel_window=1)
    _use_server(monkeypatch, server)
    _render_failing_on(monkeypatch, PreparingView)
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(sys, "argv", ["restaurant-order", "--customer", "Ali", "--dishes", "1"])

    assert cli.main() == 99

    assert "/feedback" not in server.paths()
    assert "Order countdown stopped unexpectedly" in capsys.readouterr().out
    failures = [event for event in _journal(tmp_path) if event["event_type"] == "run_failure"]
    assert failures[0]["payload"]["type"] == "OrderTrackingError"


def test_failing_ready_render_still_collects_feedback(monkeypatch: Any, tmp_path: Path) -> None:
    _set_env(monkeypatch, tmp_path)
    server = _FakeServer(prep_minutes=2, cancel_window=1)
    _use_server(monkeypatch, server)
    _render_failing_on(monkeypatch, ReadyView)
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(
        sys,
        "argv",
        ["restaurant-order", "--customer", "Ali", "--dishes", "1", "--feedback", "Great"],
    )

    assert cli.main() == 0
    assert server.paths() == ["/menu", "/order", "/feedback"]
    events = _journal(tmp_path)
    terminal = next(event for event in events if event["event_type"] == "order_terminal")
    assert terminal["payload"]["phase"] == "ready"
