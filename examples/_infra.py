from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@dataclass(frozen=True, slots=True)
class Failure(Exception):
    message: str
    transient: bool = False

    def __str__(self) -> str:  # pragma: no cover (examples only)
        return self.message


def _empty_pages() -> dict[str, str]:
    return {}


@dataclass(slots=True)
class FakeWeb:
    """Callback-style 'ajax' backend: make_ajax_call(url, cb) with cb(err, text)."""

    pages: dict[str, str] = field(default_factory=_empty_pages)
    delay_seconds: float = 0.01
    calls: list[str] = field(default_factory=list)

    def make_ajax_call(self, url: str, cb: Callable[[Exception | None, str | None], None]) -> None:
        self.calls.append(url)
        loop = asyncio.get_running_loop()
        text = self.pages.get(url)
        if text is None:
            loop.call_later(self.delay_seconds, cb, Failure(f"404: {url}"), None)
        else:
            loop.call_later(self.delay_seconds, cb, None, text)


def demo_web() -> FakeWeb:
    return FakeWeb(
        pages={
            "http://whatever": json.dumps({"id": 7}),
            "http://whateverelse/7": json.dumps({"value": "seven"}),
            "http://url01": "alpha",
            "http://url02": "beta",
            "http://url03": "gamma",
            "http://url04?search=alpha+beta+gamma": json.dumps({"value": ["a", "b", "g"]}),
        }
    )


def banner(title: str) -> None:  # pragma: no cover (examples only)
    print(f"\n== {title} ==")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:  # pragma: no cover (examples only)
    asyncio.run(main())
