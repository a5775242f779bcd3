# scenery/core/ports.py
from __future__ import annotations

from typing import Callable, Protocol


class SceneCanvas(Protocol):
    """Port: the host drawing surface of the active scene."""

    def apply_image(self, path: str) -> None: ...
    def force_redraw(self) -> None: ...


# schedule(delay_ms, callback)
Scheduler = Callable[[int, Callable[[], None]], None]
