"""
Cursor relocation via pyautogui.

API:
- move_cursor(x, y): instant move
- apply(event): carry out a WarpEvent from the warp engine

Notes:
- Built-in pyautogui pauses are disabled (PAUSE=0) and FAILSAFE is off.
- Without a display pyautogui cannot be imported; the controller then only
  logs the decisions it would have carried out.
"""
from __future__ import annotations

import logging
from typing import Optional

from GazeWarp.control.events import WarpEvent

logger = logging.getLogger(__name__)

try:
    import pyautogui  # type: ignore
except Exception:  # pragma: no cover
    pyautogui = None


class CursorController:
    def __init__(self) -> None:
        if pyautogui:
            pyautogui.FAILSAFE = False
            pyautogui.PAUSE = 0  # disable built-in delays

    @property
    def available(self) -> bool:
        return pyautogui is not None

    def move_to(self, x: int, y: int) -> bool:
        if pyautogui is None:
            logger.debug("pyautogui unavailable, not moving cursor to (%d, %d)", x, y)
            return False
        try:
            pyautogui.moveTo(int(x), int(y), duration=0)
        except pyautogui.FailSafeException as e:
            logger.warning("cursor move to (%d, %d) rejected: %s", x, y, e)
            return False
        return True

    # Public API ------------------------------------------------------
    def move_cursor(self, x: int, y: int) -> bool:
        """Instantly move the OS cursor to (x,y)."""
        return self.move_to(x, y)

    def apply(self, event: Optional[WarpEvent]) -> bool:
        if event is None:
            return False
        x, y = event.target.as_int()
        return self.move_to(x, y)
