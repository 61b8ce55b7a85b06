"""Client-side route tracking for a screen."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class Navigator:
    def __init__(self, initial_route: str):
        self.history: list[str] = [initial_route]

    @property
    def current_route(self) -> str:
        return self.history[-1]

    def navigate_to(self, route: str) -> None:
        logger.info("Navigating %s -> %s", self.current_route, route)
        self.history.append(route)
