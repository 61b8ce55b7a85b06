"""
Navigation chrome: menu, signed-in user, first-login tooltip and logout.

The tooltip is shown until the user dismisses it once; the dismissal is
stored as the ``firstLogin`` preference of that user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from patient_details.services.navigation import Navigator
from patient_details.services.notifications import Notifier
from patient_details.services.preferences import AbstractPreferenceStore
from patient_details.services.session import AbstractSession

logger = logging.getLogger(__name__)

FIRST_LOGIN_KEY = "firstLogin"
TOOLTIP_TEXT = "Click the menu icon to navigate."


@dataclass(frozen=True)
class MenuLink:
    label: str
    route: str


MENU_LINKS: list[MenuLink] = [
    MenuLink("Home", "/home"),
    MenuLink("Prediction", "/prediction-form"),
    MenuLink("Patients Record", "/prediction-table"),
    MenuLink("About Us", "/about-us"),
]


class NavigationChrome:
    def __init__(
        self,
        session: AbstractSession,
        preferences: AbstractPreferenceStore,
        home_route: str,
    ):
        self.session = session
        self.preferences = preferences
        self.home_route = home_route
        self.notifier = Notifier()
        self.navigator = Navigator(home_route)

    def _owner(self) -> str:
        user = self.session.current_user()
        return user.email if user else ""

    def show_tooltip(self) -> bool:
        return self.preferences.get(self._owner(), FIRST_LOGIN_KEY) is None

    def dismiss_tooltip(self) -> None:
        owner = self._owner()
        if self.preferences.get(owner, FIRST_LOGIN_KEY) is None:
            self.preferences.set(owner, FIRST_LOGIN_KEY, "true")

    async def logout(self) -> bool:
        try:
            await self.session.logout()
        except Exception as exc:
            logger.error("Logout Error: %s", exc)
            self.notifier.error("Failed to logout. Please try again.")
            return False
        self.navigator.navigate_to(self.home_route)
        self.notifier.success("Logged out successfully.")
        return True

    def render(self) -> dict[str, Any]:
        user = self.session.current_user()
        return {
            "user_email": user.email if user else None,
            "menu": [{"label": link.label, "route": link.route} for link in MENU_LINKS],
            "show_tooltip": self.show_tooltip(),
            "tooltip": TOOLTIP_TEXT,
            "route": self.navigator.current_route,
        }
