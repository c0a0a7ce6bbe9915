"""Access gate for schedule write actions.

NOT a security control. A shared passcode compared in-process keeps
casual visitors away from the create/edit/delete actions; it has no
lockout, no hashing and no per-user sessions. The unlocked flag lives as
long as the process and is shared by every client of it. Anything that
needs real access control must put a proper auth layer in front instead.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable

logger = logging.getLogger("schedule.gate")

LOGIN_PROMPT = "Masukkan password akses jadwal maintenance"
LOGIN_REQUIRED = "Silakan login terlebih dahulu."


class AccessDenied(Exception):
    """Write action attempted while the gate is locked."""


class AccessGate:

    def __init__(self, passcode: str):
        self._passcode = passcode
        self.is_authenticated = False

    def attempt_login(self, candidate: str | None) -> bool:
        # the candidate is only compared, never stored or logged
        if candidate is not None and hmac.compare_digest(
            candidate.encode("utf-8"), self._passcode.encode("utf-8"),
        ):
            self.is_authenticated = True
            logger.info("Schedule access unlocked")
            return True
        logger.info("Schedule login rejected")
        return False

    def prompt_login(self, ask: Callable[[str], str | None]) -> bool:
        """Ask the user for the passcode through any string prompt."""
        return self.attempt_login(ask(LOGIN_PROMPT))

    def logout(self) -> None:
        self.is_authenticated = False

    def require(self) -> None:
        if not self.is_authenticated:
            raise AccessDenied(LOGIN_REQUIRED)
