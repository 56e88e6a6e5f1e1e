"""Account notifications.

Email delivery is not part of this service.  The notifier records what
would be sent on the ``expensemanager.notifications`` logger so operators
(and tests) can observe it.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("expensemanager.notifications")


class Notifier:
    """Logs account lifecycle notices addressed to a user."""

    def _send(self, kind: str, email: str, subject: str, **extra: str) -> None:
        logger.info(
            "Notification %s to %s: %s",
            kind,
            email,
            subject,
            extra={"notification": kind, **extra},
        )

    def registration_received(self, email: str, name: str) -> None:
        self._send("registration", email, f"Welcome {name}, your account is pending approval")

    def account_approved(self, email: str, name: str) -> None:
        self._send("approval", email, f"{name}, your account has been approved")

    def account_rejected(self, email: str, name: str) -> None:
        self._send("rejection", email, f"{name}, your account request was rejected")

    def password_reset(self, email: str, name: str, reset_link: str) -> None:
        # The link carries a bearer secret; keep it out of INFO output.
        self._send("password_reset", email, f"Password reset requested for {name}")
        logger.debug("Password reset link for %s: %s", email, reset_link)
