from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class ConfirmationNotifier(Protocol):
    """Port for delivering account confirmation links."""

    def send_confirmation(self, *, email: str, username: str, token: str) -> None: ...


@dataclass
class RecordingNotifier(ConfirmationNotifier):
    """Collects outgoing confirmations in memory (unit tests)."""

    sent: list[dict[str, str]] = field(default_factory=list)
    fail_with: Exception | None = None

    def send_confirmation(self, *, email: str, username: str, token: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"email": email, "username": username, "token": token})
