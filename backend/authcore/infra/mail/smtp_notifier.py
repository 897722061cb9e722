"""Confirmation e-mail delivery.

:class:`SmtpConfirmationNotifier` sends through SMTP (STARTTLS or implicit
TLS) on a small background pool and retries a bounded number of times with a
fixed delay. Without ``MAIL_SERVER`` the :class:`LoggingConfirmationNotifier`
writes the link to the log instead.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
import time
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from email.message import EmailMessage
from typing import Any
from urllib.parse import urlencode

from authcore.core.logger import redact_email

log = logging.getLogger(__name__)

CONFIRM_PATH = "/api/v1/auth/confirm"
SUBJECT = "Confirm your account"


def build_confirmation_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}{CONFIRM_PATH}?{urlencode({'token': token})}"


def _render_body(username: str, link: str) -> str:
    return (
        f"Hello {username},\n\n"
        "Please confirm your account by opening the link below:\n\n"
        f"{link}\n\n"
        "The link is valid for 24 hours.\n"
    )


class LoggingConfirmationNotifier:
    """Development fallback: log the confirmation link instead of sending it."""

    def __init__(self, *, base_url: str) -> None:
        self.base_url = base_url

    def send_confirmation(self, *, email: str, username: str, token: str) -> None:
        log.info(
            "confirmation link for %s: %s",
            redact_email(email),
            build_confirmation_link(self.base_url, token),
        )


class SmtpConfirmationNotifier:
    """
    Send confirmation links over SMTP with bounded retries.

    ``send_confirmation`` only schedules the delivery and returns at once;
    the final failure after ``max_attempts`` is logged at ERROR with the
    redacted recipient.

    :param host: SMTP server.
    :param port: SMTP port.
    :param username: Optional login.
    :param password: Optional password.
    :param use_tls: ``True`` for STARTTLS, ``False`` for implicit TLS.
    :param sender: ``From`` address.
    :param base_url: Public base URL used to build the link.
    :param max_attempts: Total delivery attempts.
    :param retry_delay: Seconds between attempts.
    :param executor: Pool running deliveries; ``None`` sends synchronously.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str,
        base_url: str,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        executor: ThreadPoolExecutor | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.base_url = base_url
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay
        self.executor = executor
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> SmtpConfirmationNotifier:
        return cls(
            host=config["MAIL_SERVER"],
            port=int(config.get("MAIL_PORT", 587)),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            sender=config.get("MAIL_FROM", "no-reply@localhost"),
            base_url=config.get("PUBLIC_BASE_URL", "http://localhost:8000"),
            max_attempts=int(config.get("MAIL_MAX_ATTEMPTS", 3)),
            retry_delay=float(config.get("MAIL_RETRY_DELAY_SECONDS", 2)),
            executor=ThreadPoolExecutor(max_workers=2, thread_name_prefix="mail"),
        )

    def send_confirmation(self, *, email: str, username: str, token: str) -> None:
        message = self._build_message(email, username, token)
        if self.executor is None:
            self._deliver_with_retry(message, email)
            return
        future: Future[bool] = self.executor.submit(self._deliver_with_retry, message, email)
        future.add_done_callback(self._log_crash)

    def _build_message(self, email: str, username: str, token: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = SUBJECT
        message["From"] = self.sender
        message["To"] = email
        message.set_content(_render_body(username, build_confirmation_link(self.base_url, token)))
        return message

    def _deliver_with_retry(self, message: EmailMessage, email: str) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            try:
                self._send(message)
            except (smtplib.SMTPException, ssl.SSLError, OSError) as exc:
                log.warning(
                    "confirmation mail attempt %d/%d to %s failed: %s",
                    attempt,
                    self.max_attempts,
                    redact_email(email),
                    type(exc).__name__,
                )
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)
                continue
            log.info("confirmation mail sent to %s", redact_email(email))
            return True
        log.error(
            "confirmation mail to %s abandoned after %d attempts",
            redact_email(email),
            self.max_attempts,
        )
        return False

    def _send(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                self._login(server)
                server.send_message(message)
        else:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout
            ) as server:
                self._login(server)
                server.send_message(message)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.username and self.password:
            server.login(self.username, self.password)

    @staticmethod
    def _log_crash(future: Future[bool]) -> None:
        exc = future.exception()
        if exc is not None:
            log.error("confirmation mail worker crashed", exc_info=exc)
