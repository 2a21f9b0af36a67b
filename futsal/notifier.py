"""Customer notifications for verified payments, sent over SMTP."""

from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from futsal import settings
from futsal.slots import local_tz

TEMPLATES_PATH = Path(__file__).resolve().parent / "templates"


@dataclass
class VerifiedBookingMail:
    customer_email: str
    customer_name: str
    booking_number: str
    venue_name: str
    field_name: str
    start_time: datetime
    end_time: datetime
    total_price: int
    approved: bool
    note: str | None = None


class Notifier(Protocol):
    async def booking_verified(self, mail: VerifiedBookingMail) -> None: ...


def format_price(value: int) -> str:
    """125000 -> '125.000'"""
    return f"{value:,}".replace(",", ".")


class EmailNotifier:
    """
    Renders the approve/reject templates and delivers them via SMTP.

    Delivery is best-effort: any failure is logged and swallowed so it never
    undoes or fails the verification that triggered it.
    """

    def __init__(self, templates_path: Path | None = None):
        self.log = logger.bind(context="EmailNotifier")
        self._environment = Environment(
            loader=FileSystemLoader(templates_path or TEMPLATES_PATH),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _context(self, mail: VerifiedBookingMail) -> dict[str, Any]:
        tz = local_tz()
        start = mail.start_time.astimezone(tz)
        end = mail.end_time.astimezone(tz)
        return {
            "mail": mail,
            "schedule": f"{start:%d/%m/%Y %H:%M} - {end:%H:%M}",
            "total_display": format_price(mail.total_price),
        }

    def render(self, mail: VerifiedBookingMail) -> EmailMessage:
        name = "booking_approved" if mail.approved else "booking_rejected"
        context = self._context(mail)

        message = EmailMessage()
        message["Subject"] = (
            "Pembayaran Booking Disetujui"
            if mail.approved
            else "Pembayaran Booking Ditolak"
        )
        message["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM_EMAIL))
        message["To"] = mail.customer_email
        message.set_content(self._environment.get_template(f"{name}.txt").render(**context))
        message.add_alternative(
            self._environment.get_template(f"{name}.html").render(**context),
            subtype="html",
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        if not settings.SMTP_HOST or not settings.SMTP_FROM_EMAIL:
            raise RuntimeError("SMTP_HOST and SMTP_FROM_EMAIL must be configured")

        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT
        ) as client:
            if settings.SMTP_USE_TLS:
                client.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                client.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            client.send_message(message)

    async def booking_verified(self, mail: VerifiedBookingMail) -> None:
        try:
            message = self.render(mail)
            await asyncio.to_thread(self._send, message)
        except Exception:
            self.log.opt(exception=True).error(
                "Failed to send verification email to {}", mail.customer_email
            )
            return
        self.log.info(
            "Booking {} email sent to {}",
            "approved" if mail.approved else "rejected",
            mail.customer_email,
        )


_notifier = EmailNotifier()


def get_notifier() -> Notifier:
    return _notifier
