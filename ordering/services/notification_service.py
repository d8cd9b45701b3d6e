"""Fire-and-forget transactional email."""

import smtplib
import threading
from email.message import EmailMessage
from html import escape
from typing import Dict, Optional, Tuple

from .logging import log_event


class LoggingNotifier:
    """Stand-in used when no SMTP server is configured."""

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        log_event("info", "notification.skipped", recipient=recipient, subject=subject)


class EmailNotifier:
    """Sends HTML mail over SMTP on a background thread."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, recipient: str, subject: str, html_body: str) -> threading.Thread:
        worker = threading.Thread(
            target=self._deliver,
            args=(recipient, subject, html_body),
            name="email-notifier",
            daemon=True,
        )
        worker.start()
        return worker

    def _build_message(self, recipient: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _deliver(self, recipient: str, subject: str, html_body: str) -> bool:
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username and self._password:
                    smtp.login(self._username, self._password)
                smtp.send_message(self._build_message(recipient, subject, html_body))
        except (smtplib.SMTPException, OSError) as exc:
            log_event("error", "notification.failed", recipient=recipient, subject=subject, error=str(exc))
            return False
        log_event("info", "notification.sent", recipient=recipient, subject=subject)
        return True


def build_notifier(config):
    if not config.mail_enabled:
        return LoggingNotifier()
    return EmailNotifier(
        host=config.smtp_host,
        port=config.smtp_port,
        sender=config.mail_sender,
        username=config.smtp_user or None,
        password=config.smtp_password or None,
    )


def render_order_confirmation(order: Dict) -> Tuple[str, str]:
    rows = "".join(
        "<tr><td>{}</td><td>{}</td><td>{:.2f}</td></tr>".format(
            escape(str(it["title"])), it["quantity"], it["price"]
        )
        for it in order.get("order_items", [])
    )
    name = escape(str((order.get("shipping_info") or {}).get("full_name") or "customer"))
    subject = f"Order {order['id']} confirmed"
    body = (
        f"<p>Hi {name},</p>"
        f"<p>Thanks for your order. We are processing it now.</p>"
        f"<table><tr><th>Item</th><th>Qty</th><th>Price</th></tr>{rows}</table>"
        f"<p>Shipping: {order['shipping_price']:.2f}<br>"
        f"Total: {order['total_price']:.2f}</p>"
    )
    return subject, body
