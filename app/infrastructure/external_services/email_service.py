"""Email service for transactional notifications"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional

from ...domain.exceptions import ProviderError

logger = logging.getLogger(__name__)

_STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: #1f6f43; color: white; padding: 24px; text-align: center; border-radius: 10px 10px 0 0; }
    .content { background: #f9f9f9; padding: 24px; border-radius: 0 0 10px 10px; }
    .button { display: inline-block; background: #1f6f43; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; margin: 20px 0; }
    .footer { text-align: center; margin-top: 24px; color: #666; font-size: 13px; }
"""


class EmailDeliveryError(ProviderError):
    default_code = "email_delivery_failed"


class EmailService:

    def __init__(self, settings):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.smtp_timeout = settings.SMTP_TIMEOUT_SECONDS
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.frontend_url = settings.FRONTEND_URL.rstrip("/")

    async def send_email(self, to_email: str, subject: str, html_content: str,
                         text_content: Optional[str] = None) -> None:
        """Send an HTML email; raises EmailDeliveryError when SMTP fails"""
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = to_email

        if text_content:
            msg.attach(MIMEText(text_content, 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        try:
            await self._send_smtp_email(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to_email, e)
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        logger.info("Email sent to %s: %s", to_email, subject)

    async def _send_smtp_email(self, msg: MIMEMultipart):
        """Send email via SMTP"""
        def send_sync():
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout) as server:
                if self.smtp_use_tls:
                    server.starttls()
                if self.smtp_username and self.smtp_password:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

        # Run in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, send_sync)

    def _wrap(self, title: str, body: str) -> str:
        return f"""
        <!DOCTYPE html>
        <html>
        <head><style>{_STYLE}</style></head>
        <body>
            <div class="container">
                <div class="header"><h1>{title}</h1></div>
                <div class="content">{body}</div>
                <div class="footer"><p>{self.from_name} · Equipment rentals made simple</p></div>
            </div>
        </body>
        </html>
        """

    async def send_verification_email(self, to_email: str, name: str, verification_token: str) -> None:
        verification_url = f"{self.frontend_url}/verify-email?token={verification_token}"
        html_content = self._wrap(
            f"Welcome to {self.from_name}!",
            f"""
            <p>Hi {name},</p>
            <p>Please confirm your email address to start renting equipment.</p>
            <a href="{verification_url}" class="button">Verify Email Address</a>
            <p>Or open this link: <a href="{verification_url}">{verification_url}</a></p>
            <p>This link expires in 24 hours.</p>
            """,
        )
        text_content = f"Hi {name},\n\nVerify your email address: {verification_url}\n\nThis link expires in 24 hours."
        await self.send_email(to_email, f"Verify your {self.from_name} account", html_content, text_content)

    async def send_password_reset_email(self, to_email: str, name: str, reset_token: str) -> None:
        reset_url = f"{self.frontend_url}/reset-password?token={reset_token}"
        html_content = self._wrap(
            "Password reset",
            f"""
            <p>Hi {name},</p>
            <p>We received a request to reset your password.</p>
            <a href="{reset_url}" class="button">Reset Password</a>
            <p>This link expires in 1 hour. If you did not ask for it, you can ignore this email.</p>
            """,
        )
        text_content = f"Hi {name},\n\nReset your password: {reset_url}\n\nThis link expires in 1 hour."
        await self.send_email(to_email, f"Reset your {self.from_name} password", html_content, text_content)

    async def send_order_confirmation_email(self, to_email: str, order_number: str,
                                            total: str, item_count: int) -> None:
        html_content = self._wrap(
            "Order received",
            f"""
            <p>Thank you for your order <strong>{order_number}</strong>.</p>
            <p>Items: {item_count}<br>Total: {total}</p>
            <p>We will let you know as soon as your payment is confirmed.</p>
            """,
        )
        text_content = f"Thank you for your order {order_number}.\nItems: {item_count}\nTotal: {total}"
        await self.send_email(to_email, f"Order {order_number} received", html_content, text_content)

    async def send_payment_received_email(self, to_email: str, order_number: str,
                                          amount: str, receipt_number: Optional[str]) -> None:
        receipt = receipt_number or "n/a"
        html_content = self._wrap(
            "Payment received",
            f"""
            <p>We received your M-Pesa payment of {amount} for order <strong>{order_number}</strong>.</p>
            <p>M-Pesa receipt: {receipt}</p>
            """,
        )
        text_content = f"Payment of {amount} received for order {order_number}. Receipt: {receipt}"
        await self.send_email(to_email, f"Payment received for {order_number}", html_content, text_content)

    async def send_payment_failed_email(self, to_email: str, order_number: str, reason: str) -> None:
        html_content = self._wrap(
            "Payment not completed",
            f"""
            <p>Your M-Pesa payment for order <strong>{order_number}</strong> did not go through.</p>
            <p>Reason: {reason}</p>
            <p>You can retry the payment from your orders page.</p>
            """,
        )
        text_content = f"Payment for order {order_number} did not go through: {reason}"
        await self.send_email(to_email, f"Payment for {order_number} not completed", html_content, text_content)

    async def send_notification(self, kind: str, to_email: str, payload: Dict[str, Any]) -> None:
        """Dispatch an outbox entry to the matching template"""
        if kind == "email_verification":
            await self.send_verification_email(to_email, payload.get("name", ""), payload["token"])
        elif kind == "password_reset":
            await self.send_password_reset_email(to_email, payload.get("name", ""), payload["token"])
        elif kind == "order_confirmation":
            await self.send_order_confirmation_email(
                to_email, payload["order_number"], payload["total"], payload.get("item_count", 0)
            )
        elif kind == "payment_received":
            await self.send_payment_received_email(
                to_email, payload["order_number"], payload["amount"], payload.get("receipt_number")
            )
        elif kind == "payment_failed":
            await self.send_payment_failed_email(to_email, payload["order_number"], payload.get("reason", ""))
        else:
            raise ValueError(f"Unknown notification kind: {kind}")
