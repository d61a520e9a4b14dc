"""
Outgoing email for ProcessHub.

Messages are HTML bodies delivered over SMTP with aiosmtplib. Delivery
failures are logged and reported as ``False``; they never raise into the
request that triggered them.
"""

from email.message import EmailMessage
from html import escape
from typing import Optional

import aiosmtplib

from .config import EmailConfig, get_config
from .logging import get_logger

logger = get_logger(__name__)

_BUTTON_STYLE = (
    "background-color: #4F46E5; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 4px; display: inline-block; "
    "font-weight: bold;"
)


def _wrap(body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; '
        f'margin: 0 auto;">{body}</div>'
    )


def _notifications_link(app_url: str, label: str) -> str:
    url = escape(f"{app_url}/signin?redirect=notifications")
    return (
        '<div style="margin: 30px 0; text-align: center;">'
        f'<a href="{url}" style="{_BUTTON_STYLE}">{label}</a></div>'
        '<p style="color: #666; font-size: 12px;">If the button above doesn\'t '
        f"work, copy and paste this URL into your browser: {url}</p>"
    )


class EmailSender:
    """Sends templated notification emails over SMTP."""

    def __init__(self, config: Optional[EmailConfig] = None) -> None:
        """Initialize the sender.

        Args:
            config: Email settings, defaults to the global configuration
        """
        self.config = config or get_config().email

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            True when the message was accepted for delivery
        """
        if not self.config.enabled:
            logger.info(
                "Email delivery disabled, message not sent",
                to=to,
                subject=subject,
            )
            return True

        message = EmailMessage()
        message["From"] = self.config.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username or None,
                password=self.config.password or None,
                use_tls=self.config.use_tls,
                timeout=self.config.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                "Failed to send email",
                to=to,
                subject=subject,
                error=str(e),
            )
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True

    async def send_otp_email(self, to: str, otp: str) -> bool:
        """Send the sign-up verification code."""
        minutes = max(1, get_config().security.otp_lifetime_seconds // 60)
        html = _wrap(
            '<h2 style="color: #333;">Email Verification</h2>'
            "<p>Your OTP for email verification is:</p>"
            '<h1 style="color: #4F46E5; font-size: 32px; letter-spacing: 5px; '
            f'text-align: center;">{escape(otp)}</h1>'
            f"<p>This OTP will expire in {minutes} minutes.</p>"
            "<p>If you didn't request this OTP, please ignore this email.</p>"
        )
        return await self.send(to, "Your OTP for Email Verification", html)

    async def send_password_reset_email(self, to: str, reset_url: str) -> bool:
        """Send the password reset link."""
        url = escape(reset_url)
        html = _wrap(
            '<h2 style="color: #333;">Password Reset</h2>'
            "<p>Please click the link below to reset your password:</p>"
            f'<a href="{url}" style="{_BUTTON_STYLE}">Reset Password</a>'
            "<p>If you didn't request a password reset, please ignore this email.</p>"
            "<p>This link will expire in 1 hour.</p>"
        )
        return await self.send(to, "Password Reset Request", html)

    async def send_approval_request_email(
        self, to: str, title: str, message: str, sender_name: str, app_url: str
    ) -> bool:
        """Ask a supervisor to review a submitted diagram."""
        html = _wrap(
            '<h2 style="color: #333;">BPMN Approval Request</h2>'
            f'<h3 style="color: #4F46E5;">{escape(title)}</h3>'
            f"<p><strong>From:</strong> {escape(sender_name)}</p>"
            f"<p>{escape(message)}</p>"
            + _notifications_link(app_url, "Review BPMN")
        )
        return await self.send(to, f"BPMN Approval Request: {title}", html)

    async def send_submission_confirmation_email(
        self, to: str, title: str, supervisor_count: int, app_url: str
    ) -> bool:
        """Confirm to the submitter that supervisors were notified."""
        verb = "has" if supervisor_count == 1 else "have"
        html = _wrap(
            '<h2 style="color: #333;">BPMN Submission Confirmed</h2>'
            f'<h3 style="color: #4F46E5;">{escape(title)}</h3>'
            "<p>Your BPMN diagram has been successfully submitted for approval.</p>"
            '<p><strong>Status:</strong> <span style="color: #F59E0B; '
            'font-weight: bold;">Pending Review</span></p>'
            f"<p>{supervisor_count} supervisor(s) {verb} been notified and will "
            "review your submission.</p>"
            "<p>You will receive an email notification once your diagram has "
            "been reviewed.</p>"
            + _notifications_link(app_url, "View Your Notifications")
        )
        return await self.send(to, f"BPMN Submission Confirmation: {title}", html)

    async def send_status_update_email(
        self,
        to: str,
        status: str,
        title: str,
        feedback: str,
        reviewer_name: str,
        app_url: str,
    ) -> bool:
        """Tell the submitter their diagram was approved or rejected."""
        color = "#22C55E" if status == "approved" else "#EF4444"
        status_text = status.capitalize()
        feedback_html = (
            f"<p><strong>Feedback:</strong> {escape(feedback)}</p>" if feedback else ""
        )
        html = _wrap(
            f'<h2 style="color: #333;">BPMN {status_text}</h2>'
            f'<h3 style="color: {color};">{escape(title)}</h3>'
            f'<p><strong>Status:</strong> <span style="color: {color}; '
            f'font-weight: bold;">{status_text}</span></p>'
            f"<p><strong>Reviewed by:</strong> {escape(reviewer_name)}</p>"
            + feedback_html
            + _notifications_link(app_url, "View Details")
        )
        return await self.send(to, f"BPMN {status_text}: {title}", html)


_email_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    """Get the shared email sender."""
    global _email_sender
    if _email_sender is None:
        _email_sender = EmailSender()
    return _email_sender
