import smtplib
from email.message import EmailMessage
from typing import Optional
from core.config import settings
import logging

logger = logging.getLogger(__name__)

OTP_SUBJECTS = {
    "verification": "Verify Your Email - Aztech Coworks",
    "password_reset": "Reset Your Password - Aztech Coworks",
}

_OTP_COPY = {
    "verification": {
        "heading": "Verify Your Email",
        "intro": "Thank you for signing up! Please use the following OTP to verify your email address:",
        "ignore": "If you didn't request this verification, please ignore this email.",
    },
    "password_reset": {
        "heading": "Reset Your Password",
        "intro": "We received a request to reset your password. Use the following OTP to proceed:",
        "ignore": "If you didn't request a password reset, please ignore this email.",
    },
}


def _build_message(subject: str, to_email: str, html_body: str, text_body: Optional[str] = None) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>" if settings.SMTP_FROM_NAME else settings.SMTP_FROM_EMAIL
    msg["To"] = to_email
    if text_body:
        msg.set_content(text_body)
    msg.add_alternative(html_body, subtype="html")
    return msg


def send_email(subject: str, to_email: str, html_body: str, text_body: Optional[str] = None) -> bool:
    """Deliver one message over SMTP. Returns False instead of raising on transport errors."""
    if not settings.SMTP_HOST or not settings.SMTP_FROM_EMAIL:
        logger.warning("SMTP not configured; skipping email send")
        return False
    try:
        msg = _build_message(subject, to_email, html_body, text_body)
        timeout = settings.SMTP_TIMEOUT or 15
        debug = 1 if settings.SMTP_DEBUG else 0
        # Port 465 is implicit TLS
        if settings.SMTP_USE_SSL or settings.SMTP_PORT == 465:
            with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=timeout) as server:
                server.set_debuglevel(debug)
                if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
                server.send_message(msg)
        else:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=timeout) as server:
                server.set_debuglevel(debug)
                if settings.SMTP_USE_TLS:
                    server.starttls()
                if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
                server.send_message(msg)
        logger.info(f"Sent email to {to_email} with subject '{subject}'")
        return True
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"Failed to send email to {to_email}: {exc}")
        return False


def render_otp_email(otp_code: str, purpose: str, expiry_minutes: int):
    """Return (subject, html, text) for a one-time code email."""
    copy = _OTP_COPY[purpose]
    brand = settings.SMTP_FROM_NAME or "Aztech Coworks"
    expiry = f"{expiry_minutes} minutes"
    text = (
        f"{copy['heading']}\n\n"
        f"{copy['intro']}\n\n"
        f"{otp_code}\n\n"
        f"This code will expire in {expiry}.\n"
        f"{copy['ignore']}\n"
    )
    html = f"""
    <div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 40px auto; background: #ffffff; border-radius: 16px; overflow: hidden;">
      <div style="background: linear-gradient(135deg, #2563eb 0%, #3b82f6 100%); padding: 40px; text-align: center;">
        <h1 style="color: white; margin: 0; font-size: 28px;">{brand}</h1>
      </div>
      <div style="padding: 40px;">
        <h2 style="color: #1a1a1a; margin: 0 0 20px;">{copy['heading']}</h2>
        <p style="color: #666; font-size: 16px; line-height: 1.6;">{copy['intro']}</p>
        <div style="background: #f8fafc; border: 2px dashed #2563eb; border-radius: 12px; padding: 30px; text-align: center; margin: 30px 0;">
          <span style="font-size: 36px; font-weight: bold; color: #2563eb; letter-spacing: 8px;">{otp_code}</span>
        </div>
        <p style="color: #666; font-size: 14px;">This code will expire in <strong>{expiry}</strong>.</p>
        <p style="color: #999; font-size: 12px; margin-top: 30px;">{copy['ignore']}</p>
      </div>
    </div>
    """
    return OTP_SUBJECTS[purpose], html, text


def send_otp_email(to_email: str, otp_code: str, purpose: str, expiry_minutes: int = 10) -> bool:
    subject, html, text = render_otp_email(otp_code, purpose, expiry_minutes)
    return send_email(subject, to_email, html, text)
