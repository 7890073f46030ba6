import asyncio
import logging
from datetime import datetime

import aiohttp
from .config import settings
from .errors import DispatchError

logger = logging.getLogger(__name__)


def build_otp_message(code: str, expiry_minutes: int) -> dict:
    """Subject, HTML and plain-text bodies for a password reset OTP email."""
    year = datetime.now().year
    brand = settings.EMAIL_FROM_NAME

    html_body = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; background-color: #f4f4f4; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
            .content {{ background: #ffffff; padding: 30px; border-radius: 0 0 10px 10px; }}
            .otp-box {{ background: #f8f9fa; border: 2px dashed #667eea; padding: 20px; text-align: center; margin: 20px 0; border-radius: 8px; }}
            .otp-code {{ font-size: 36px; font-weight: bold; color: #667eea; letter-spacing: 8px; font-family: 'Courier New', monospace; }}
            .warning {{ background-color: #fff3cd; border-left: 4px solid #ffc107; color: #856404; padding: 15px; font-size: 14px; }}
            .footer {{ text-align: center; color: #999; font-size: 12px; margin-top: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{brand}</h1>
            </div>
            <div class="content">
                <h2>Password Reset Request</h2>
                <p>You requested to reset your password. Use the OTP below to proceed with resetting your password.</p>

                <div class="otp-box">
                    <div class="otp-code">{code}</div>
                </div>

                <p class="warning"><strong>Important:</strong> This OTP will expire in <strong>{expiry_minutes} minutes</strong>.
                If you didn't request this password reset, please ignore this email.</p>

                <p>For security reasons, never share this OTP with anyone. Our team will never ask for your OTP.</p>

                <div class="footer">
                    <p>This is an automated email. Please do not reply to this message.</p>
                    <p>&copy; {year} {brand}. All rights reserved.</p>
                </div>
            </div>
        </div>
    </body>
    </html>
    """

    text_body = f"""
{brand} - Password Reset OTP

You requested to reset your password. Use the OTP below to proceed:

OTP: {code}

This OTP will expire in {expiry_minutes} minutes.

If you didn't request this password reset, please ignore this email.

For security reasons, never share this OTP with anyone.

(c) {year} {brand}
    """

    return {
        "subject": f"Password Reset OTP - {brand}",
        "html": html_body,
        "text": text_body,
    }


class BrevoEmailSender:
    """Delivers OTP emails through the Brevo transactional email API."""

    def __init__(self, api_key: str = None, api_url: str = None, dev_mode: bool = None):
        self.api_key = settings.BREVO_API_KEY if api_key is None else api_key
        self.api_url = api_url or settings.BREVO_API_URL
        self.dev_mode = settings.EMAIL_DEV_MODE if dev_mode is None else dev_mode

    def build_payload(self, to_email: str, code: str, expiry_minutes: int) -> dict:
        message = build_otp_message(code, expiry_minutes)
        return {
            "sender": {
                "name": settings.EMAIL_FROM_NAME,
                "email": settings.EMAIL_FROM_ADDRESS,
            },
            "to": [{"email": to_email}],
            "subject": message["subject"],
            "htmlContent": message["html"],
            "textContent": message["text"],
        }

    async def send(self, to_email: str, code: str, expiry_minutes: int) -> None:
        """Send the OTP; raise DispatchError if it could not be delivered."""
        if self.dev_mode:
            logger.warning("[DEV MODE] OTP for %s: %s", to_email, code)
            return

        if not self.api_key:
            raise DispatchError("Email credentials not configured")

        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = self.build_payload(to_email, code, expiry_minutes)
        timeout = aiohttp.ClientTimeout(total=settings.EMAIL_TIMEOUT_SECONDS)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.api_url, json=payload, headers=headers) as response:
                    result = await response.json(content_type=None)
                    if response.status != 201:
                        logger.error("Brevo rejected email to %s: status=%s body=%s", to_email, response.status, result)
                        raise DispatchError()
                    message_id = (result or {}).get("messageId", "unknown")
                    logger.info("OTP email sent to %s, message_id=%s", to_email, message_id)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise DispatchError() from exc
