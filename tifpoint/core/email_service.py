import logging

import httpx

from tifpoint.core.config import settings

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


def build_reset_url(reset_token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={reset_token}"


async def send_password_reset_email(to_email: str, to_name: str, reset_token: str) -> None:
    if not settings.BREVO_API_KEY:
        raise RuntimeError("BREVO_API_KEY not configured")

    reset_url = build_reset_url(reset_token)
    expire_minutes = settings.RESET_TOKEN_EXPIRE_MINUTES

    subject = "Reset your TIFPoint password"
    html = f"""
    <div style="font-family:Arial,sans-serif;max-width:560px;margin:auto;padding:24px">
      <h2 style="margin:0 0 12px 0;">Hello, {to_name}</h2>
      <p style="margin:0 0 16px 0;color:#444;line-height:1.5;">
        We received a request to reset your TIFPoint password.
        Use the button below to choose a new one.
      </p>

      <a href="{reset_url}"
         style="display:inline-block;background:#667eea;color:#fff;text-decoration:none;
                padding:12px 18px;border-radius:10px;font-weight:700;">
        RESET PASSWORD
      </a>

      <p style="margin:18px 0 0 0;color:#666;font-size:12px;">
        This link expires in {expire_minutes} minutes.
        If you did not request this, you can ignore this email.
      </p>
    </div>
    """

    payload = {
        "sender": {"name": settings.EMAIL_FROM_NAME, "email": settings.EMAIL_FROM},
        "to": [{"email": to_email, "name": to_name}],
        "subject": subject,
        "htmlContent": html,
    }

    async with httpx.AsyncClient(timeout=20) as client:
        r = await client.post(
            BREVO_SEND_URL,
            headers={"api-key": settings.BREVO_API_KEY, "Content-Type": "application/json"},
            json=payload,
        )
        if r.status_code >= 400:
            raise RuntimeError(f"Brevo error {r.status_code}: {r.text}")

    logger.info("Password reset email sent to user %s", to_email)
