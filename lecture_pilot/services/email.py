from __future__ import annotations

import logging

import httpx

from lecture_pilot.core.config import Settings, settings as default_settings
from lecture_pilot.schemas import EmailResult

logger = logging.getLogger(__name__)


def welcome_email_template(student_name: str) -> tuple[str, str]:
    subject = f"🎉 Welcome to ReviseRight, {student_name}!"
    body = f"""Hi {student_name},

On behalf of the whole team, a huge welcome to ReviseRight! We're thrilled to have you join our community and start your learning journey with us.

🚀 Your Quick-Start Checklist:
1. Complete Your Profile in settings.
2. Upload your first lecture to see the AI magic happen!

We are here to support you every step of the way.

Happy learning!

The ReviseRight Team
https://reviseright.com
"""
    return subject, body


async def _send_via_emailjs(cfg: Settings, to_email: str, to_name: str, subject: str, body: str) -> None:
    payload = {
        "service_id": cfg.emailjs_service_id,
        "template_id": cfg.emailjs_template_id,
        "user_id": cfg.emailjs_public_key,
        "template_params": {
            "to_email": to_email,
            "to_name": to_name,
            "subject": subject,
            "message": body,
        },
    }
    async with httpx.AsyncClient(timeout=cfg.http_timeout_sec) as client:
        r = await client.post(cfg.emailjs_api_url, json=payload)
        r.raise_for_status()


async def send_welcome_email(email: str, name: str, *, cfg: Settings | None = None) -> EmailResult:
    """
    Real send via EmailJS when all three credentials are configured; otherwise,
    or if the send fails, a simulated result carrying the same subject/body.
    Never raises.
    """
    cfg = cfg or default_settings
    subject, body = welcome_email_template(name)

    if cfg.emailjs_configured:
        try:
            await _send_via_emailjs(cfg, email, name, subject, body)
            logger.info("Welcome email sent to %s via EmailJS", email)
            return EmailResult(success=True, subject=subject, body=body, simulated=False)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError) as e:
            logger.warning("EmailJS send failed, simulating instead: %s", e)
    else:
        logger.warning("EmailJS credentials missing, simulating welcome email")

    logger.info("[Email Simulation] Sending to %s", email)
    return EmailResult(success=True, subject=subject, body=body, simulated=True)
