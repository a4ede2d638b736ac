import httpx
from loguru import logger
from app.config import get_settings
from app.errors import NotificationError


async def send_email(to: str, subject: str, html: str) -> str:
    """Send an email via Resend API.

    Returns the Resend message id. Raises NotificationError on any failure;
    callers decide whether that is fatal (it never is for transition emails).
    """
    settings = get_settings()

    if not settings.resend_api_key:
        raise NotificationError(
            f"Resend API key not configured, cannot send '{subject}' to {to}"
        )

    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                "https://api.resend.com/emails",
                headers={
                    "Authorization": f"Bearer {settings.resend_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": f"{settings.resend_from_name} <{settings.resend_from_email}>",
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
                timeout=settings.email_timeout_seconds,
            )
    except httpx.TimeoutException:
        raise NotificationError(f"Resend API timeout sending to {to}")
    except httpx.HTTPError as e:
        raise NotificationError(f"Failed to reach Resend sending to {to}: {e}")

    if resp.status_code not in (200, 201):
        raise NotificationError(
            f"Resend API error {resp.status_code}: {resp.text[:200]} "
            f"(to={to}, subject={subject[:50]})"
        )

    message_id = resp.json().get("id", "unknown")
    logger.info(f"Email sent via Resend (id={message_id}, to={to})")
    return message_id
