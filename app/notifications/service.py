"""Best-effort transactional emails for strategy calls and account unlocks.

Every function returns True when the email was handed to Resend and False
otherwise. Delivery failures are logged here and never raised, so they
cannot undo a status change that has already been written.
"""
from loguru import logger
from app.config import get_settings
from app.errors import NotificationError
from app.notifications.email_sender import send_email
from app.notifications.email_templates import (
    render_request_received,
    render_new_request_admin,
    render_call_confirmed,
    render_call_cancelled,
    render_onboarding_approved,
)


async def _deliver(to: str, subject: str, html: str, context: str) -> bool:
    try:
        await send_email(to=to, subject=subject, html=html)
    except NotificationError as e:
        logger.error(f"Notification failed ({context}, to={to}): {e.message}")
        return False
    return True


async def send_request_received(call: dict) -> bool:
    """Notification 1: booking acknowledgement to the client."""
    html = render_request_received(
        client_name=call.get("client_name") or "there",
        preferred_slots=call.get("preferred_slots") or [],
        message=call.get("message"),
    )
    return await _deliver(
        call["client_email"],
        "Strategy call request received",
        html,
        context=f"strategy_call={call['id']} request_received",
    )


async def send_new_request_admin(call: dict) -> bool:
    """Notification 2: new booking alert to the admin inbox."""
    settings = get_settings()
    html = render_new_request_admin(
        client_name=call.get("client_name") or "Unknown client",
        client_email=call.get("client_email") or "",
        preferred_slots=call.get("preferred_slots") or [],
        message=call.get("message"),
        dashboard_url=f"{settings.app_base_url}/admin/strategy-calls",
    )
    return await _deliver(
        settings.admin_notification_email,
        f"New strategy call request from {call.get('client_name') or 'a client'}",
        html,
        context=f"strategy_call={call['id']} new_request_admin",
    )


async def send_call_confirmed(call: dict, slot: dict) -> bool:
    """Notification 3: confirmed time, meeting link and notes to the client."""
    settings = get_settings()
    html = render_call_confirmed(
        client_name=call.get("client_name") or "there",
        call_date=str(slot.get("date", "")),
        call_time=str(slot.get("time", "")),
        call_duration=settings.strategy_call_duration,
        meeting_link=call.get("meeting_link"),
        admin_notes=call.get("admin_notes"),
    )
    return await _deliver(
        call["client_email"],
        "Your strategy call is confirmed",
        html,
        context=f"strategy_call={call['id']} confirmed",
    )


async def send_call_cancelled(call: dict) -> bool:
    """Notification 4: cancellation notice to the client."""
    settings = get_settings()
    html = render_call_cancelled(
        client_name=call.get("client_name") or "there",
        reason=call.get("cancellation_reason"),
        booking_url=f"{settings.app_base_url}/dashboard/strategy-call",
    )
    return await _deliver(
        call["client_email"],
        "Your strategy call was cancelled",
        html,
        context=f"strategy_call={call['id']} cancelled",
    )


async def send_onboarding_approved(client: dict) -> bool:
    """Notification 5: account unlocked."""
    settings = get_settings()
    html = render_onboarding_approved(
        client_name=client.get("full_name") or "there",
        dashboard_url=f"{settings.app_base_url}/dashboard",
    )
    return await _deliver(
        client["email"],
        "Your Apply Bureau account is unlocked",
        html,
        context=f"client={client['id']} onboarding_approved",
    )
