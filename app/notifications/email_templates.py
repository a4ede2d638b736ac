# Apply Bureau email templates, HTML bodies sent through Resend
# Colors: primary #0D9488, background #0F172A, light #F8FAFC
from html import escape

BASE_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta name="color-scheme" content="light only">
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 0; background: #F8FAFC; }}
    .container {{ max-width: 600px; margin: 0 auto; background: white; }}
    .header {{ background: #0F172A; padding: 24px; text-align: center; }}
    .header h1 {{ color: #0D9488; margin: 0; font-size: 24px; letter-spacing: 1px; }}
    .content {{ padding: 32px 24px; color: #1E293B; line-height: 1.6; }}
    .content h2 {{ color: #0F172A; margin-top: 0; }}
    .btn {{ display: inline-block; padding: 14px 28px; border-radius: 8px; text-decoration: none; font-weight: 600; font-size: 16px; margin: 8px 4px; }}
    .btn-primary {{ background: #0D9488; color: white !important; }}
    .btn-view {{ background: #6366F1; color: white !important; }}
    .card {{ border: 1px solid #E2E8F0; border-radius: 8px; padding: 16px; margin: 16px 0; background: #F8FAFC; }}
    .card-label {{ font-size: 12px; color: #94A3B8; text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 4px; }}
    .card-value {{ font-size: 15px; color: #1E293B; font-weight: 500; }}
    .footer {{ padding: 16px 24px; text-align: center; color: #94A3B8; font-size: 12px; border-top: 1px solid #E2E8F0; }}
    .timestamp {{ color: #94A3B8; font-size: 13px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Apply Bureau</h1>
    </div>
    <div class="content">
      {content}
    </div>
    <div class="footer">
      <p>Apply Bureau &mdash; Career Concierge</p>
      <p>This is an automated notification. Do not reply to this email.</p>
    </div>
  </div>
</body>
</html>
"""


def _card(label: str, value: str) -> str:
    return (
        f'<div class="card"><div class="card-label">{label}</div>'
        f'<div class="card-value">{value}</div></div>'
    )


def _slots_html(slots: list[dict]) -> str:
    items = "".join(
        f"<li>{escape(str(s.get('date', '')))} at {escape(str(s.get('time', '')))}</li>"
        for s in slots
    )
    return f"<ol>{items}</ol>"


def render_request_received(
    client_name: str,
    preferred_slots: list[dict],
    message: str | None,
) -> str:
    """Sent to the CLIENT after booking a strategy call."""
    content = f"""
    <h2>Strategy Call Request Received</h2>
    <p>Hi {escape(client_name)},</p>
    <p>Thanks for booking your strategy call. These are the times you proposed:</p>

    {_slots_html(preferred_slots)}

    {_card("Your message", escape(message)) if message else ""}

    <p><strong>Next steps:</strong> a lead strategist will review your request and
    confirm one of your preferred times within 24 hours.</p>
    """
    return BASE_TEMPLATE.format(content=content)


def render_new_request_admin(
    client_name: str,
    client_email: str,
    preferred_slots: list[dict],
    message: str | None,
    dashboard_url: str,
) -> str:
    """Sent to the ADMIN inbox when a client books a strategy call."""
    content = f"""
    <h2>New Strategy Call Request</h2>
    <p><strong>{escape(client_name)}</strong> ({escape(client_email)}) requested a strategy call.</p>

    {_slots_html(preferred_slots)}

    {_card("Client message", escape(message or "No message provided"))}

    <p style="text-align: center; margin-top: 24px;">
      <a href="{dashboard_url}" class="btn btn-view">Review in Dashboard</a>
    </p>
    """
    return BASE_TEMPLATE.format(content=content)


def render_call_confirmed(
    client_name: str,
    call_date: str,
    call_time: str,
    call_duration: str,
    meeting_link: str | None,
    admin_notes: str | None = None,
) -> str:
    """Sent to the CLIENT once an admin confirms one of the proposed slots."""
    meeting = (
        f'<a href="{escape(meeting_link)}">{escape(meeting_link)}</a>'
        if meeting_link
        else "A Lead Strategist will contact you at the scheduled time."
    )
    content = f"""
    <h2>Your Strategy Call Is Confirmed</h2>
    <p>Hi {escape(client_name)},</p>
    <p>This call aligns your goals, role targets, and application strategy.</p>

    {_card("Date", escape(call_date))}
    {_card("Time", escape(call_time))}
    {_card("Duration", escape(call_duration))}
    {_card("Meeting", meeting)}
    {_card("Notes from your strategist", escape(admin_notes)) if admin_notes else ""}

    <p class="timestamp">
      Please mark this time in your calendar. We look forward to discussing your career goals!
    </p>
    """
    return BASE_TEMPLATE.format(content=content)


def render_call_cancelled(
    client_name: str,
    reason: str | None,
    booking_url: str,
) -> str:
    """Sent to the CLIENT when an admin cancels a pending or confirmed call."""
    content = f"""
    <h2>Strategy Call Cancelled</h2>
    <p>Hi {escape(client_name)},</p>
    <p>Your strategy call request has been cancelled.</p>

    {_card("Reason", escape(reason)) if reason else ""}

    <p style="text-align: center; margin-top: 24px;">
      <a href="{booking_url}" class="btn btn-primary">Book a New Time</a>
    </p>
    """
    return BASE_TEMPLATE.format(content=content)


def render_onboarding_approved(client_name: str, dashboard_url: str) -> str:
    """Sent to the CLIENT when an admin unlocks the account."""
    content = f"""
    <h2>Your Account Is Unlocked</h2>
    <p>Hi {escape(client_name)},</p>
    <p>Your account has been unlocked and you now have full access to your dashboard.</p>

    <p><strong>Next steps:</strong> log in to your dashboard to start tracking your
    applications and accessing all features.</p>

    <p style="text-align: center; margin-top: 24px;">
      <a href="{dashboard_url}" class="btn btn-primary">Open Dashboard</a>
    </p>
    """
    return BASE_TEMPLATE.format(content=content)
