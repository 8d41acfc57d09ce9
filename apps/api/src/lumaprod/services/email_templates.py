"""
Email templates for the creator notifications.

Templates return the subject, HTML body and list headers; sending is done
by the notification tasks through EmailClient.
"""

from dataclasses import dataclass, field
from datetime import date
from html import escape

from lumaprod.models import ContentMode

BRAND_NAME = "Free Luma"
BRAND_COLOR = "#0d9488"

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Creators are asked to finish a month's recordings by this day
DUE_DAY = 15


@dataclass
class RenderedEmail:
    """A rendered message ready to send."""

    subject: str
    html: str
    headers: dict[str, str] = field(default_factory=dict)


def _list_headers(app_url: str) -> dict[str, str]:
    return {
        "List-Unsubscribe": f"<{app_url}/api/email/unsubscribe?category=creator>",
        "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
    }


def _action_button(url: str, label: str) -> str:
    return (
        '<table role="presentation" width="100%" cellspacing="0" cellpadding="0">'
        '<tr><td align="center" style="padding:24px 0;">'
        f'<a href="{escape(url)}" target="_blank" style="display:inline-block;padding:14px 32px;'
        f'background:{BRAND_COLOR};color:#ffffff;font-size:16px;font-weight:600;'
        f'text-decoration:none;border-radius:8px;">{escape(label)}</a>'
        "</td></tr></table>"
    )


def _base_template(content: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head>"
        '<body style="margin:0;padding:0;background:#f4f4f5;font-family:Arial,sans-serif;">'
        '<table role="presentation" width="100%" cellspacing="0" cellpadding="0">'
        '<tr><td align="center" style="padding:32px 16px;">'
        '<table role="presentation" width="560" cellspacing="0" cellpadding="0" '
        'style="background:#ffffff;border-radius:12px;">'
        f'<tr><td style="padding:32px;">{content}</td></tr>'
        f'<tr><td style="padding:16px 32px;font-size:12px;color:#a1a1aa;text-align:center;">{BRAND_NAME}</td></tr>'
        "</table></td></tr></table></body></html>"
    )


def month_display(month: str) -> str:
    """``2026-11`` -> ``November 2026``."""
    year, month_number = month.split("-")
    return f"{MONTH_NAMES[int(month_number) - 1]} {year}"


def creator_assignment_email(
    creator_name: str,
    month: str,
    mode: ContentMode | str,
    count: int,
    app_url: str,
) -> RenderedEmail:
    """Render the batched "new scripts assigned" email."""
    month_label = month_display(month)
    month_name, year = month_label.split(" ")
    mode_label = ContentMode(mode).label
    plural = "s" if count != 1 else ""

    content = (
        '<h2 style="margin:0 0 16px;font-size:20px;color:#18181b;">New Scripts Assigned</h2>'
        f'<p style="margin:0 0 8px;font-size:15px;color:#3f3f46;">Hi {escape(creator_name)},</p>'
        '<p style="margin:0 0 16px;font-size:15px;color:#3f3f46;">'
        f"You have been assigned <strong>{count} new script{plural}</strong> "
        f"for <strong>{month_label}</strong>.</p>"
        f'<div style="padding:16px;background:#f0fdfa;border-radius:8px;border-left:3px solid {BRAND_COLOR};">'
        f'<p style="margin:0 0 4px;font-size:14px;color:#52525b;"><strong>Mode:</strong> {mode_label}</p>'
        f'<p style="margin:0 0 4px;font-size:14px;color:#52525b;"><strong>Scripts:</strong> {count}</p>'
        f'<p style="margin:0;font-size:14px;color:#52525b;"><strong>Due date:</strong> '
        f"{month_name} {DUE_DAY}, {year}</p></div>"
        '<p style="margin:16px 0;font-size:15px;color:#3f3f46;">'
        "Please log in to your creator portal to view your assigned scripts and start recording.</p>"
        f"{_action_button(f'{app_url}/creator', 'Open Creator Portal')}"
        f'<p style="margin:0;font-size:13px;color:#71717a;text-align:center;">'
        f"Thank you for being a {BRAND_NAME} creator.</p>"
    )

    return RenderedEmail(
        subject=f"New Scripts Assigned - {month_label}",
        html=_base_template(content),
        headers=_list_headers(app_url),
    )


def creator_rejection_email(
    creator_name: str,
    post_date: date,
    note: str,
    mode: ContentMode | str,
    app_url: str,
) -> RenderedEmail:
    """Render the "video needs re-recording" email."""
    date_label = post_date.isoformat()
    mode_label = ContentMode(mode).label

    content = (
        '<h2 style="margin:0 0 16px;font-size:20px;color:#18181b;">Video Needs Re-Recording</h2>'
        f'<p style="margin:0 0 8px;font-size:15px;color:#3f3f46;">Hi {escape(creator_name)},</p>'
        '<p style="margin:0 0 16px;font-size:15px;color:#3f3f46;">'
        f"Your submitted video for <strong>{date_label}</strong> ({mode_label}) has been reviewed "
        "and needs to be re-recorded.</p>"
        '<div style="padding:16px;background:#fef2f2;border-radius:8px;border-left:3px solid #ef4444;">'
        '<p style="margin:0 0 4px;font-size:12px;font-weight:600;color:#991b1b;text-transform:uppercase;">'
        "Feedback from reviewer</p>"
        f'<p style="margin:0;font-size:14px;color:#991b1b;">{escape(note)}</p></div>'
        '<p style="margin:16px 0;font-size:15px;color:#3f3f46;">'
        "Please log in to your creator portal to review the feedback and upload a new recording.</p>"
        f"{_action_button(f'{app_url}/creator', 'Open Creator Portal')}"
        '<p style="margin:0;font-size:13px;color:#71717a;text-align:center;">'
        "Thank you for your dedication to quality content.</p>"
    )

    return RenderedEmail(
        subject=f"Video Needs Re-Recording - {date_label}",
        html=_base_template(content),
        headers=_list_headers(app_url),
    )
