"""
MJML Email Templates
Booking notification emails for the business owner and the customer
"""

from html import escape
from typing import Optional

from .config import BUSINESS_NAME, BUSINESS_PHONE

THEME = {
    "primary": "#2563eb",
    "primary_dark": "#1d4ed8",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(title: str, preview_text: str, content_sections: str) -> str:
    """Base MJML template wrapper for all emails"""
    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="28px 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" font-weight="700" color="#ffffff" padding="0">
              {escape(BUSINESS_NAME)}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="32px 40px 40px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {escape(BUSINESS_NAME)} · {escape(BUSINESS_PHONE)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_table(rows: list[tuple[str, Optional[str]]]) -> str:
    cells = "".join(
        f"""
        <tr>
          <td style="padding: 8px 12px; color: {THEME['text_muted']}; width: 35%;">{label}</td>
          <td style="padding: 8px 12px; color: {THEME['text_primary']}; font-weight: 600;">{escape(value)}</td>
        </tr>
        """
        for label, value in rows
        if value
    )
    return f"""
    <mj-table border="1px solid {THEME['border']}" cellpadding="0" padding="8px 0 16px 0">
      {cells}
    </mj-table>
    """


def admin_booking_notification_template(
    booking_id: str,
    customer_name: str,
    customer_email: str,
    customer_phone: Optional[str],
    appointment_date: str,
    appointment_time: str,
    service_type: Optional[str],
    notes: Optional[str],
) -> str:
    """New booking alert for the business owner"""
    details = _details_table(
        [
            ("Booking ID", "#" + booking_id),
            ("Customer", customer_name),
            ("Email", customer_email),
            ("Phone", customer_phone),
            ("Date", appointment_date),
            ("Time", appointment_time),
            ("Service", service_type),
            ("Notes", notes),
        ]
    )
    content = f"""
    <mj-text padding="0 0 16px 0">
      A new appointment has been booked on the website.
    </mj-text>
    {details}
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="0">
      The appointment is pending. Confirm or cancel it from the admin dashboard.
    </mj-text>
    """
    return get_base_template(
        title="New Appointment Booking",
        preview_text=escape(f"{customer_name} booked {appointment_date} at {appointment_time}"),
        content_sections=content,
    )


def customer_booking_confirmation_template(
    booking_id: str,
    customer_name: str,
    appointment_date: str,
    appointment_time: str,
    service_type: Optional[str],
) -> str:
    """Booking receipt for the customer"""
    details = _details_table(
        [
            ("Booking ID", "#" + booking_id),
            ("Date", appointment_date),
            ("Time", appointment_time),
            ("Service", service_type),
        ]
    )
    content = f"""
    <mj-text padding="0 0 16px 0">
      Hi {escape(customer_name)}, thank you for booking with us. Here are your appointment details:
    </mj-text>
    {details}
    <mj-text padding="0">
      Need to reschedule? Call us at {escape(BUSINESS_PHONE)} and quote your booking ID.
    </mj-text>
    """
    return get_base_template(
        title="Appointment Confirmed",
        preview_text=escape(f"Your appointment on {appointment_date} at {appointment_time}"),
        content_sections=content,
    )
