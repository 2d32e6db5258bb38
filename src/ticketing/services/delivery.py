import logging
from django.template.loader import render_to_string
from django.utils.timezone import now
from base.notifications import (
    DeliveryResult,
    EmailService,
    EmailAttachment,
    InlineImage,
)
from eventhub.settings import APP_URL, BASE_URL, SITE_NAME
from ticketing.models import EmailTemplate, WaitlistEntry
from .pdf import generate_ticket_pdf
from .qr import generate_qr_png, ticket_verification_url

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_STYLES = {
    "bg_color": "#111111",
    "text_color": "#ffffff",
    "accent_color": "#dc2626",
    "gradient_color": "#991b1b",
    "border_radius": 16,
    "font_family": "Arial, sans-serif",
    "logo_url": "",
}

FONT_FAMILIES = {
    "playfair": "Georgia, serif",
    "montserrat": "Verdana, sans-serif",
}


def build_email_styles(overrides=None):
    styles = dict(DEFAULT_EMAIL_STYLES)
    for key, value in (overrides or {}).items():
        if key in styles and value:
            styles[key] = value
    styles["font_family"] = FONT_FAMILIES.get(styles["font_family"], styles["font_family"])
    return styles


def format_event_date(event):
    return event.date.strftime("%A, %d %B %Y") if event.date else "TBA"


def template_context(ticket=None, event=None, extra=None):
    """Values for the ``{{placeholder}}`` markers of stored email templates."""
    event = event or (ticket.event if ticket else None)
    context = {"siteName": SITE_NAME, "year": now().year}
    if event is not None:
        context.update(
            {
                "eventName": event.name,
                "eventDate": format_event_date(event),
                "eventTime": event.start_time.strftime("%I:%M %p") if event.start_time else "",
                "eventVenue": event.venue or "TBA",
                "venue": event.venue or "TBA",
                "surveyLink": f"{APP_URL}/event/{event.event_id}/survey",
            }
        )
    if ticket is not None:
        context.update(
            {
                "name": ticket.name,
                "attendeeName": ticket.name,
                "ticketId": str(ticket.ticket_id),
                "ticketUrl": f"{BASE_URL}/ticket/{ticket.ticket_id}",
            }
        )
    context.update(extra or {})
    return context


class TicketDeliveryService:
    def __init__(self, email_service=None):
        self.email_service = email_service or EmailService()

    def send_confirmation(self, ticket, subject=None, styles=None, to=None) -> DeliveryResult:
        """
        Ticket confirmation with an inline QR code and the PDF e-ticket attached.
        Goes to the ticket holder unless ``to`` is given.
        """
        to = to or ticket.email
        if not to:
            return DeliveryResult(success=False, error="No email address on this ticket")
        if not ticket.token:
            ticket.issue_token()
            ticket.save(update_fields=["token"])
        event = ticket.event
        amount = ticket.amount_paid if ticket.amount_paid is not None else event.price
        html = render_to_string(
            "ticketing/emails/ticket_confirmation.html",
            {
                "ticket": ticket,
                "event": event,
                "event_date": format_event_date(event),
                "amount": f"{amount / 100:.2f}",
                "ticket_url": f"{BASE_URL}/ticket/{ticket.ticket_id}?success=true",
                "styles": build_email_styles(styles),
                "site_name": SITE_NAME,
                "year": now().year,
            },
        )
        qr_png = generate_qr_png(ticket_verification_url(ticket))
        pdf = generate_ticket_pdf(ticket)
        return self.email_service.send(
            to=to,
            to_name=ticket.name,
            subject=subject or f"Your Ticket for {event.name}",
            html_content=html,
            inline_images=[InlineImage(content_id="qrcode", content=qr_png)],
            attachments=[
                EmailAttachment(
                    filename=f"ticket-{str(ticket.ticket_id)[-8:].upper()}.pdf",
                    content=pdf,
                    content_type="application/pdf",
                )
            ],
        )

    def send_confirmation_safely(self, ticket, **kwargs):
        try:
            result = self.send_confirmation(ticket, **kwargs)
        except Exception as e:
            logger.error("Failed to send confirmation for ticket %s: %s", ticket.ticket_id, e)
            return DeliveryResult(success=False, error=str(e))
        if not result.success:
            logger.warning(
                "Confirmation email for ticket %s failed: %s", ticket.ticket_id, result.error
            )
        return result

    def send_template(self, template: EmailTemplate, ticket, extra=None) -> DeliveryResult:
        subject, body = template.render(template_context(ticket, extra=extra))
        html = render_to_string(
            "ticketing/emails/templated.html",
            {"body": body, "site_name": SITE_NAME, "year": now().year},
        )
        return self.email_service.send(
            to=ticket.email, to_name=ticket.name, subject=subject, html_content=html
        )

    def notify_waitlist(self, event):
        """
        Mark every pending waitlist entry of the event notified and email them.
        Email failures are logged and do not keep entries pending.
        """
        entries = list(WaitlistEntry.pending_for_event(event))
        if not entries:
            return 0
        WaitlistEntry.mark_notified(entries)
        for entry in entries:
            html = render_to_string(
                "ticketing/emails/waitlist.html",
                {
                    "name": entry.name,
                    "event": event,
                    "event_url": f"{APP_URL}/event/{event.event_id}",
                },
            )
            result = self.email_service.send(
                to=entry.email,
                to_name=entry.name,
                subject=f"Tickets available for {event.name}",
                html_content=html,
            )
            if not result.success:
                logger.warning("Waitlist email to %s failed: %s", entry.email, result.error)
        return len(entries)
