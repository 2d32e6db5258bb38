import logging
import requests
from eventhub.settings import (
    WHATSAPP_PHONE_NUMBER_ID,
    WHATSAPP_ACCESS_TOKEN,
    THIRD_PARTY_TIMEOUT_SECS,
)
from base.helpers.phone_number import to_international_number
from .base import DeliveryResult, demo_message_id

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com/v18.0"


def is_whatsapp_configured():
    return bool(WHATSAPP_PHONE_NUMBER_ID and WHATSAPP_ACCESS_TOKEN)


class WhatsAppService:
    """
    WhatsApp Cloud API. Business initiated messages must use a pre-approved
    template; free-form text only works inside the 24 hour customer window.
    """

    def _post(self, payload) -> DeliveryResult:
        try:
            response = requests.post(
                f"{GRAPH_API_URL}/{WHATSAPP_PHONE_NUMBER_ID}/messages",
                headers={"Authorization": f"Bearer {WHATSAPP_ACCESS_TOKEN}"},
                json=payload,
                timeout=THIRD_PARTY_TIMEOUT_SECS,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("WhatsApp request failed: %s", e)
            return DeliveryResult(success=False, error=str(e) or "WhatsApp service error")

        messages = data.get("messages") or []
        if messages and messages[0].get("id"):
            return DeliveryResult(success=True, message_id=messages[0]["id"])
        error = (data.get("error") or {}).get("message")
        return DeliveryResult(success=False, error=error or "Failed to send WhatsApp message")

    def send_template(self, phone_number, template_name, params=None) -> DeliveryResult:
        if not is_whatsapp_configured():
            logger.info(
                "WhatsApp not configured, logging template %s to %s: %s",
                template_name,
                phone_number,
                params,
            )
            return DeliveryResult(
                success=True,
                message_id=demo_message_id("demo-wa"),
                error="WhatsApp not configured - message logged",
                demo=True,
            )
        template = {"name": template_name, "language": {"code": "en"}}
        if params:
            template["components"] = [
                {
                    "type": "body",
                    "parameters": [{"type": "text", "text": str(p)} for p in params],
                }
            ]
        return self._post(
            {
                "messaging_product": "whatsapp",
                "to": to_international_number(phone_number),
                "type": "template",
                "template": template,
            }
        )

    def send_text(self, phone_number, message) -> DeliveryResult:
        if not is_whatsapp_configured():
            logger.info("WhatsApp not configured, logging text to %s: %s", phone_number, message)
            return DeliveryResult(
                success=True,
                message_id=demo_message_id("demo-wa-text"),
                error="WhatsApp not configured - message logged",
                demo=True,
            )
        return self._post(
            {
                "messaging_product": "whatsapp",
                "to": to_international_number(phone_number),
                "type": "text",
                "text": {"body": message},
            }
        )

    def send_ticket_confirmation(
        self, phone_number, attendee_name, event_name, event_date, ticket_id, ticket_url
    ):
        short_id = str(ticket_id)[-8:].upper()
        if is_whatsapp_configured():
            return self.send_template(
                phone_number,
                "ticket_confirmation",
                [attendee_name, event_name, event_date, short_id],
            )
        message = (
            f"*Ticket Confirmed!*\n\nHi {attendee_name}!\n\n"
            f"Your ticket for *{event_name}* on {event_date} is ready.\n\n"
            f"Ticket ID: {short_id}\n\nView ticket: {ticket_url}\n\n"
            "Show the QR code at the venue for entry."
        )
        return self.send_text(phone_number, message)
