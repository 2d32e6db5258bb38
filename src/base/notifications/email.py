import logging
from dataclasses import dataclass
from email.mime.image import MIMEImage
from email.utils import make_msgid
from typing import List, Optional
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils.html import strip_tags
from eventhub.settings import (
    BREVO_API_KEY,
    BREVO_SENDER_EMAIL,
    BREVO_SENDER_NAME,
    THIRD_PARTY_TIMEOUT_SECS,
)
from .base import DeliveryResult

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class InlineImage:
    content_id: str
    content: bytes
    subtype: str = "png"


def is_email_configured():
    return bool(BREVO_API_KEY and BREVO_SENDER_EMAIL)


class EmailService:
    """
    Transactional email through the Brevo SMTP relay. The SMTP host and
    credentials come from the Django EMAIL_* settings.
    """

    def format_address(self, email, name=None):
        if name:
            return f'"{name}" <{email}>'
        return email

    def send(
        self,
        to: str,
        subject: str,
        html_content: str,
        to_name: Optional[str] = None,
        text_content: Optional[str] = None,
        attachments: Optional[List[EmailAttachment]] = None,
        inline_images: Optional[List[InlineImage]] = None,
    ) -> DeliveryResult:
        if not is_email_configured():
            logger.warning("Brevo is not configured, skipping email to %s", to)
            return DeliveryResult(
                success=True, demo=True, error="Email skipped (Brevo not configured)"
            )

        message = EmailMultiAlternatives(
            subject=subject,
            body=text_content or strip_tags(html_content),
            from_email=self.format_address(BREVO_SENDER_EMAIL, BREVO_SENDER_NAME),
            to=[self.format_address(to, to_name)],
            connection=get_connection(timeout=THIRD_PARTY_TIMEOUT_SECS),
            headers={"Message-ID": make_msgid(domain=BREVO_SENDER_EMAIL.split("@")[-1])},
        )
        message.attach_alternative(html_content, "text/html")
        if inline_images:
            message.mixed_subtype = "related"
            for image in inline_images:
                part = MIMEImage(image.content, _subtype=image.subtype)
                part.add_header("Content-ID", f"<{image.content_id}>")
                part.add_header("Content-Disposition", "inline")
                message.attach(part)
        for attachment in attachments or []:
            message.attach(attachment.filename, attachment.content, attachment.content_type)

        try:
            logger.info("Sending email via Brevo SMTP to %s", to)
            message.send(fail_silently=False)
        except Exception as e:
            logger.error("Brevo SMTP error while mailing %s: %s", to, e)
            return DeliveryResult(success=False, error=str(e) or "Failed to send email")
        return DeliveryResult(success=True, message_id=message.extra_headers["Message-ID"])
