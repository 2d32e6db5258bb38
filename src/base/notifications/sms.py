import logging
import boto3
import dateutil.parser
import requests
from eventhub.settings import (
    SMS_PROVIDER,
    FAST2SMS_API_KEY,
    AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY,
    SNS_REGION_NAME,
    SNS_SENDER_ID,
    THIRD_PARTY_TIMEOUT_SECS,
)
from base.helpers.phone_number import (
    InvalidPhoneNumber,
    to_local_indian_number,
    to_e164,
)
from .base import DeliveryResult, demo_message_id

logger = logging.getLogger(__name__)

FAST2SMS_URL = "https://www.fast2sms.com/dev/bulkV2"


def display_date(value):
    """Short date for SMS text. Unparseable values are used as given."""
    if not value:
        return "TBA"
    try:
        return dateutil.parser.parse(str(value)).strftime("%d %b %Y")
    except (ValueError, OverflowError):
        return str(value)


def is_sms_configured():
    if SMS_PROVIDER == "sns":
        return bool(AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY)
    return bool(FAST2SMS_API_KEY)


class Fast2SMSProvider:
    name = "fast2sms"

    def send(self, phone_number, message) -> DeliveryResult:
        number = to_local_indian_number(phone_number)
        response = requests.post(
            FAST2SMS_URL,
            headers={"authorization": FAST2SMS_API_KEY},
            json={
                "route": "q",  # quick transactional route
                "message": message,
                "language": "english",
                "flash": 0,
                "numbers": number,
            },
            timeout=THIRD_PARTY_TIMEOUT_SECS,
        )
        data = response.json()
        if data.get("return") is True:
            return DeliveryResult(success=True, message_id=data.get("request_id"))
        return DeliveryResult(
            success=False, error=data.get("message") or "Failed to send SMS"
        )


class SNSProvider:
    name = "sns"

    def __init__(self):
        self.client = boto3.client(
            "sns",
            aws_access_key_id=AWS_ACCESS_KEY_ID,
            aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
            region_name=SNS_REGION_NAME,
        )

    def send(self, phone_number, message) -> DeliveryResult:
        number = to_e164(to_local_indian_number(phone_number))
        response = self.client.publish(
            PhoneNumber=number,
            Message=message,
            MessageAttributes={
                "AWS.SNS.SMS.SenderID": {
                    "DataType": "String",
                    "StringValue": SNS_SENDER_ID,
                },
                "AWS.SNS.SMS.SMSType": {
                    "DataType": "String",
                    "StringValue": "Transactional",
                },
            },
        )
        return DeliveryResult(success=True, message_id=response["MessageId"])


SMS_PROVIDERS = {
    "fast2sms": Fast2SMSProvider,
    "sns": SNSProvider,
}


class SMSService:
    provider = None

    def __init__(self, provider_name=None):
        self.provider_name = provider_name or SMS_PROVIDER
        if self.provider_name not in SMS_PROVIDERS:
            raise ValueError(f"Unknown SMS provider: {self.provider_name}")

    def get_provider(self):
        if self.provider is None:
            self.provider = SMS_PROVIDERS[self.provider_name]()
        return self.provider

    def send(self, phone_number, message) -> DeliveryResult:
        if not is_sms_configured():
            logger.info("SMS not configured, logging message to %s: %s", phone_number, message)
            return DeliveryResult(
                success=True,
                message_id=demo_message_id(),
                error="SMS service not configured - message logged",
                demo=True,
            )
        try:
            return self.get_provider().send(phone_number, message)
        except InvalidPhoneNumber as e:
            return DeliveryResult(success=False, error=str(e))
        except Exception as e:
            logger.error("Error sending SMS via %s: %s", self.provider_name, e)
            return DeliveryResult(success=False, error=str(e) or "SMS service error")

    def send_ticket_confirmation(self, phone_number, attendee_name, event_name, event_date, ticket_id):
        message = (
            f"Hi {attendee_name}! Your ticket for {event_name} on {display_date(event_date)} is confirmed. "
            f"Ticket ID: {str(ticket_id)[-8:].upper()}. Show QR code at entry."
        )
        return self.send(phone_number, message)

    def send_event_reminder(self, phone_number, attendee_name, event_name, venue):
        message = (
            f"Reminder: {event_name} is tomorrow at {venue}! "
            f"Don't forget your ticket. See you there, {attendee_name}!"
        )
        return self.send(phone_number, message)
