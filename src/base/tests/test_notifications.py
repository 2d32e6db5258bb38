from unittest.mock import MagicMock
import pytest
from base.helpers.phone_number import (
    InvalidPhoneNumber,
    to_e164,
    to_international_number,
    to_local_indian_number,
)
from base.notifications import DeliveryResult, EmailService, SMSService, WhatsAppService
from base.notifications.sms import display_date


@pytest.fixture
def sms_configured(monkeypatch):
    monkeypatch.setattr("base.notifications.sms.SMS_PROVIDER", "fast2sms")
    monkeypatch.setattr("base.notifications.sms.FAST2SMS_API_KEY", "fast2sms-key")


@pytest.fixture
def whatsapp_configured(monkeypatch):
    monkeypatch.setattr("base.notifications.whatsapp.WHATSAPP_PHONE_NUMBER_ID", "1234")
    monkeypatch.setattr("base.notifications.whatsapp.WHATSAPP_ACCESS_TOKEN", "wa-token")


def fake_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


class TestPhoneNumbers:
    @pytest.mark.parametrize(
        "raw", ["9876543210", "+91 98765 43210", "919876543210", "98765-43210"]
    )
    def test_local_number(self, raw):
        assert to_local_indian_number(raw) == "9876543210"

    def test_invalid_number(self):
        with pytest.raises(InvalidPhoneNumber):
            to_local_indian_number("12345")

    def test_international_formats(self):
        assert to_international_number("9876543210") == "919876543210"
        assert to_e164("9876543210") == "+919876543210"


class TestDeliveryResult:
    def test_to_dict_drops_empty_fields(self):
        assert DeliveryResult(success=True, message_id="m1").to_dict() == {
            "success": True,
            "message_id": "m1",
            "demo": False,
        }


class TestSMS:
    def test_unconfigured_sms_is_logged(self, monkeypatch):
        monkeypatch.setattr("base.notifications.sms.SMS_PROVIDER", "fast2sms")
        monkeypatch.setattr("base.notifications.sms.FAST2SMS_API_KEY", "")
        result = SMSService().send("9876543210", "hello")
        assert result.success
        assert result.demo
        assert result.message_id.startswith("demo-")

    def test_fast2sms(self, sms_configured, monkeypatch):
        post = MagicMock(return_value=fake_response({"return": True, "request_id": "req-1"}))
        monkeypatch.setattr("base.notifications.sms.requests.post", post)
        result = SMSService().send("+91 98765 43210", "hello")
        assert result.success
        assert result.message_id == "req-1"
        assert post.call_args.kwargs["json"]["numbers"] == "9876543210"
        assert post.call_args.kwargs["headers"] == {"authorization": "fast2sms-key"}

    def test_fast2sms_rejection(self, sms_configured, monkeypatch):
        monkeypatch.setattr(
            "base.notifications.sms.requests.post",
            MagicMock(return_value=fake_response({"return": False, "message": "Invalid key"})),
        )
        result = SMSService().send("9876543210", "hello")
        assert not result.success
        assert result.error == "Invalid key"

    def test_invalid_number_is_reported(self, sms_configured):
        result = SMSService().send("123", "hello")
        assert not result.success
        assert result.error == "Invalid phone number format"

    def test_sns_provider(self, monkeypatch):
        monkeypatch.setattr("base.notifications.sms.SMS_PROVIDER", "sns")
        monkeypatch.setattr("base.notifications.sms.AWS_ACCESS_KEY_ID", "id")
        monkeypatch.setattr("base.notifications.sms.AWS_SECRET_ACCESS_KEY", "secret")
        client = MagicMock()
        client.publish.return_value = {"MessageId": "sns-1"}
        monkeypatch.setattr("base.notifications.sms.boto3.client", MagicMock(return_value=client))
        result = SMSService("sns").send("9876543210", "hello")
        assert result.message_id == "sns-1"
        assert client.publish.call_args.kwargs["PhoneNumber"] == "+919876543210"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            SMSService("pigeon")

    def test_ticket_confirmation_text(self, sms_configured, monkeypatch):
        post = MagicMock(return_value=fake_response({"return": True}))
        monkeypatch.setattr("base.notifications.sms.requests.post", post)
        SMSService().send_ticket_confirmation(
            "9876543210", "Asha", "Tech Summit", "2025-03-14", "abcd-1234-ef567890"
        )
        message = post.call_args.kwargs["json"]["message"]
        assert "14 Mar 2025" in message
        assert "EF567890" in message

    def test_display_date(self):
        assert display_date("") == "TBA"
        assert display_date("2025-12-01") == "01 Dec 2025"
        assert display_date("soon") == "soon"


class TestWhatsApp:
    def test_unconfigured_falls_back_to_log(self, monkeypatch):
        monkeypatch.setattr("base.notifications.whatsapp.WHATSAPP_PHONE_NUMBER_ID", "")
        result = WhatsAppService().send_ticket_confirmation(
            "9876543210", "Asha", "Tech Summit", "14 Mar", "ticket-1", "https://x/t/1"
        )
        assert result.success
        assert result.demo

    def test_template_message(self, whatsapp_configured, monkeypatch):
        post = MagicMock(return_value=fake_response({"messages": [{"id": "wamid.1"}]}))
        monkeypatch.setattr("base.notifications.whatsapp.requests.post", post)
        result = WhatsAppService().send_ticket_confirmation(
            "9876543210", "Asha", "Tech Summit", "14 Mar", "abcdef1234567890", ""
        )
        assert result.message_id == "wamid.1"
        payload = post.call_args.kwargs["json"]
        assert payload["to"] == "919876543210"
        assert payload["template"]["name"] == "ticket_confirmation"
        params = payload["template"]["components"][0]["parameters"]
        assert params[-1]["text"] == "34567890"

    def test_api_error(self, whatsapp_configured, monkeypatch):
        monkeypatch.setattr(
            "base.notifications.whatsapp.requests.post",
            MagicMock(return_value=fake_response({"error": {"message": "Template missing"}})),
        )
        result = WhatsAppService().send_text("9876543210", "hi")
        assert not result.success
        assert result.error == "Template missing"


class TestEmail:
    def test_unconfigured_email_is_skipped(self, mailoutbox):
        result = EmailService().send("a@example.com", "Hi", "<p>Hi</p>")
        assert result.success and result.demo
        assert mailoutbox == []

    def test_send(self, monkeypatch, mailoutbox):
        monkeypatch.setattr("base.notifications.email.BREVO_API_KEY", "key")
        monkeypatch.setattr("base.notifications.email.BREVO_SENDER_EMAIL", "tickets@eventhub.test")
        result = EmailService().send(
            "a@example.com", "Hi", "<p>Hello <b>there</b></p>", to_name="Asha"
        )
        assert result.success
        assert result.message_id.endswith("@eventhub.test>")
        message = mailoutbox[0]
        assert message.to == ['"Asha" <a@example.com>']
        assert message.body == "Hello there"


@pytest.mark.django_db
class TestNotificationEndpoint:
    payload = {
        "type": "ticket_confirmation",
        "channels": ["sms", "whatsapp", "email"],
        "data": {
            "phone": "9876543210",
            "attendee_name": "Asha",
            "event_name": "Tech Summit",
            "event_date": "2025-03-14",
            "ticket_id": "ticket-1",
        },
    }

    def test_requires_staff(self, scanner_client):
        response = scanner_client.post("/api/notifications/send/", self.payload, format="json")
        assert response.status_code == 403

    def test_fan_out_in_demo_mode(self, staff_client, monkeypatch):
        monkeypatch.setattr("base.notifications.sms.FAST2SMS_API_KEY", "")
        monkeypatch.setattr("base.notifications.sms.SMS_PROVIDER", "fast2sms")
        monkeypatch.setattr("base.notifications.whatsapp.WHATSAPP_PHONE_NUMBER_ID", "")
        response = staff_client.post("/api/notifications/send/", self.payload, format="json")
        assert response.status_code == 200
        assert response.data["success"] is True
        assert set(response.data["results"]) == {"sms", "whatsapp", "email"}
        assert response.data["results"]["sms"]["demo"] is True

    def test_phone_required(self, staff_client):
        payload = {**self.payload, "channels": ["sms"], "data": {**self.payload["data"], "phone": ""}}
        response = staff_client.post("/api/notifications/send/", payload, format="json")
        assert response.data["results"]["sms"] == {
            "success": False,
            "error": "Phone number required",
        }
        assert response.data["success"] is False

    def test_no_channels(self, staff_client):
        payload = {**self.payload, "channels": []}
        response = staff_client.post("/api/notifications/send/", payload, format="json")
        assert response.status_code == 400
        assert response.data["error"] == "No notification channels specified"

    def test_channel_status(self, staff_client):
        response = staff_client.get("/api/notifications/status/")
        assert response.status_code == 200
        assert set(response.data) == {"sms", "whatsapp", "email"}
