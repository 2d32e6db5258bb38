import datetime
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse
import pytest
from base.notifications import DeliveryResult
from ticketing.models import EmailTemplate, WaitlistEntry
from ticketing.services.calendar import escape_ics, generate_ics, google_calendar_url, ics_filename
from ticketing.services.delivery import TicketDeliveryService, build_email_styles, template_context
from ticketing.services.pdf import format_amount, generate_ticket_pdf
from ticketing.services.qr import generate_qr_data_url, generate_qr_png
from ticketing.services.report import check_in_rate


@pytest.fixture
def summit(make_event):
    return make_event(
        name="Tech Summit, 2030",
        date=datetime.date(2030, 1, 15),
        start_time=datetime.time(18, 0),
        description="Talks; demos",
        address="MG Road",
    )


@pytest.mark.django_db
class TestCalendar:
    def test_ics(self, summit):
        ics = generate_ics(summit)
        lines = ics.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-1] == "END:VCALENDAR"
        # 18:00 in Asia/Kolkata
        assert "DTSTART:20300115T123000Z" in lines
        assert "DTEND:20300115T143000Z" in lines
        assert "SUMMARY:Tech Summit\\, 2030" in lines
        assert "DESCRIPTION:Talks\\; demos" in lines
        assert "LOCATION:Convention Hall\\, MG Road" in lines
        assert ics.count("BEGIN:VALARM") == 2

    def test_end_time(self, make_event):
        event = make_event(
            date=datetime.date(2030, 1, 15),
            start_time=datetime.time(10, 0),
            end_time=datetime.time(11, 30),
        )
        assert "DTEND:20300115T060000Z" in generate_ics(event)

    def test_google_url(self, summit):
        url = urlparse(google_calendar_url(summit))
        params = parse_qs(url.query)
        assert url.netloc == "calendar.google.com"
        assert params["action"] == ["TEMPLATE"]
        assert params["dates"] == ["20300115T123000Z/20300115T143000Z"]
        assert params["location"] == ["Convention Hall"]

    def test_endpoints(self, api_client, summit):
        response = api_client.get(f"/api/events/{summit.event_id}/calendar/")
        assert response["Content-Type"].startswith("text/calendar")
        assert 'filename="tech-summit--2030.ics"' in response["Content-Disposition"]
        response = api_client.get(f"/api/events/{summit.event_id}/google_calendar/")
        assert response.data["url"].startswith("https://calendar.google.com/")

    def test_escape(self):
        assert escape_ics("a\\b\nc") == "a\\\\b\\nc"

    def test_filename(self, summit):
        assert ics_filename(summit) == "tech-summit--2030.ics"


class TestQrAndPdf:
    def test_qr_png(self):
        assert generate_qr_png("https://example.com").startswith(b"\x89PNG")
        assert generate_qr_data_url("x").startswith("data:image/png;base64,")

    @pytest.mark.django_db
    def test_ticket_pdf(self, event, make_ticket):
        pdf = generate_ticket_pdf(make_ticket(event, paid=True))
        assert pdf.startswith(b"%PDF")

    def test_format_amount(self):
        assert format_amount(50000) == "Rs. 500.00"
        assert format_amount(None) == "Rs. 0.00"

    def test_check_in_rate(self):
        assert check_in_rate(1, 3) == "33.3%"


@pytest.mark.django_db
class TestDelivery:
    def test_styles_fall_back_to_defaults(self):
        styles = build_email_styles({"accent_color": "#00ff00", "bg_color": "", "unknown": "x"})
        assert styles["accent_color"] == "#00ff00"
        assert styles["bg_color"] == "#111111"
        assert "unknown" not in styles

    def test_named_font(self):
        assert build_email_styles({"font_family": "playfair"})["font_family"] == "Georgia, serif"

    def test_template_context(self, event, make_ticket):
        ticket = make_ticket(event)
        context = template_context(ticket, extra={"custom": "1"})
        assert context["name"] == "Asha Rao"
        assert context["eventName"] == "Tech Summit"
        assert context["eventVenue"] == "Convention Hall"
        assert context["ticketId"] == str(ticket.ticket_id)
        assert context["custom"] == "1"

    def test_confirmation_attaches_pdf(self, event, make_ticket, monkeypatch, mailoutbox):
        monkeypatch.setattr("base.notifications.email.BREVO_API_KEY", "key")
        monkeypatch.setattr("base.notifications.email.BREVO_SENDER_EMAIL", "tickets@eventhub.test")
        ticket = make_ticket(event, paid=True)
        result = TicketDeliveryService().send_confirmation(ticket)
        assert result.success
        message = mailoutbox[0]
        assert message.subject == "Your Ticket for Tech Summit"
        files = [a for a in message.attachments if isinstance(a, tuple)]
        assert files[0][0] == f"ticket-{str(ticket.ticket_id)[-8:].upper()}.pdf"
        assert files[0][2] == "application/pdf"

    def test_confirmation_without_email(self, event, make_ticket):
        result = TicketDeliveryService().send_confirmation(make_ticket(event, email=""))
        assert not result.success

    def test_safe_send_logs_errors(self, event, make_ticket):
        email_service = MagicMock()
        email_service.send.side_effect = ConnectionError("relay down")
        result = TicketDeliveryService(email_service).send_confirmation_safely(
            make_ticket(event, paid=True)
        )
        assert not result.success
        assert result.error == "relay down"

    def test_template_email(self, event, make_ticket):
        email_service = MagicMock()
        email_service.send.return_value = DeliveryResult(success=True)
        template = EmailTemplate(subject="Hi {{name}}", body="<p>{{eventName}}</p>")
        TicketDeliveryService(email_service).send_template(template, make_ticket(event))
        kwargs = email_service.send.call_args.kwargs
        assert kwargs["subject"] == "Hi Asha Rao"
        assert "<p>Tech Summit</p>" in kwargs["html_content"]

    def test_notify_waitlist_survives_failures(self, event):
        WaitlistEntry.objects.create(event=event, name="A", email="a@example.com")
        email_service = MagicMock()
        email_service.send.return_value = DeliveryResult(success=False, error="bounced")
        assert TicketDeliveryService(email_service).notify_waitlist(event) == 1
        assert WaitlistEntry.objects.get().notified
        assert TicketDeliveryService(email_service).notify_waitlist(event) == 0
