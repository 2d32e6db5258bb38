import datetime
from unittest.mock import MagicMock
import pytest
from django.utils.timezone import now
from rest_framework.test import APIClient
from base.auth import JwtAuthentication
from base.models import TeamMember, TeamRole
from ticketing.models import Event, Ticket
from ticketing.pg import PhonePePaymentGateway, RazorpayPaymentGateway


@pytest.fixture(autouse=True)
def email_not_configured(monkeypatch):
    # Tests that need a configured relay patch these back in.
    monkeypatch.setattr("base.notifications.email.BREVO_API_KEY", "")
    monkeypatch.setattr("base.notifications.email.BREVO_SENDER_EMAIL", "")


@pytest.fixture
def api_client():
    return APIClient()


def client_for(member):
    client = APIClient()
    client.credentials(HTTP_JWT=JwtAuthentication().generate_jwt_token(member))
    return client


def make_member(role, email=None, **extra):
    return TeamMember.objects.create_member(
        email=email or f"{role}@eventhub.test",
        password="secret123",
        name=role.title(),
        role=role,
        **extra,
    )


@pytest.fixture
def admin_member(db):
    return make_member(TeamRole.ADMIN)


@pytest.fixture
def staff_member(db):
    return make_member(TeamRole.STAFF)


@pytest.fixture
def scanner_member(db):
    return make_member(TeamRole.SCANNER)


@pytest.fixture
def admin_client(admin_member):
    return client_for(admin_member)


@pytest.fixture
def staff_client(staff_member):
    return client_for(staff_member)


@pytest.fixture
def scanner_client(scanner_member):
    return client_for(scanner_member)


@pytest.fixture
def make_event(db):
    def _make_event(**kwargs):
        fields = {
            "name": "Tech Summit",
            "date": (now() + datetime.timedelta(days=10)).date(),
            "start_time": datetime.time(18, 0),
            "venue": "Convention Hall",
            "price": 50000,
        }
        fields.update(kwargs)
        return Event.objects.create(**fields)

    return _make_event


@pytest.fixture
def event(make_event):
    return make_event()


@pytest.fixture
def make_ticket(db):
    def _make_ticket(event, paid=False, **kwargs):
        fields = {"name": "Asha Rao", "email": "asha@example.com", "phone": "9876543210"}
        fields.update(kwargs)
        ticket = Ticket.objects.create(event=event, **fields)
        if paid:
            ticket.mark_paid(payment_id="pay_test", gateway="razorpay", amount=event.price)
        return ticket

    return _make_ticket


@pytest.fixture
def razorpay_client(monkeypatch):
    """Razorpay SDK client double installed as the gateway singleton."""
    client = MagicMock()
    client.order.create.side_effect = lambda data: {
        "id": "order_test123",
        "amount": data["amount"],
        "currency": data["currency"],
    }
    gateway = RazorpayPaymentGateway()
    gateway.client = client
    monkeypatch.setattr(RazorpayPaymentGateway, "_instance", gateway)
    return client


@pytest.fixture
def phonepe_mock_mode(monkeypatch):
    monkeypatch.setattr(PhonePePaymentGateway, "mock_mode", True)
    monkeypatch.setattr(PhonePePaymentGateway, "_instance", None)


@pytest.fixture
def member_client(db):
    """Factory: API client logged in as a new member with the given role."""

    def _member_client(role, **extra):
        member = make_member(role, email=f"{role}-{TeamMember.objects.count()}@eventhub.test", **extra)
        return client_for(member)

    return _member_client
