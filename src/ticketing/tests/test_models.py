import datetime
import pytest
from django.core.exceptions import ValidationError
from django.utils.timezone import now
from ticketing.models import (
    DiscountType,
    EmailTemplate,
    Event,
    Group,
    PromoCode,
    Ticket,
    TicketStatus,
)
from ticketing.services.order import build_quote, normalize_attendees
from ticketing.services.tokens import generate_ticket_token, verify_ticket_token


@pytest.mark.django_db
class TestEventPricing:
    def test_regular_price(self, event):
        assert event.current_price() == 50000

    def test_early_bird_before_deadline(self, make_event):
        event = make_event(
            early_bird_enabled=True,
            early_bird_price=30000,
            early_bird_deadline=now() + datetime.timedelta(days=1),
        )
        assert event.current_price() == 30000

    def test_early_bird_after_deadline(self, make_event):
        event = make_event(
            early_bird_enabled=True,
            early_bird_price=30000,
            early_bird_deadline=now() - datetime.timedelta(minutes=1),
        )
        assert event.current_price() == 50000

    def test_early_bird_price_cannot_exceed_price(self, make_event):
        with pytest.raises(ValidationError):
            make_event(early_bird_enabled=True, early_bird_price=60000)

    def test_start_before_end(self, make_event):
        with pytest.raises(ValidationError):
            make_event(start_time=datetime.time(20, 0), end_time=datetime.time(19, 0))


@pytest.mark.django_db
class TestCapacity:
    def test_unlimited(self, event):
        assert event.seats_left is None
        assert event.has_capacity_for(10_000)
        assert not event.is_sold_out

    def test_limited(self, make_event):
        event = make_event(capacity=2, sold_count=1)
        assert event.seats_left == 1
        assert event.has_capacity_for(1)
        assert not event.has_capacity_for(2)

    def test_sold_counter_never_negative(self, event):
        event.decrement_sold(1)
        assert event.sold_count == 0

    def test_duplicate_resets_sales(self, make_event):
        event = make_event(capacity=10, sold_count=4)
        copy = event.duplicate()
        assert copy.pk != event.pk
        assert copy.name == "Tech Summit (Copy)"
        assert copy.sold_count == 0
        assert Event.objects.count() == 2

    def test_registration_deadline(self, make_event):
        event = make_event(registration_deadline=now() - datetime.timedelta(hours=1))
        assert not event.is_registration_open()


@pytest.mark.django_db
class TestPromoCode:
    def test_code_is_normalised(self):
        promo = PromoCode.objects.create(code=" save10 ", discount_value=10)
        assert promo.code == "SAVE10"
        assert PromoCode.get_by_code("save10") == promo

    def test_blank_code_is_generated(self):
        promo = PromoCode.objects.create(discount_value=10)
        assert len(promo.code) == 8

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            PromoCode.objects.create(code="BIG", discount_value=150)

    def test_discounts(self):
        percent = PromoCode(code="P", discount_type=DiscountType.PERCENTAGE, discount_value=25)
        fixed = PromoCode(code="F", discount_type=DiscountType.FIXED, discount_value=80000)
        assert percent.discount_for(50000) == 12500
        assert fixed.discount_for(50000) == 50000

    def test_unusable_codes(self, event, make_event):
        expired = PromoCode.objects.create(
            code="OLD", discount_value=10, expires_at=now() - datetime.timedelta(days=1)
        )
        used_up = PromoCode.objects.create(code="USED", discount_value=10, max_uses=1, used_count=1)
        inactive = PromoCode.objects.create(code="OFF", discount_value=10, is_active=False)
        scoped = PromoCode.objects.create(code="SCOPED", discount_value=10)
        scoped.events.add(make_event(name="Other"))
        for promo, message in [
            (expired, "Promo code has expired"),
            (used_up, "Promo code usage limit reached"),
            (inactive, "Promo code is not active"),
            (scoped, "Promo code is not valid for this event"),
        ]:
            with pytest.raises(ValidationError) as exc:
                promo.assert_usable(event)
            assert exc.value.messages == [message]

    def test_redeem_respects_limit(self):
        promo = PromoCode.objects.create(code="ONCE", discount_value=10, max_uses=1)
        assert promo.redeem()
        assert not promo.redeem()
        assert promo.used_count == 1


@pytest.mark.django_db
class TestTicketLifecycle:
    def test_mark_paid_issues_token(self, event, make_ticket):
        ticket = make_ticket(event)
        assert ticket.mark_paid(payment_id="pay_1", gateway="razorpay", amount=50000)
        assert ticket.status == TicketStatus.PAID
        assert ticket.verify_token(ticket.token)
        event.refresh_from_db()
        assert event.sold_count == 1

    def test_mark_paid_is_idempotent(self, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        assert not ticket.mark_paid(payment_id="pay_2")
        event.refresh_from_db()
        assert event.sold_count == 1

    def test_refund(self, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        ticket.refund(reason="Cannot attend")
        assert ticket.status == TicketStatus.REFUNDED
        assert ticket.refund_amount == 50000
        event.refresh_from_db()
        assert event.sold_count == 0
        with pytest.raises(ValidationError, match="already refunded"):
            ticket.refund()

    def test_refund_requires_payment(self, event, make_ticket):
        with pytest.raises(ValidationError, match="Only paid tickets"):
            make_ticket(event).refund()

    def test_transfer_rotates_token(self, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        old_token = ticket.token
        ticket.transfer("Ravi Kumar", "ravi@example.com")
        assert ticket.name == "Ravi Kumar"
        assert ticket.transferred_from["email"] == "asha@example.com"
        assert ticket.token != old_token
        assert not ticket.verify_token(old_token)
        assert ticket.verify_token(ticket.token)

    def test_checked_in_ticket_cannot_move(self, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        ticket.check_in()
        with pytest.raises(ValidationError, match="checked-in"):
            ticket.transfer("Ravi", "ravi@example.com")

    def test_check_in_needs_payment(self, event, make_ticket):
        with pytest.raises(ValidationError, match="Ticket not paid"):
            make_ticket(event).check_in()

    def test_cancel_only_pending(self, event, make_ticket):
        assert make_ticket(event).cancel()
        assert not make_ticket(event, paid=True).cancel()


class TestTokens:
    def test_round_trip(self):
        token = generate_ticket_token("ticket-1")
        assert len(token) == 64
        assert verify_ticket_token("ticket-1", token)
        assert not verify_ticket_token("ticket-2", token)
        assert not verify_ticket_token("ticket-1", "")

    def test_nonce_changes_token(self):
        assert generate_ticket_token("ticket-1", 1) != generate_ticket_token("ticket-1")


@pytest.mark.django_db
class TestQuote:
    def test_promo_then_group_discount(self, event):
        promo = PromoCode(code="TEN", discount_type=DiscountType.PERCENTAGE, discount_value=10)
        group = Group(name="Club", contact_name="C", contact_email="c@x.com", event=event, discount=50)
        quote = build_quote(event, 2, promo, group)
        assert quote.total == 100000
        # 10% promo per ticket, then half of what is left.
        assert quote.discount == 10000 + 45000
        assert quote.payable == 45000

    def test_split_puts_remainder_first(self, event):
        promo = PromoCode(code="FIX", discount_type=DiscountType.FIXED, discount_value=1)
        quote = build_quote(event, 3, promo)
        assert quote.payable == 149997
        assert quote.split() == [49999, 49999, 49999]
        assert sum(build_quote(event, 3).split()) == 150000

    def test_normalize_attendees_inherits_contact(self):
        attendees = normalize_attendees(
            {"email": "lead@example.com", "phone": "999", "attendees": [{"name": " A "}, {"name": "B", "email": "b@x.com"}]}
        )
        assert attendees == [
            {"name": "A", "email": "lead@example.com", "phone": "999"},
            {"name": "B", "email": "b@x.com", "phone": "999"},
        ]


class TestEmailTemplate:
    def test_render_placeholders(self):
        template = EmailTemplate(subject="Hi {{ name }}", body="{{eventName}} {{unknown}}")
        subject, body = template.render({"name": "Asha", "eventName": "Summit"})
        assert subject == "Hi Asha"
        assert body == "Summit {{unknown}}"

    @pytest.mark.django_db
    def test_seed_defaults_once(self):
        assert len(EmailTemplate.seed_defaults()) == 3
        assert EmailTemplate.seed_defaults() == []


@pytest.mark.django_db
def test_create_pending_tickets(event):
    tickets = Ticket.create_pending(event, [{"name": "A"}, {"name": "B", "email": "b@x.com"}])
    assert [t.status for t in tickets] == [TicketStatus.PENDING] * 2
    assert tickets[1].email == "b@x.com"
