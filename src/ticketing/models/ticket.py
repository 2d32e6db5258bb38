import uuid
from django.db import models, transaction
from django.core.exceptions import ValidationError
from django.utils.timezone import now
from ticketing.services.tokens import generate_ticket_token, verify_ticket_token
from .event import Event
from .group import Group
from .promo import PromoCode


class TicketStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class Ticket(models.Model):
    ticket_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")
    status = models.CharField(
        max_length=20, choices=TicketStatus.choices, default=TicketStatus.PENDING
    )
    token = models.CharField(max_length=64, blank=True, default="", db_index=True)
    # Bumped on every transfer so previously issued tokens stop validating.
    token_nonce = models.PositiveIntegerField(default=0)
    razorpay_order_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    razorpay_payment_id = models.CharField(max_length=100, blank=True, null=True)
    payment_gateway = models.CharField(max_length=50, blank=True, null=True)
    promo_code = models.ForeignKey(
        PromoCode, on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    amount_paid = models.PositiveIntegerField(null=True, blank=True)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    group = models.ForeignKey(
        Group, on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    refund_amount = models.PositiveIntegerField(null=True, blank=True)
    refund_reason = models.TextField(blank=True, default="")
    refunded_at = models.DateTimeField(null=True, blank=True)
    transferred_from = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Ticket {self.ticket_id} - {self.name}"

    def is_paid(self):
        return self.status == TicketStatus.PAID

    def issue_token(self):
        self.token = generate_ticket_token(self.ticket_id, self.token_nonce)
        return self.token

    def verify_token(self, token):
        return verify_ticket_token(self.ticket_id, token, self.token_nonce)

    def mark_paid(self, payment_id=None, order_id=None, gateway=None, amount=None):
        """
        Mark the ticket paid and issue its entry token. Returns False when the
        ticket was already paid so callers can skip side effects.
        """
        if self.status == TicketStatus.PAID:
            return False
        if self.status == TicketStatus.REFUNDED:
            raise ValidationError("Ticket has been refunded")
        with transaction.atomic():
            self.status = TicketStatus.PAID
            if payment_id:
                self.razorpay_payment_id = payment_id
            if order_id:
                self.razorpay_order_id = order_id
            if gateway:
                self.payment_gateway = gateway
            if amount is not None:
                self.amount_paid = amount
            self.issue_token()
            self.save()
            self.event.increment_sold(1)
        return True

    def cancel(self):
        if self.status != TicketStatus.PENDING:
            return False
        self.status = TicketStatus.CANCELLED
        self.save(update_fields=["status", "updated_at"])
        return True

    def refund(self, amount=None, reason=""):
        if self.status == TicketStatus.REFUNDED:
            raise ValidationError("Ticket already refunded")
        if self.status != TicketStatus.PAID:
            raise ValidationError("Only paid tickets can be refunded")
        if amount is None:
            amount = self.amount_paid if self.amount_paid is not None else self.event.price
        with transaction.atomic():
            self.status = TicketStatus.REFUNDED
            self.refund_amount = amount
            self.refund_reason = reason or ""
            self.refunded_at = now()
            self.save()
            self.event.decrement_sold(1)
        return self

    def transfer(self, new_name, new_email, new_phone=""):
        if self.status != TicketStatus.PAID:
            raise ValidationError("Only paid tickets can be transferred")
        if self.checked_in:
            raise ValidationError("Cannot transfer a checked-in ticket")
        self.transferred_from = {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "transferred_at": now().isoformat(),
        }
        self.name = new_name
        self.email = new_email
        self.phone = new_phone or ""
        self.token_nonce += 1
        self.issue_token()
        self.save()
        return self

    def check_in(self):
        if self.status != TicketStatus.PAID:
            raise ValidationError("Ticket not paid")
        self.checked_in = True
        self.checked_in_at = now()
        self.save(update_fields=["checked_in", "checked_in_at", "updated_at"])

    def undo_check_in(self):
        self.checked_in = False
        self.checked_in_at = None
        self.save(update_fields=["checked_in", "checked_in_at", "updated_at"])

    @classmethod
    def lock_ticket(cls, ticket_id):
        try:
            return cls.objects.select_for_update().select_related("event").get(pk=ticket_id)
        except ValidationError:
            raise cls.DoesNotExist("Ticket not found")

    @classmethod
    def get_by_token(cls, token):
        return cls.objects.select_related("event").filter(token=token).first()

    @classmethod
    def for_order(cls, order_id):
        return cls.objects.select_for_update().filter(razorpay_order_id=order_id)

    @classmethod
    def create_pending(cls, event, attendees, promo_code=None, group=None):
        with transaction.atomic():
            return [
                cls.objects.create(
                    event=event,
                    name=attendee["name"],
                    email=attendee.get("email") or "",
                    phone=attendee.get("phone") or "",
                    promo_code=promo_code,
                    group=group,
                )
                for attendee in attendees
            ]
