import logging
from dataclasses import dataclass, asdict
from django.core.exceptions import ValidationError, PermissionDenied
from django.db import transaction
from django.db.models import Q
from ticketing.models import Event, Ticket, TicketStatus, PromoCode, Group
from .payment import PaymentService
from .delivery import TicketDeliveryService

logger = logging.getLogger(__name__)


class CapacityExceeded(ValidationError):
    pass


@dataclass
class Quote:
    unit_price: int
    quantity: int
    total: int
    discount: int
    payable: int

    def to_dict(self):
        return asdict(self)

    def split(self):
        """Per ticket share of the payable amount, remainder on the first ticket."""
        if not self.quantity:
            return []
        share, remainder = divmod(self.payable, self.quantity)
        return [share + remainder] + [share] * (self.quantity - 1)


def build_quote(event, quantity, promo_code=None, group=None) -> Quote:
    """
    Unit price is the event's current price. Promo discounts apply per ticket,
    the group discount applies to what is left after the promo.
    """
    unit_price = event.current_price()
    total = unit_price * quantity
    discount = 0
    if promo_code is not None:
        discount += promo_code.discount_for(unit_price) * quantity
    if group is not None and group.discount:
        discount += group.discount_for(total - discount)
    discount = min(discount, total)
    return Quote(
        unit_price=unit_price,
        quantity=quantity,
        total=total,
        discount=discount,
        payable=total - discount,
    )


def quote_for_tickets(tickets) -> Quote:
    first = tickets[0]
    return build_quote(first.event, len(tickets), first.promo_code, first.group)


def normalize_attendees(data):
    """
    Either an ``attendees`` list or a single top-level name/email/phone.
    Attendee email and phone fall back to the top-level values.
    """
    attendees = data.get("attendees") or [
        {"name": data.get("name"), "email": data.get("email"), "phone": data.get("phone")}
    ]
    normalized = []
    for attendee in attendees:
        normalized.append(
            {
                "name": (attendee.get("name") or "").strip(),
                "email": (attendee.get("email") or data.get("email") or "").strip(),
                "phone": (attendee.get("phone") or data.get("phone") or "").strip(),
            }
        )
    return normalized


class OrderService:
    def __init__(self, delivery=None):
        self.delivery = delivery or TicketDeliveryService()

    def get_promo_code(self, code, event):
        promo = PromoCode.get_by_code(code)
        if promo is None:
            raise ValidationError("Invalid promo code")
        promo.assert_usable(event)
        return promo

    def create_tickets(self, event_id, attendees, promo_code=None):
        """
        Reserve pending tickets for the attendees. Raises ``Event.DoesNotExist``
        for an unknown event and ``CapacityExceeded`` when the event cannot fit
        the requested quantity.
        """
        if not attendees or any(not attendee.get("name") for attendee in attendees):
            raise ValidationError("Name and event are required")
        with transaction.atomic():
            event = Event.lock_event(event_id)
            if not event.is_registration_open():
                raise ValidationError("Event is not accepting registrations")
            if not event.has_capacity_for(len(attendees)):
                raise CapacityExceeded("Not enough seats available for this event")
            promo = self.get_promo_code(promo_code, event) if promo_code else None
            tickets = Ticket.create_pending(event, attendees, promo_code=promo)
        return tickets, build_quote(event, len(tickets), promo)

    def create_group(self, event_id, attendees=None, **group_fields):
        """
        Create a group booking with a pending ticket per attendee. Without
        attendees the contact person gets the only ticket.
        """
        attendees = [
            attendee for attendee in normalize_attendees({"attendees": attendees or []})
            if attendee["name"]
        ] or [
            {
                "name": group_fields["contact_name"],
                "email": group_fields["contact_email"],
                "phone": group_fields.get("contact_phone", ""),
            }
        ]
        with transaction.atomic():
            event = Event.lock_event(event_id)
            if not event.has_capacity_for(len(attendees)):
                raise CapacityExceeded("Not enough seats available for this event")
            group = Group.objects.create(event=event, **group_fields)
            tickets = Ticket.create_pending(event, attendees, group=group)
        logger.info("Group %s created with %s tickets", group.group_id, len(tickets))
        return group, tickets

    def _lock_pending_tickets(self, ticket_ids):
        try:
            tickets = list(
                Ticket.objects.select_for_update()
                .select_related("event", "promo_code", "group")
                .filter(pk__in=ticket_ids)
                .order_by("created_at")
            )
        except ValidationError:
            raise Ticket.DoesNotExist("Ticket not found")
        if len(tickets) != len(set(str(ticket_id) for ticket_id in ticket_ids)):
            raise Ticket.DoesNotExist("Ticket not found")
        if len({ticket.event_id for ticket in tickets}) > 1:
            raise ValidationError("All tickets must belong to the same event")
        if any(ticket.status != TicketStatus.PENDING for ticket in tickets):
            raise ValidationError("Tickets are not awaiting payment")
        return tickets

    def create_payment_order(self, ticket_id, ticket_ids=None, pg_name="razorpay"):
        """
        Create a gateway order for the payable total of the tickets. The amount
        is always computed here; client supplied amounts are ignored.
        """
        ticket_ids = list(ticket_ids or [ticket_id])
        if str(ticket_id) not in [str(t) for t in ticket_ids]:
            ticket_ids.insert(0, ticket_id)
        with transaction.atomic():
            tickets = self._lock_pending_tickets(ticket_ids)
            quote = quote_for_tickets(tickets)
            if quote.payable < 1:
                paid = self._mark_paid(tickets, quote, gateway=None)
                free = True
            else:
                payment_service = PaymentService(pg_name)
                payment_order = payment_service.create_payment_order(
                    quote.payable,
                    receipt=ticket_id,
                    notes={
                        "ticket_id": str(ticket_id),
                        "ticket_ids": ",".join(str(t.ticket_id) for t in tickets),
                        "quantity": len(tickets),
                    },
                    customer={"phone": tickets[0].phone, "email": tickets[0].email},
                )
                for ticket in tickets:
                    if pg_name == "razorpay":
                        ticket.razorpay_order_id = payment_order.id
                    ticket.payment_gateway = pg_name
                    ticket.save(update_fields=["razorpay_order_id", "payment_gateway", "updated_at"])
                free = False
        if free:
            self._deliver(paid)
            return {"order_id": None, "amount": 0, "quantity": len(tickets), "paid": True}
        response = {
            "order_id": payment_order.id,
            "amount": payment_order.amount,
            "currency": payment_order.currency,
            "key_id": payment_service.key_id,
            "quantity": len(tickets),
        }
        if payment_order.redirect_url:
            response["redirect_url"] = payment_order.redirect_url
        return response

    def _mark_paid(self, tickets, quote, gateway, payment_id=None, order_id=None):
        newly_paid = []
        for ticket, amount in zip(tickets, quote.split()):
            if ticket.mark_paid(
                payment_id=payment_id, order_id=order_id, gateway=gateway, amount=amount
            ):
                newly_paid.append(ticket)
        # Promo codes count once per paid order.
        promo = tickets[0].promo_code if tickets else None
        if newly_paid and promo is not None and not promo.redeem():
            logger.warning("Promo code %s exceeded its usage limit", promo.code)
        return newly_paid

    def _deliver(self, tickets):
        for ticket in tickets:
            if ticket.email:
                self.delivery.send_confirmation_safely(ticket)

    def confirm_tickets(self, query, gateway, payment_id=None, order_id=None):
        """
        Mark every pending ticket matching ``query`` paid. Returns the tickets
        that changed state; confirmation emails go out after the transaction.
        """
        with transaction.atomic():
            try:
                tickets = list(
                    Ticket.objects.select_for_update()
                    .select_related("event", "promo_code", "group")
                    .filter(query)
                    .order_by("created_at")
                )
            except ValidationError:
                # Malformed ticket id
                raise Ticket.DoesNotExist("Ticket not found")
            if not tickets:
                raise Ticket.DoesNotExist("Ticket not found")
            if len({ticket.event_id for ticket in tickets}) > 1:
                raise ValidationError("All tickets must belong to the same event")
            pending = [ticket for ticket in tickets if ticket.status == TicketStatus.PENDING]
            newly_paid = []
            if pending:
                newly_paid = self._mark_paid(
                    pending,
                    quote_for_tickets(pending),
                    gateway,
                    payment_id=payment_id,
                    order_id=order_id,
                )
        self._deliver(newly_paid)
        return tickets, newly_paid

    def verify_razorpay_payment(self, order_id, payment_id, signature, ticket_id=None):
        payment_service = PaymentService("razorpay")
        if not payment_service.confirm_payment(order_id, payment_id, signature):
            raise ValidationError("Invalid payment signature")
        if ticket_id:
            order_ticket_ids = {
                str(pk)
                for pk in Ticket.objects.filter(razorpay_order_id=order_id).values_list(
                    "pk", flat=True
                )
            }
            if order_ticket_ids and str(ticket_id).lower() not in order_ticket_ids:
                raise ValidationError("Ticket does not belong to this order")
        tickets, _ = self.confirm_tickets(
            Q(razorpay_order_id=order_id), "razorpay", payment_id=payment_id, order_id=order_id
        )
        return tickets

    def fail_tickets(self, query):
        try:
            found = Ticket.objects.filter(query).exists()
        except ValidationError:
            found = False
        if not found:
            raise Ticket.DoesNotExist("Ticket not found")
        with transaction.atomic():
            tickets = Ticket.objects.select_for_update().filter(
                query, status=TicketStatus.PENDING
            )
            return sum(1 for ticket in tickets if ticket.cancel())

    def refund(self, ticket_id, amount=None, reason=""):
        with transaction.atomic():
            ticket = Ticket.lock_ticket(ticket_id)
            ticket.refund(amount, reason)
        if ticket.payment_gateway == "razorpay" and ticket.razorpay_payment_id:
            refunded = PaymentService("razorpay").refund_payment(
                ticket.razorpay_payment_id, ticket.refund_amount
            )
            if not refunded:
                logger.warning("Gateway refund failed for ticket %s", ticket.ticket_id)
        return ticket

    def transfer(self, ticket_id, new_name, new_email, new_phone="", token=None, is_staff=False):
        with transaction.atomic():
            ticket = Ticket.lock_ticket(ticket_id)
            if not is_staff and not ticket.verify_token(token):
                raise PermissionDenied("Invalid ticket token")
            ticket.transfer(new_name, new_email, new_phone)
        self.delivery.send_confirmation_safely(
            ticket, subject=f"A ticket for {ticket.event.name} has been transferred to you"
        )
        return ticket

    def resend(self, ticket):
        if not ticket.email:
            raise ValidationError("No email address on this ticket")
        return self.delivery.send_confirmation(ticket)
