import logging
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from ticketing.models import Ticket, TicketStatus

logger = logging.getLogger(__name__)

CHECKIN = "checkin"
UNDO = "undo"


class CheckInService:
    """
    Entry scanning. Members scoped to specific events can only work on
    tickets of those events.
    """

    def __init__(self, member=None):
        self.member = member

    def assert_event_access(self, ticket):
        if self.member is not None and not self.member.can_access_event(ticket.event_id):
            raise PermissionDenied("You do not have access to this event")

    def find_ticket(self, ticket_id=None, token=None):
        queryset = Ticket.objects.select_related("event")
        if ticket_id:
            try:
                return queryset.get(pk=ticket_id)
            except ValidationError:
                raise Ticket.DoesNotExist("Ticket not found")
        ticket = queryset.filter(token=token).first()
        if ticket is None:
            raise Ticket.DoesNotExist("Ticket not found")
        return ticket

    def check_in(self, ticket_id=None, token=None, action=CHECKIN):
        if not ticket_id and not token:
            raise ValidationError("Ticket ID or token is required")
        if action not in (CHECKIN, UNDO):
            raise ValidationError("Invalid action")
        with transaction.atomic():
            found = self.find_ticket(ticket_id, token)
            ticket = Ticket.lock_ticket(found.pk)
            self.assert_event_access(ticket)
            if action == UNDO:
                ticket.undo_check_in()
                message = f"Check-in undone for {ticket.name}"
            else:
                ticket.check_in()
                message = f"{ticket.name} checked in successfully!"
        logger.info("Ticket %s %s", ticket.ticket_id, "unchecked" if action == UNDO else "checked in")
        return {
            "success": True,
            "ticket_id": str(ticket.ticket_id),
            "checked_in": ticket.checked_in,
            "action": "unchecked" if action == UNDO else "checked_in",
            "attendee_name": ticket.name,
            "event_name": ticket.event.name,
            "message": message,
        }

    def verify(self, ticket_id=None, token=None):
        if not ticket_id and not token:
            raise ValidationError("Token or ticket ID is required")
        ticket = self.find_ticket(ticket_id, token)
        self.assert_event_access(ticket)
        valid = ticket.status == TicketStatus.PAID
        if token:
            valid = valid and ticket.verify_token(token)
        return {
            "valid": valid,
            "ticket_id": str(ticket.ticket_id),
            "attendee_name": ticket.name,
            "email": ticket.email,
            "event_id": str(ticket.event_id),
            "event_name": ticket.event.name,
            "status": ticket.status,
            "checked_in": ticket.checked_in,
            "checked_in_at": ticket.checked_in_at,
        }

    def bulk_check_in(self, ticket_ids):
        if not isinstance(ticket_ids, list) or not ticket_ids:
            raise ValidationError("Ticket IDs array is required")
        results = []
        for ticket_id in ticket_ids:
            results.append(self._bulk_one(ticket_id))
        successful = sum(1 for result in results if result["success"])
        return {
            "success": True,
            "results": results,
            "summary": {
                "total": len(results),
                "successful": successful,
                "failed": len(results) - successful,
            },
        }

    def _bulk_one(self, ticket_id):
        result = {"ticket_id": str(ticket_id), "success": False}
        with transaction.atomic():
            try:
                ticket = Ticket.lock_ticket(ticket_id)
            except (Ticket.DoesNotExist, ValidationError):
                result["error"] = "Ticket not found"
                return result
            result["name"] = ticket.name
            if not self.member_can_access(ticket):
                result["error"] = "No access to this event"
            elif ticket.status != TicketStatus.PAID:
                result["error"] = "Ticket not paid"
            elif ticket.checked_in:
                result["error"] = "Already checked in"
            else:
                ticket.check_in()
                result["success"] = True
        return result

    def member_can_access(self, ticket):
        return self.member is None or self.member.can_access_event(ticket.event_id)
