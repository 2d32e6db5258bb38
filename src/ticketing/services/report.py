import csv
import io
from django.utils.timezone import now
from ticketing.models import TicketStatus

CSV_HEADERS = ["Name", "Email", "Phone", "Checked In", "Checked In At", "Purchased At"]


def _amount(ticket):
    if ticket.amount_paid is not None:
        return ticket.amount_paid
    return ticket.event.price


def check_in_rate(checked_in, paid):
    if not paid:
        return "0%"
    return f"{checked_in / paid * 100:.1f}%"


def build_event_report(event):
    """
    Sales and attendance summary for an event. Money values are in rupees.
    Revenue counts every collected payment, refunds are subtracted in the
    net figure.
    """
    tickets = list(event.tickets.select_related("event").all())
    paid = [t for t in tickets if t.status == TicketStatus.PAID]
    refunded = [t for t in tickets if t.status == TicketStatus.REFUNDED]
    pending = [t for t in tickets if t.status == TicketStatus.PENDING]
    checked_in = [t for t in paid if t.checked_in]

    revenue = sum(_amount(t) for t in paid + refunded)
    refunded_amount = sum(t.refund_amount or 0 for t in refunded)
    return {
        "event": {
            "event_id": str(event.event_id),
            "name": event.name,
            "price": event.price,
            "capacity": event.capacity,
        },
        "summary": {
            "total_tickets": len(tickets),
            "paid_tickets": len(paid),
            "checked_in": len(checked_in),
            "check_in_rate": check_in_rate(len(checked_in), len(paid)),
            "refunded": len(refunded),
            "pending": len(pending),
            "revenue": revenue / 100,
            "refunded_amount": refunded_amount / 100,
            "net_revenue": (revenue - refunded_amount) / 100,
        },
        "attendees": [
            {
                "name": t.name,
                "email": t.email,
                "phone": t.phone,
                "checked_in": t.checked_in,
                "checked_in_at": t.checked_in_at.isoformat() if t.checked_in_at else None,
                "purchased_at": t.created_at.isoformat(),
            }
            for t in paid
        ],
        "generated_at": now().isoformat(),
    }


def report_to_csv(report):
    summary = report["summary"]
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow([f"Event Report: {report['event']['name']}"])
    writer.writerow([f"Generated: {report['generated_at']}"])
    writer.writerow([])
    writer.writerow([f"Total Tickets: {summary['total_tickets']}"])
    writer.writerow([f"Paid: {summary['paid_tickets']}"])
    writer.writerow([f"Checked In: {summary['checked_in']} ({summary['check_in_rate']})"])
    writer.writerow([f"Revenue: INR {summary['revenue']:,.2f}"])
    writer.writerow([f"Net Revenue: INR {summary['net_revenue']:,.2f}"])
    writer.writerow([])
    writer.writerow(CSV_HEADERS)
    for attendee in report["attendees"]:
        writer.writerow(
            [
                attendee["name"],
                attendee["email"] or "",
                attendee["phone"] or "",
                "Yes" if attendee["checked_in"] else "No",
                attendee["checked_in_at"] or "",
                attendee["purchased_at"],
            ]
        )
    return buffer.getvalue()
