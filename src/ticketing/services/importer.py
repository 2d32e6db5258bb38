import csv
import io
import logging
from django.db import transaction
from django.core.exceptions import ValidationError
from ticketing.models import Ticket

logger = logging.getLogger(__name__)

NAME_HEADERS = ("name", "full name", "attendee", "attendee name")
EMAIL_HEADERS = ("email", "e-mail", "email address", "mail")
PHONE_HEADERS = ("phone", "mobile", "contact", "phone number")


def _pick(row, headers):
    for header in headers:
        value = row.get(header)
        if value:
            return value.strip()
    return ""


def parse_attendee_csv(csv_data):
    reader = csv.DictReader(io.StringIO(csv_data.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise ValidationError("No data found in CSV")
    reader.fieldnames = [(header or "").strip().lower() for header in reader.fieldnames]
    rows = [
        row
        for row in reader
        if any(isinstance(value, str) and value.strip() for value in row.values())
    ]
    if not rows:
        raise ValidationError("No data found in CSV")
    return rows


def import_attendees(event, csv_data):
    """
    Create paid tickets for the rows of an attendee CSV. Rows without a name
    are errors; an email already registered for the event is skipped.
    """
    rows = parse_attendee_csv(csv_data)
    seen_emails = set(
        email.lower()
        for email in Ticket.objects.filter(event=event).exclude(email="").values_list("email", flat=True)
    )
    imported, skipped, errors = 0, 0, []
    with transaction.atomic():
        for line, row in enumerate(rows, start=2):
            name = _pick(row, NAME_HEADERS)
            email = _pick(row, EMAIL_HEADERS)
            phone = _pick(row, PHONE_HEADERS)
            if not name:
                errors.append(f"Row {line}: missing name")
                continue
            if email and email.lower() in seen_emails:
                skipped += 1
                continue
            ticket = Ticket.objects.create(event=event, name=name, email=email, phone=phone)
            ticket.mark_paid(gateway="import", amount=0)
            if email:
                seen_emails.add(email.lower())
            imported += 1
    logger.info("Imported %s attendees for %s (%s skipped)", imported, event.event_id, skipped)
    return {
        "imported": imported,
        "skipped": skipped,
        "errors": errors,
        "message": f"Import processed: {imported} imported, {skipped} skipped, {len(errors)} failed",
    }
