import uuid
from datetime import timezone as dt_timezone
from urllib.parse import urlencode
from django.utils.timezone import now
from eventhub.settings import APP_URL, SITE_NAME

ICS_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def format_ics_date(value):
    return value.astimezone(dt_timezone.utc).strftime(ICS_DATE_FORMAT)


def escape_ics(text):
    return (
        str(text)
        .replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace(";", "\\;")
        .replace("\n", "\\n")
    )


def event_url(event):
    return f"{APP_URL}/event/{event.event_id}"


def generate_ics(event) -> str:
    """
    iCalendar file for an event with reminders one hour and one day ahead.
    Events without an end time last two hours.
    """
    title = escape_ics(event.name)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{SITE_NAME}//Event Ticketing//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{uuid.uuid4()}@{SITE_NAME.lower()}",
        f"DTSTAMP:{format_ics_date(now())}",
        f"DTSTART:{format_ics_date(event.starts_at())}",
        f"DTEND:{format_ics_date(event.ends_at())}",
        f"SUMMARY:{title}",
    ]
    if event.description:
        lines.append(f"DESCRIPTION:{escape_ics(event.description)}")
    location = ", ".join(part for part in [event.venue, event.address] if part)
    if location:
        lines.append(f"LOCATION:{escape_ics(location)}")
    lines.append(f"URL:{event_url(event)}")
    lines += [
        "BEGIN:VALARM",
        "TRIGGER:-PT1H",
        "ACTION:DISPLAY",
        f"DESCRIPTION:Reminder: {title} starts in 1 hour",
        "END:VALARM",
        "BEGIN:VALARM",
        "TRIGGER:-P1D",
        "ACTION:DISPLAY",
        f"DESCRIPTION:Reminder: {title} is tomorrow",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)


def google_calendar_url(event) -> str:
    dates = f"{format_ics_date(event.starts_at())}/{format_ics_date(event.ends_at())}"
    params = {
        "action": "TEMPLATE",
        "text": event.name,
        "dates": dates,
        "details": event.description or "",
        "location": event.venue or "",
    }
    return "https://calendar.google.com/calendar/render?" + urlencode(params)


def ics_filename(event):
    slug = "".join(ch if ch.isalnum() else "-" for ch in event.name.lower())
    return f"{slug}.ics"
