import io
from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A5
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas as pdf_canvas
from eventhub.settings import SITE_NAME
from .qr import generate_qr_png, ticket_verification_url

BACKGROUND = HexColor("#111111")
ACCENT = HexColor("#dc2626")
MUTED = HexColor("#888888")
DIVIDER = HexColor("#333333")
FOOTER = HexColor("#0a0a0a")


def format_amount(paise) -> str:
    return f"Rs. {(paise or 0) / 100:.2f}"


def _label(c, x, y, text):
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 8)
    c.drawString(x, y, text)


def generate_ticket_pdf(ticket) -> bytes:
    """
    A5 e-ticket with the entry QR code, attendee details and the payment
    summary.
    """
    event = ticket.event
    width, height = A5
    margin = 10 * mm
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=A5)
    c.setTitle(f"Ticket - {event.name}")

    c.setFillColor(BACKGROUND)
    c.rect(0, 0, width, height, stroke=0, fill=1)

    # Header band with the event name.
    c.setFillColor(ACCENT)
    c.rect(0, height - 45 * mm, width, 45 * mm, stroke=0, fill=1)
    c.setFillColor(white)
    c.setFont("Helvetica-Bold", 18)
    lines = simpleSplit(event.name, "Helvetica-Bold", 18, width - 2 * margin)
    y = height - 20 * mm
    for line in lines[:2]:
        c.drawCentredString(width / 2, y, line)
        y -= 8 * mm
    c.setFont("Helvetica", 10)
    c.drawCentredString(width / 2, height - 38 * mm, "E-TICKET")

    qr_size = 50 * mm
    qr_x = (width - qr_size) / 2
    qr_y = height - 55 * mm - qr_size
    c.setFillColor(white)
    c.roundRect(qr_x - 5 * mm, qr_y - 5 * mm, qr_size + 10 * mm, qr_size + 10 * mm, 3 * mm, stroke=0, fill=1)
    qr_png = generate_qr_png(ticket_verification_url(ticket))
    c.drawImage(ImageReader(io.BytesIO(qr_png)), qr_x, qr_y, width=qr_size, height=qr_size)
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 8)
    c.drawCentredString(width / 2, qr_y - 12 * mm, "Scan for entry")

    divider_y = height - 125 * mm
    c.setStrokeColor(DIVIDER)
    c.setDash(2, 2)
    c.line(margin, divider_y, width - margin, divider_y)
    c.setDash()

    y = divider_y - 10 * mm
    _label(c, margin, y, "ATTENDEE")
    c.setFillColor(white)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y - 6 * mm, ticket.name)
    y -= 18 * mm

    col_width = (width - 2 * margin - 10 * mm) / 2
    _label(c, margin, y, "DATE")
    _label(c, margin + col_width + 10 * mm, y, "VENUE")
    c.setFillColor(white)
    c.setFont("Helvetica", 10)
    c.drawString(margin, y - 6 * mm, event.date.strftime("%d %b %Y"))
    venue_lines = simpleSplit(event.venue or "TBA", "Helvetica", 10, col_width)
    for index, line in enumerate(venue_lines[:2]):
        c.drawString(margin + col_width + 10 * mm, y - (6 + 5 * index) * mm, line)
    y -= 22 * mm

    c.setStrokeColor(DIVIDER)
    c.line(margin, y, width - margin, y)
    y -= 8 * mm
    c.setFillColor(ACCENT)
    c.setFont("Helvetica-Bold", 9)
    c.drawString(margin, y, "PAYMENT DETAILS")
    y -= 8 * mm

    amount = ticket.amount_paid if ticket.amount_paid is not None else event.price
    rows = [
        ("Amount Paid:", format_amount(amount)),
        ("Transaction ID:", ticket.razorpay_payment_id or "N/A"),
        ("Payment Date:", ticket.updated_at.strftime("%d %b %Y") if ticket.updated_at else ""),
    ]
    if ticket.payment_gateway:
        rows.append(("Payment Mode:", ticket.payment_gateway.capitalize()))
    for label, value in rows:
        _label(c, margin, y, label)
        c.setFillColor(white)
        c.drawString(margin + 35 * mm, y, str(value))
        y -= 6 * mm

    footer_y = 15 * mm
    c.setFillColor(FOOTER)
    c.rect(0, 0, width, footer_y + 5 * mm, stroke=0, fill=1)
    c.setFillColor(HexColor("#666666"))
    c.setFont("Helvetica", 7)
    c.drawCentredString(width / 2, footer_y, f"Ticket ID: {ticket.ticket_id}")
    c.drawCentredString(width / 2, footer_y - 5 * mm, f"{SITE_NAME} - Secure Event Ticketing")

    c.showPage()
    c.save()
    return buffer.getvalue()
