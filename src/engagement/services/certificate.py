import io
import logging
import re
import zipfile
from pypdf import PdfReader, PdfWriter
from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as pdf_canvas
from eventhub.settings import SITE_NAME, MAX_CERTIFICATES_PER_BATCH
from ticketing.models import TicketStatus

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = MAX_CERTIFICATES_PER_BATCH

DEFAULT_SETTINGS = {
    "name_x": 50,  # percent of the page width, 50 centres the name
    "name_y": 335,  # points from the bottom
    "font_size": 42,
    "font_color": "#FDB515",
    "font_family": "Times-BoldItalic",
}

STANDARD_FONTS = {
    "Courier",
    "Courier-Bold",
    "Courier-BoldOblique",
    "Courier-Oblique",
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-BoldOblique",
    "Helvetica-Oblique",
    "Times-Roman",
    "Times-Bold",
    "Times-BoldItalic",
    "Times-Italic",
}


class CertificateError(Exception):
    pass


def merge_settings(overrides=None):
    settings = dict(DEFAULT_SETTINGS)
    for key, value in (overrides or {}).items():
        if key in settings and value not in (None, ""):
            settings[key] = value
    if settings["font_family"] not in STANDARD_FONTS:
        settings["font_family"] = DEFAULT_SETTINGS["font_family"]
    return settings


def parse_color(value):
    try:
        return HexColor(value)
    except (ValueError, TypeError):
        return black


def safe_filename(name):
    return re.sub(r"[^A-Za-z0-9]", "_", name)


def certificate_filename(name):
    return f"certificate-{safe_filename(name)}.pdf"


def _draw_name(c, name, width, settings):
    font = settings["font_family"]
    size = float(settings["font_size"])
    x = float(settings["name_x"]) / 100 * width - stringWidth(name, font, size) / 2
    c.setFillColor(parse_color(settings["font_color"]))
    c.setFont(font, size)
    c.drawString(x, float(settings["name_y"]), name)


def _draw_default_design(c, width, height, event_name):
    c.setFillColor(HexColor("#111111"))
    c.rect(0, 0, width, height, stroke=0, fill=1)
    c.setStrokeColor(HexColor("#FDB515"))
    c.setLineWidth(4)
    c.rect(24, 24, width - 48, height - 48, stroke=1, fill=0)
    c.setLineWidth(1)
    c.rect(34, 34, width - 68, height - 68, stroke=1, fill=0)

    c.setFillColor(HexColor("#ffffff"))
    c.setFont("Helvetica-Bold", 36)
    c.drawCentredString(width / 2, height - 130, "CERTIFICATE")
    c.setFont("Helvetica", 16)
    c.drawCentredString(width / 2, height - 160, "OF PARTICIPATION")
    c.setFont("Helvetica", 14)
    c.drawCentredString(width / 2, height - 215, "This is proudly presented to")
    c.setStrokeColor(HexColor("#888888"))
    c.line(width * 0.25, 320, width * 0.75, 320)
    if event_name:
        c.setFont("Helvetica", 14)
        c.drawCentredString(width / 2, 280, f"for taking part in {event_name}")
    c.setFillColor(HexColor("#888888"))
    c.setFont("Helvetica", 10)
    c.drawCentredString(width / 2, 60, SITE_NAME)


def _name_layer(name, width, height, settings) -> bytes:
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=(width, height))
    _draw_name(c, name, width, settings)
    c.showPage()
    c.save()
    return buffer.getvalue()


def render_certificate(name, template=None, settings=None, event_name="") -> bytes:
    """
    Certificate PDF for ``name``. With a template PDF the name is stamped on
    its first page, otherwise a built-in landscape A4 design is drawn.
    """
    settings = merge_settings(settings)
    if template:
        reader = PdfReader(io.BytesIO(template))
        if not reader.pages:
            raise CertificateError("Certificate template has no pages")
        writer = PdfWriter()
        for index, page in enumerate(reader.pages):
            if index == 0:
                width = float(page.mediabox.width)
                height = float(page.mediabox.height)
                layer = PdfReader(io.BytesIO(_name_layer(name, width, height, settings)))
                page.merge_page(layer.pages[0])
            writer.add_page(page)
        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    width, height = landscape(A4)
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=(width, height))
    c.setTitle(f"Certificate - {name}")
    _draw_default_design(c, width, height, event_name)
    _draw_name(c, name, width, settings)
    c.showPage()
    c.save()
    return buffer.getvalue()


def collect_batch_names(event, names=None, include_from_attendees=False):
    """Requested names plus, optionally, paid attendees. First occurrence wins."""
    collected = [name.strip() for name in names or [] if isinstance(name, str) and name.strip()]
    if include_from_attendees:
        collected += list(
            event.tickets.filter(status=TicketStatus.PAID)
            .order_by("created_at")
            .values_list("name", flat=True)
        )
    return list(dict.fromkeys(collected))


class CertificateService:
    def __init__(self, event=None, settings=None):
        self.event = event
        if settings is None and event is not None:
            settings = event.certificate_settings
        self.settings = settings or {}

    def template_bytes(self):
        if self.event is None or not self.event.certificate_template:
            return None
        with self.event.certificate_template.open("rb") as template:
            return template.read()

    def generate(self, name) -> bytes:
        return render_certificate(
            name,
            template=self.template_bytes(),
            settings=self.settings,
            event_name=self.event.name if self.event else "",
        )

    def generate_batch(self, names, type="participant"):
        """
        ZIP of certificates under ``certificates/``. Returns the archive and the
        number generated; raises ``CertificateError`` when none could be made.
        """
        template = self.template_bytes()
        event_name = self.event.name if self.event else ""
        buffer = io.BytesIO()
        generated = 0
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name in names:
                try:
                    pdf = render_certificate(
                        name, template=template, settings=self.settings, event_name=event_name
                    )
                except Exception as e:
                    logger.error("Failed to generate certificate for %s: %s", name, e)
                    continue
                archive.writestr(f"certificates/{safe_filename(name)}_{type}_certificate.pdf", pdf)
                generated += 1
        if not generated:
            raise CertificateError("Failed to generate any certificates")
        return buffer.getvalue(), generated
