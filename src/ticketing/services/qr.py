import base64
from io import BytesIO
import qrcode
from eventhub.settings import BASE_URL


def ticket_verification_url(ticket):
    return f"{BASE_URL}/ticket/{ticket.ticket_id}?token={ticket.token}"


def generate_qr_png(data, box_size=10, border=1, fill_color="#1a1a1a") -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color=fill_color, back_color="white").convert("RGB")
    buffered = BytesIO()
    qr_img.save(buffered, format="PNG")
    return buffered.getvalue()


def generate_qr_data_url(data, **kwargs) -> str:
    encoded = base64.b64encode(generate_qr_png(data, **kwargs)).decode()
    return f"data:image/png;base64,{encoded}"
