"""QR codes linking a parking location to the payment page."""

import base64
import io
from urllib.parse import quote

import qrcode


def build_payment_url(base_url: str, location: str) -> str:
    """<base_url>/payment?location=<url-encoded location>"""
    return f"{base_url.rstrip('/')}/payment?location={quote(location, safe='')}"


def qr_data_uri(data: str, box_size: int = 10, border: int = 2) -> str:
    """Render data as a black-on-white PNG QR code and return a data URI."""
    code = qrcode.QRCode(box_size=box_size, border=border)
    code.add_data(data)
    code.make(fit=True)
    image = code.make_image(fill_color="#000000", back_color="#FFFFFF")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
