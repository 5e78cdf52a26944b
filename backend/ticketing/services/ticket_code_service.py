# Overview: Ticket code generation and QR rendering.

"""
Ticket codes are opaque to every other component. The only structure callers
may rely on is the cheap shape check in looks_like_ticket_code().

A code mixes the purchase inputs with a uuid4 (os.urandom backed) and a
nanosecond timestamp, so two purchases of the same (event, user, sequence)
never collide. The tickets.code unique constraint is the last line.
"""

from __future__ import annotations

import hashlib
import io
import re
import time
import uuid

import qrcode
from qrcode.constants import ERROR_CORRECT_M


TICKET_CODE_PREFIX = "TKT-"
_CODE_RE = re.compile(r"^TKT-[0-9a-f]{32}-[0-9a-f]{16}$")
TICKET_CODE_LENGTH = len(TICKET_CODE_PREFIX) + 32 + 1 + 16


def generate_ticket_code(event_id: int, user_id: int, sequence: int) -> str:
    stamp = time.time_ns()
    payload = f"{event_id}:{user_id}:{sequence}:{uuid.uuid4().hex}:{stamp}"
    digest = hashlib.blake2b(payload.encode("utf-8"), digest_size=16).hexdigest()
    return f"{TICKET_CODE_PREFIX}{digest}-{stamp:016x}"


def looks_like_ticket_code(code: object) -> bool:
    """Prefix/length/charset sanity only; not proof the ticket exists."""
    if not isinstance(code, str) or len(code) != TICKET_CODE_LENGTH:
        return False
    return bool(_CODE_RE.match(code))


def render_qr_png(code: str, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render a ticket code as a PNG QR image."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
