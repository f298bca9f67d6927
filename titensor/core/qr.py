"""QR payload derivation for registration entries.

The image itself is rendered by the caller; entries only carry the bytes.
"""

from typing import Callable

from .models import Entry


def qr_payload(entry: Entry) -> str:
    """Text encoded in an entry's QR code: "First Last ControlNumber"."""
    return f'{entry.first_name} {entry.last_name} {entry.control_number}'


def attach_qr(entry: Entry, renderer: Callable[[str], bytes]) -> Entry:
    """Render the entry's payload with ``renderer`` and store the image on it.

    Call this before every add/update so the image tracks the current
    name and control number.
    """
    entry.qr_image = renderer(qr_payload(entry))
    return entry
