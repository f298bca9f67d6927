"""Session document codec and CSV rendering for registration entries.

The session document is JSON:

    {"version": 1, "entries": [{...}, ...]}

with one object per entry keyed by attribute name. The optional QR image
is stored as base64 text. A bare JSON list of entry objects is also
accepted when decoding.

CSV output follows the fixed export columns from ``models.CSV_COLUMNS``.
Newlines inside any field are replaced by a single space so each entry
stays on one line.
"""

import base64
import binascii
import csv
import io
import json
import re

from .models import Entry, TEXT_FIELDS


DOCUMENT_VERSION = 1

# Every line boundary str.splitlines() recognises
_NEWLINES = re.compile(r"\r\n|[\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029]")


class SessionDecodeError(ValueError):
    """Raised when a session document cannot be turned back into entries."""


# --- JSON session document ---

def entry_to_record(entry: Entry) -> dict:
    record = {'id': entry.id, 'control_number': int(entry.control_number)}
    for attr in TEXT_FIELDS:
        record[attr] = getattr(entry, attr)
    if entry.qr_image is not None:
        record['qr_image'] = base64.b64encode(bytes(entry.qr_image)).decode('ascii')
    else:
        record['qr_image'] = None
    return record


def entry_from_record(record: dict) -> Entry:
    """Build an Entry from a decoded record, keeping its stored id."""
    if not isinstance(record, dict):
        raise SessionDecodeError(f'Entry record must be an object, got {type(record).__name__}')

    entry_id = record.get('id')
    if not isinstance(entry_id, str) or not entry_id:
        raise SessionDecodeError('Entry record has no id')

    try:
        control_number = int(record.get('control_number', 0))
    except (TypeError, ValueError, OverflowError):
        raise SessionDecodeError(
            f"Entry {entry_id} has a non-integer control number: {record.get('control_number')!r}"
        )

    values = {}
    for attr in TEXT_FIELDS:
        if attr in record and record[attr] is not None:
            values[attr] = str(record[attr])

    qr_image = None
    raw_image = record.get('qr_image')
    if raw_image is not None:
        try:
            qr_image = base64.b64decode(raw_image, validate=True)
        except (binascii.Error, TypeError, ValueError):
            raise SessionDecodeError(f'Entry {entry_id} has an undecodable qr_image')

    return Entry(id=entry_id, control_number=control_number, qr_image=qr_image, **values)


def dumps_session(entries) -> str:
    payload = {
        'version': DOCUMENT_VERSION,
        'entries': [entry_to_record(e) for e in entries],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def loads_session(text: str) -> list[Entry]:
    """Decode a session document into entries, preserving order."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SessionDecodeError(f'Session document is not valid JSON: {exc}') from exc
    except RecursionError as exc:
        raise SessionDecodeError('Session document is nested too deeply') from exc

    if isinstance(data, dict):
        records = data.get('entries')
    else:
        records = data
    if not isinstance(records, list):
        raise SessionDecodeError('Session document has no entry list')

    return [entry_from_record(r) for r in records]


# --- CSV ---

def clean_field(value) -> str:
    """Stringify a field value and flatten embedded line breaks to spaces."""
    if value is None:
        return ''
    return _NEWLINES.sub(' ', str(value))


def render_csv(entries, columns) -> str:
    """Render entries as CSV text with a header row.

    Args:
        entries: Entries in output order.
        columns: Sequence of (header, attribute) pairs.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow([header for header, _ in columns])
    for entry in entries:
        writer.writerow([clean_field(getattr(entry, attr)) for _, attr in columns])
    return buf.getvalue()


def sort_roster(entries, attribute: str) -> list[Entry]:
    """Stable sort on the raw string value of ``attribute``.

    Comparison is lexicographic: jersey "10" sorts before "2".
    """
    return sorted(entries, key=lambda e: str(getattr(e, attribute)))
