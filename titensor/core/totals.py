"""Session totals report: package counts and payments by type."""

from collections import defaultdict

from .models import CSV_COLUMNS, PACKAGE_FIELDS, PAYMENT_TYPES

PACKAGE_TITLES = {attr: header for header, attr in CSV_COLUMNS if attr in PACKAGE_FIELDS}


def _parse_count(value: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def _parse_amount(value: str) -> float:
    text = str(value).strip().replace('$', '').replace(',', '')
    try:
        return float(text)
    except ValueError:
        return 0.0


def package_totals(entries) -> dict[str, int]:
    """Sum each package counter; blank or non-numeric counts add nothing."""
    totals = {attr: 0 for attr in PACKAGE_FIELDS}
    for entry in entries:
        for attr in PACKAGE_FIELDS:
            totals[attr] += _parse_count(getattr(entry, attr))
    return totals


def payment_totals(entries) -> dict[str, float]:
    """Sum payment amounts per payment type.

    Known payment types always appear (in form order); free-text types
    follow in order of first appearance.
    """
    totals = defaultdict(float)
    for ptype in PAYMENT_TYPES:
        totals[ptype] = 0.0
    for entry in entries:
        totals[entry.payment_type] += _parse_amount(entry.payment_amount)
    return dict(totals)


def format_totals(entries) -> str:
    """Printable totals block for the session."""
    entries = list(entries)
    lines = [f'Entries: {len(entries)}', '', 'Packages']
    for attr, count in package_totals(entries).items():
        lines.append(f'  {PACKAGE_TITLES[attr]:<12}{count:>6}')

    lines.append('')
    lines.append('Payments')
    payments = payment_totals(entries)
    for ptype, amount in payments.items():
        lines.append(f'  {ptype:<12}{amount:>10.2f}')
    lines.append(f"  {'Total':<12}{sum(payments.values()):>10.2f}")
    return '\n'.join(lines)
