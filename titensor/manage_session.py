#!/usr/bin/env python3
"""CLI entry point for managing a registration session.

Usage:
    titensor add --first Sam --last Lee --jersey 12 --grade 10 \\
        --sport Soccer --payment-type Cash --payment-amount 40
    titensor list
    titensor edit 3f2c... jersey_number=14 notes="Paid at pickup"
    titensor export
    titensor roster --by number --pdf
    titensor totals
    titensor import-teams teams.csv
"""

import argparse
import sys

from titensor.adapters.teams_adapter import TeamsAdapter
from titensor.app_logging import configure_logging
from titensor.config import load_config
from titensor.core.models import (
    GRADES, PAYMENT_TYPES, SCHOOLS, SPORTS, TEAMS, TEXT_FIELDS, Entry
)
from titensor.core.qr import qr_payload
from titensor.core.session_store import SessionStore
from titensor.core.totals import format_totals

# (option, Entry attribute, help) for the add command
ADD_OPTIONS = [
    ('--first', 'first_name', 'Athlete first name'),
    ('--last', 'last_name', 'Athlete last name'),
    ('--jersey', 'jersey_number', 'Jersey number'),
    ('--grade', 'grade', f"Grade ({', '.join(GRADES)})"),
    ('--school', 'school', f"School ({', '.join(SCHOOLS)})"),
    ('--sport', 'sport', f"Sport ({', '.join(SPORTS)})"),
    ('--team', 'team', f"Team ({', '.join(TEAMS)})"),
    ('--parent-first', 'parent_first_name', 'Parent/guardian first name'),
    ('--parent-last', 'parent_last_name', 'Parent/guardian last name'),
    ('--parent-phone', 'parent_phone', 'Parent/guardian phone'),
    ('--parent-email', 'parent_email', 'Parent/guardian email'),
    ('--eight-by-ten', 'eight_by_ten', '8x10 prints'),
    ('--team-photo', 'team_photo', 'Team photos'),
    ('--silver', 'silver_package', 'Silver packages'),
    ('--digital', 'digital_copy', 'Digital copies'),
    ('--banner', 'banner', 'Banners'),
    ('--flex', 'flex', 'Flex prints'),
    ('--frame', 'frame', 'Frames'),
    ('--payment-type', 'payment_type', f"Payment type ({', '.join(PAYMENT_TYPES)})"),
    ('--payment-amount', 'payment_amount', 'Payment amount'),
    ('--notes', 'notes', 'Free-form notes'),
]

EDITABLE_FIELDS = ['control_number'] + TEXT_FIELDS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Manage a team registration session')
    parser.add_argument('--data-dir', default=None,
                        help='Directory holding the session file (default: $TITENSOR_DATA_DIR or ~/.titensor)')
    parser.add_argument('--export-dir', default=None,
                        help='Directory for exports (default: <data-dir>/exports)')
    parser.add_argument('--log-level', default=None, help='Logging level (default INFO)')
    sub = parser.add_subparsers(dest='command', required=True)

    add = sub.add_parser('add', help='Register a new athlete')
    for option, attr, help_text in ADD_OPTIONS:
        add.add_argument(option, dest=attr, default=None, help=help_text)
    add.add_argument('--control-number', type=int, default=None,
                     help='Override the assigned control number')

    edit = sub.add_parser('edit', help='Edit an entry by id')
    edit.add_argument('entry_id', help='Entry id (see "list")')
    edit.add_argument('changes', nargs='+', metavar='FIELD=VALUE',
                      help=f"Fields: {', '.join(EDITABLE_FIELDS)}")

    sub.add_parser('list', help='List entries in registration order')
    sub.add_parser('export', help='Write the full CSV export')

    roster = sub.add_parser('roster', help='Write a sorted roster')
    roster.add_argument('--by', choices=['number', 'grade'], default='number',
                        help='Sort by jersey number or grade (string order)')
    roster.add_argument('--pdf', action='store_true', help='Also write a printable PDF')

    sub.add_parser('totals', help='Show package and payment totals')

    upload = sub.add_parser('import-teams', help='Add athletes from team list files')
    upload.add_argument('files', nargs='+', help='CSV, TSV or JSON team lists')

    return parser


def parse_changes(changes: list[str]) -> dict:
    """Turn FIELD=VALUE arguments into Entry keyword changes."""
    result = {}
    for change in changes:
        if '=' not in change:
            raise ValueError(f'Expected FIELD=VALUE, got {change!r}')
        name, value = change.split('=', 1)
        name = name.strip()
        if name not in EDITABLE_FIELDS:
            raise ValueError(f'Unknown field: {name}')
        if name == 'control_number':
            try:
                result[name] = int(value)
            except ValueError:
                raise ValueError(f'Control number must be an integer, got {value!r}')
        else:
            result[name] = value
    return result


def _describe(entry: Entry) -> str:
    return (f'#{entry.control_number}  {entry.first_name} {entry.last_name}  '
            f'Jersey: {entry.jersey_number} - {entry.sport}  [{entry.id}]')


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.data_dir)
    configure_logging(args.log_level or config.log_level)
    export_dir = args.export_dir or config.exports_path

    store = SessionStore(config.session_path, export_dir=export_dir)
    store.load()

    if args.command == 'add':
        fields = {attr: getattr(args, attr) for _, attr, _ in ADD_OPTIONS
                  if getattr(args, attr) is not None}
        if args.control_number is not None:
            fields['control_number'] = args.control_number
        entry = store.new_entry(**fields)
        store.add(entry)
        print(f'Added {_describe(entry)}')
        print(f'QR payload: {qr_payload(entry)}')

    elif args.command == 'edit':
        existing = store.get(args.entry_id)
        if existing is None:
            print(f'No entry with id {args.entry_id}')
            return 1
        try:
            changes = parse_changes(args.changes)
        except ValueError as exc:
            print(exc)
            return 1
        # stale once name or number change; the CLI has no QR renderer
        updated = existing.copy(qr_image=None, **changes)
        store.update(updated)
        print(f'Updated {_describe(updated)}')

    elif args.command == 'list':
        if not store.entries:
            print('No entries yet.')
        for entry in store.entries:
            print(_describe(entry))
        print(f'Next control number: {store.next_control_number}')

    elif args.command == 'export':
        path = store.export_csv()
        if path is None:
            print('Export failed')
            return 1
        print(f'Generated {path}')

    elif args.command == 'roster':
        path = store.roster_by_number() if args.by == 'number' else store.roster_by_grade()
        if path is None:
            print('Roster export failed')
            return 1
        print(f'Generated {path}')
        if args.pdf:
            pdf_path = store.print_roster(args.by)
            if pdf_path is None:
                print('Roster PDF failed')
                return 1
            print(f'Generated {pdf_path}')

    elif args.command == 'totals':
        print(format_totals(store.entries))

    elif args.command == 'import-teams':
        adapter = TeamsAdapter()
        total = 0
        for data_path in args.files:
            print(f'Parsing {data_path}...')
            try:
                rows = adapter.parse(data_path)
            except (OSError, UnicodeDecodeError) as exc:
                print(f'Could not read {data_path}: {exc}')
                return 1
            added = store.import_rows(rows)
            print(f'  -> {len(added)} athletes')
            total += len(added)
        print(f'Total: {total} athletes from {len(args.files)} files')

    return 0


if __name__ == '__main__':
    sys.exit(main())
