"""Adapter for uploaded team lists (CSV, TSV or JSON).

Handles three formats:
  - JSON: Array of objects with keys like firstName, lastName, jersey, grade
  - CSV:  Header row with column names, comma-separated values
  - TSV:  Header row with column names, tab-separated values

Columns are matched by name (case-insensitive, ignoring spaces, dashes,
underscores and dots). Unknown columns are ignored.
"""

import csv
import io
import json
import re

from .base import BaseAdapter


# Map common column name variations to Entry attribute names
COLUMN_ALIASES = {
    'first': 'first_name',
    'firstname': 'first_name',
    'fname': 'first_name',
    'given': 'first_name',
    'last': 'last_name',
    'lastname': 'last_name',
    'lname': 'last_name',
    'surname': 'last_name',
    'jersey': 'jersey_number',
    'jersey#': 'jersey_number',
    'jerseynumber': 'jersey_number',
    'number': 'jersey_number',
    'num': 'jersey_number',
    'no': 'jersey_number',
    '#': 'jersey_number',
    'grade': 'grade',
    'class': 'grade',
    'year': 'grade',
    'school': 'school',
    'sport': 'sport',
    'team': 'team',
    'level': 'team',
    'squad': 'team',
    'parentfirst': 'parent_first_name',
    'parentfirstname': 'parent_first_name',
    'parentlast': 'parent_last_name',
    'parentlastname': 'parent_last_name',
    'parentphone': 'parent_phone',
    'phone': 'parent_phone',
    'parentemail': 'parent_email',
    'email': 'parent_email',
    'notes': 'notes',
}


def _column_key(name: str) -> str:
    return re.sub(r'[\s_\-.]+', '', str(name).strip().lower())


class TeamsAdapter(BaseAdapter):
    """Parse team list files into Entry field dicts."""

    def parse(self, data_path: str) -> list[dict]:
        """Auto-detect format (JSON, TSV or CSV) and parse."""
        with open(data_path, 'r', encoding='utf-8-sig') as f:
            content = f.read().strip()
        if not content:
            return []

        if content.startswith('[') or content.startswith('{'):
            try:
                data = json.loads(content)
            except json.JSONDecodeError:
                pass
            else:
                if isinstance(data, dict):
                    data = [data]
                return self._parse_records(data if isinstance(data, list) else [])

        first_line = content.split('\n', 1)[0]
        delimiter = '\t' if '\t' in first_line else ','
        reader = csv.DictReader(io.StringIO(content), delimiter=delimiter)
        return self._parse_records(list(reader))

    def _parse_records(self, records: list) -> list[dict]:
        rows = []
        for record in records:
            if not isinstance(record, dict):
                continue

            row = {}
            for key, value in record.items():
                if key is None:
                    continue
                attr = COLUMN_ALIASES.get(_column_key(key))
                if attr and attr not in row and value is not None:
                    row[attr] = str(value).strip()

            # Single "name" column: "Last, First" or "First Last"
            if not row.get('first_name') and not row.get('last_name'):
                full = self._lookup(record, 'name', 'athlete', 'player')
                first, last = self._split_name(full)
                if first:
                    row['first_name'] = first
                if last:
                    row['last_name'] = last

            if not row.get('first_name') and not row.get('last_name'):
                continue

            rows.append(row)

        return rows

    @staticmethod
    def _lookup(record: dict, *names: str) -> str:
        for key, value in record.items():
            if key is not None and _column_key(key) in names and value:
                return str(value).strip()
        return ''

    @staticmethod
    def _split_name(full: str) -> tuple[str, str]:
        """Split 'Last, First' or 'First Last' into (first, last)."""
        full = re.sub(r'\s+', ' ', full).strip()
        if not full:
            return '', ''
        if ',' in full:
            last, first = full.split(',', 1)
            return first.strip(), last.strip()
        if ' ' in full:
            first, last = full.rsplit(' ', 1)
            return first, last
        return full, ''
