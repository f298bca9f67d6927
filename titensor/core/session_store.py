"""Session store for registration entries.

Keeps the ordered entry list for the current session, derives the next
control number, persists the whole list after every mutation and produces
the CSV / roster exports.

Failures never propagate to the caller:
  - load: missing or undecodable document leaves the entries untouched
  - save: encode/write errors are logged and dropped
  - update: unknown id is a no-op
  - export: returns None instead of a path
The outcome of the most recent load/save/export is kept as a StoreResult
on the store (``last_load``, ``last_save``, ``last_export``).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .models import CSV_COLUMNS, ROSTER_COLUMNS, Entry
from .roster_pdf import generate_roster_pdf
from .serializer import (
    SessionDecodeError, dumps_session, loads_session, render_csv, sort_roster
)

logger = logging.getLogger(__name__)

EXPORT_FILENAME = 'session_export.csv'
ROSTER_FILENAMES = {
    'number': 'roster_by_number.csv',
    'grade': 'roster_by_grade.csv',
}
ROSTER_PDF_FILENAMES = {
    'number': 'roster_by_number.pdf',
    'grade': 'roster_by_grade.pdf',
}
ROSTER_SORT_FIELDS = {
    'number': 'jersey_number',
    'grade': 'grade',
}
ROSTER_TITLES = {
    'number': 'Roster by Number',
    'grade': 'Roster by Grade',
}


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a load, save or export."""
    ok: bool
    path: Path | None = None
    error: str | None = None


class SessionStore:
    """Ordered, persisted collection of registration entries."""

    def __init__(self, path, export_dir=None):
        self.path = Path(path)
        self.export_dir = Path(export_dir) if export_dir else self.path.parent
        self._entries: list[Entry] = []
        self._next_control_number = 1
        self._observers: list[Callable] = []
        self.last_load: StoreResult | None = None
        self.last_save: StoreResult | None = None
        self.last_export: StoreResult | None = None

    # --- read access ---

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def next_control_number(self) -> int:
        return self._next_control_number

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Entry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def new_entry(self, **fields) -> Entry:
        """Return a draft entry numbered with the next control number.

        The draft is not added; pass it to ``add`` once it is complete.
        """
        fields.setdefault('control_number', self._next_control_number)
        return Entry(**fields)

    # --- observers ---

    def subscribe(self, callback: Callable) -> Callable[[], None]:
        """Register ``callback(event, store)``; returns an unsubscribe function.

        Events are 'load', 'add' and 'update', fired after the change has
        been persisted.
        """
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self, event: str):
        for callback in list(self._observers):
            try:
                callback(event, self)
            except Exception:
                logger.exception('Session observer failed on %s event', event)

    # --- lifecycle ---

    def load(self) -> None:
        """Replace the in-memory entries with the persisted session.

        A missing or unreadable document leaves the current entries as-is.
        """
        self.last_load = self._read()
        if self.last_load.ok:
            self._notify('load')

    def _read(self) -> StoreResult:
        if not self.path.exists():
            logger.info('No session file at %s; starting empty', self.path)
            return StoreResult(False, self.path, 'missing')
        try:
            text = self.path.read_text(encoding='utf-8')
            entries = loads_session(text)
        except (OSError, UnicodeDecodeError, SessionDecodeError) as exc:
            logger.warning('Could not load session from %s: %s', self.path, exc)
            return StoreResult(False, self.path, str(exc))

        self._entries = entries
        self._recompute_next_control_number()
        logger.info('Loaded %d entries from %s', len(entries), self.path)
        return StoreResult(True, self.path)

    def save(self) -> None:
        """Write the full entry list to the session file, replacing it."""
        self.last_save = self._write()

    def _write(self) -> StoreResult:
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            text = dumps_session(self._entries)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding='utf-8')
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error('Failed to save session to %s', self.path, exc_info=exc)
            return StoreResult(False, self.path, str(exc))
        logger.debug('Saved %d entries to %s', len(self._entries), self.path)
        return StoreResult(True, self.path)

    # --- mutations ---

    def add(self, entry: Entry) -> None:
        """Append ``entry`` and persist. Duplicate ids or numbers are not checked."""
        self._entries.append(entry)
        self._recompute_next_control_number()
        self.save()
        self._notify('add')

    def update(self, entry: Entry) -> None:
        """Replace the entry with the same id in place and persist.

        Unknown ids are ignored; update never inserts.
        """
        for idx, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[idx] = entry
                break
        else:
            logger.debug('Update ignored; no entry with id %s', entry.id)
            return
        self._recompute_next_control_number()
        self.save()
        self._notify('update')

    def import_rows(self, rows) -> list[Entry]:
        """Add one entry per row dict, numbering each with the next control number."""
        added = []
        for row in rows:
            entry = self.new_entry(**row)
            self.add(entry)
            added.append(entry)
        return added

    def _recompute_next_control_number(self):
        numbers = [e.control_number for e in self._entries]
        self._next_control_number = (max(numbers) if numbers else 0) + 1

    # --- exports ---

    def export_csv(self, output_path=None) -> Path | None:
        """Write the full CSV export; returns its path, or None on failure."""
        path = Path(output_path) if output_path else self.export_dir / EXPORT_FILENAME
        return self._write_export(path, render_csv(self._entries, CSV_COLUMNS))

    def roster_by_number(self, output_path=None) -> Path | None:
        return self._roster('number', output_path)

    def roster_by_grade(self, output_path=None) -> Path | None:
        return self._roster('grade', output_path)

    def _roster(self, by: str, output_path) -> Path | None:
        path = Path(output_path) if output_path else self.export_dir / ROSTER_FILENAMES[by]
        ordered = sort_roster(self._entries, ROSTER_SORT_FIELDS[by])
        return self._write_export(path, render_csv(ordered, ROSTER_COLUMNS))

    def print_roster(self, by: str, output_path=None) -> Path | None:
        """Render the sorted roster as a printable PDF."""
        if by not in ROSTER_SORT_FIELDS:
            raise ValueError(f'Unknown roster order: {by}')
        path = Path(output_path) if output_path else self.export_dir / ROSTER_PDF_FILENAMES[by]
        ordered = sort_roster(self._entries, ROSTER_SORT_FIELDS[by])
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            generate_roster_pdf(ordered, str(path), title=ROSTER_TITLES[by])
        except (OSError, RuntimeError, ValueError) as exc:
            logger.error('Failed to print roster to %s', path, exc_info=exc)
            self.last_export = StoreResult(False, path, str(exc))
            return None
        self.last_export = StoreResult(True, path)
        return path

    def _write_export(self, path: Path, text: str) -> Path | None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding='utf-8', newline='')
        except OSError as exc:
            logger.error('Failed to write export %s', path, exc_info=exc)
            self.last_export = StoreResult(False, path, str(exc))
            return None
        logger.info('Wrote %s', path)
        self.last_export = StoreResult(True, path)
        return path
