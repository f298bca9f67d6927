"""Tests for the registration session store.

Covers control-number derivation, update-by-id semantics, persistence
round-trips, failure handling and the CSV / roster exports.
"""

import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from titensor.core.models import Entry
from titensor.core.session_store import SessionStore

FULL_HEADER = ('Control #,First Name,Last Name,Jersey #,Grade,School,Sport,Team,'
               'Parent First,Parent Last,Parent Phone,Parent Email,8x10,Team Photo,'
               'Silver,Digital,Banner,Flex,Frame,Payment Type,Payment Amount,Notes')
ROSTER_HEADER = 'Control #,First Name,Last Name,Jersey #,Grade,School,Sport,Team'


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / 'session.json', export_dir=tmp_path / 'exports')


def _read_lines(path):
    with open(path, encoding='utf-8') as f:
        return f.read().splitlines()


class TestControlNumbers:
    def test_empty_store_starts_at_one(self, store):
        assert store.next_control_number == 1
        assert len(store) == 0

    def test_next_is_max_plus_one_after_each_add(self, store):
        for number in [4, 2, 9, 9, 1]:
            store.add(Entry(control_number=number))
            expected = max(e.control_number for e in store.entries) + 1
            assert store.next_control_number == expected

    def test_out_of_order_scenario(self, store):
        store.add(Entry(control_number=1, first_name='A'))
        store.add(Entry(control_number=5, first_name='B'))
        store.add(Entry(control_number=3, first_name='C'))
        assert store.next_control_number == 6

    def test_new_entry_uses_next_number(self, store):
        store.add(store.new_entry(first_name='Ann'))
        draft = store.new_entry(first_name='Ben')
        assert draft.control_number == 2
        assert len(store) == 1, 'new_entry must not add'

    def test_duplicates_are_not_rejected(self, store):
        first = Entry(control_number=7)
        store.add(first)
        store.add(first)
        assert len(store) == 2
        assert store.next_control_number == 8

    def test_edited_number_shifts_numbering(self, store):
        entry = Entry(control_number=1)
        store.add(entry)
        store.update(entry.copy(control_number=40))
        assert store.next_control_number == 41


class TestUpdate:
    def test_replaces_in_place(self, store):
        a, b, c = Entry(first_name='A'), Entry(first_name='B'), Entry(first_name='C')
        for e in (a, b, c):
            store.add(e)

        store.update(b.copy(first_name='Bee', notes='moved up'))

        names = [e.first_name for e in store.entries]
        assert names == ['A', 'Bee', 'C']
        assert store.entries[1].id == b.id
        assert store.entries[1].notes == 'moved up'
        assert store.entries[0] == a
        assert store.entries[2] == c

    def test_unknown_id_is_noop(self, store, tmp_path):
        store.add(Entry(first_name='A'))
        before = list(store.entries)
        saved = store.path.read_text(encoding='utf-8')

        store.update(Entry(first_name='Stranger'))

        assert list(store.entries) == before
        assert store.path.read_text(encoding='utf-8') == saved

    def test_update_persists(self, store):
        entry = Entry(first_name='A')
        store.add(entry)
        store.update(entry.copy(jersey_number='22'))

        reloaded = SessionStore(store.path)
        reloaded.load()
        assert reloaded.entries[0].jersey_number == '22'

    def test_get_by_id(self, store):
        entry = Entry(first_name='A')
        store.add(entry)
        assert store.get(entry.id) is entry
        assert store.get('missing') is None


class TestPersistence:
    def test_round_trip(self, store):
        store.add(Entry(control_number=1, first_name='Ann', last_name='Lee',
                        jersey_number='12', grade='Coach', notes='line one\nline two',
                        payment_type='Venmo', payment_amount='$40.00',
                        qr_image=b'\x89PNG\r\n\x1a\nfake'))
        store.add(Entry(control_number=2, first_name='Ben', eight_by_ten='3'))
        original = list(store.entries)

        store.save()
        reloaded = SessionStore(store.path)
        reloaded.load()

        assert list(reloaded.entries) == original
        assert [e.id for e in reloaded.entries] == [e.id for e in original]
        assert reloaded.entries[0].qr_image == b'\x89PNG\r\n\x1a\nfake'
        assert reloaded.entries[1].qr_image is None
        assert reloaded.next_control_number == 3

    def test_load_replaces_not_merges(self, store):
        store.add(Entry(first_name='Saved'))
        other = SessionStore(store.path)
        other.add(Entry(first_name='Unsaved'))  # overwrites the file
        store.load()
        assert [e.first_name for e in store.entries] == ['Unsaved']

    def test_load_missing_file_leaves_entries(self, tmp_path):
        store = SessionStore(tmp_path / 'nothing-here.json')
        store.load()
        assert store.entries == ()
        assert store.next_control_number == 1
        assert store.last_load.ok is False

    def test_load_corrupt_file_leaves_entries(self, store):
        store.add(Entry(first_name='Kept', control_number=4))
        store.path.write_text('{not json', encoding='utf-8')
        store.load()
        assert [e.first_name for e in store.entries] == ['Kept']
        assert store.next_control_number == 5
        assert store.last_load.ok is False
        assert store.last_load.error

    @pytest.mark.parametrize('text', [
        '[{"id": "x", "control_number": 1e400}]',
        '[' * 100000 + ']' * 100000,
    ], ids=['huge-control-number', 'deep-nesting'])
    def test_load_undecodable_file_leaves_entries(self, store, text):
        store.add(Entry(first_name='Kept', control_number=2))
        store.path.write_text(text, encoding='utf-8')
        store.load()
        assert [e.first_name for e in store.entries] == ['Kept']
        assert store.next_control_number == 3
        assert store.last_load.ok is False

    def test_empty_image_round_trip(self, store):
        store.add(Entry(qr_image=b''))
        reloaded = SessionStore(store.path)
        reloaded.load()
        assert reloaded.entries[0].qr_image == b''

    def test_save_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('a file, not a directory', encoding='utf-8')
        store = SessionStore(blocker / 'session.json', export_dir=tmp_path)

        store.add(Entry(first_name='A'))  # must not raise

        assert len(store) == 1
        assert store.last_save.ok is False

    def test_save_leaves_no_temp_file(self, store):
        store.add(Entry(first_name='A'))
        assert store.last_save.ok is True
        assert sorted(p.name for p in store.path.parent.iterdir()) == ['session.json']


class TestObservers:
    def test_events_fire_after_mutations(self, store):
        events = []
        store.subscribe(lambda event, s: events.append((event, len(s))))
        entry = Entry()
        store.add(entry)
        store.update(entry.copy(first_name='X'))
        store.update(Entry())  # unknown id, no event
        store.load()
        assert events == [('add', 1), ('update', 1), ('load', 1)]

    def test_unsubscribe(self, store):
        events = []
        unsubscribe = store.subscribe(lambda event, s: events.append(event))
        unsubscribe()
        store.add(Entry())
        assert events == []

    def test_failing_observer_does_not_break_add(self, store):
        def broken(event, s):
            raise RuntimeError('boom')

        store.subscribe(broken)
        store.add(Entry())
        assert len(store) == 1
        assert store.last_save.ok is True


class TestExports:
    def test_export_csv_header_and_rows(self, store):
        store.add(Entry(control_number=1, first_name='Ann', last_name='Lee',
                        notes='first\nsecond\r\nthird'))
        store.add(Entry(control_number=2, first_name='Ben'))

        path = store.export_csv()

        lines = _read_lines(path)
        assert path.name == 'session_export.csv'
        assert len(lines) == 3
        assert lines[0] == FULL_HEADER
        assert lines[1] == ('1,Ann,Lee,,9,Ridgeline,Football,Varsity,,,,,0,0,0,0,0,0,0,'
                            'Did not pay,0,first second third')
        assert lines[2].startswith('2,Ben,')

    def test_empty_exports_are_header_only(self, store):
        assert _read_lines(store.export_csv()) == [FULL_HEADER]
        assert _read_lines(store.roster_by_number()) == [ROSTER_HEADER]
        assert _read_lines(store.roster_by_grade()) == [ROSTER_HEADER]

    def test_roster_by_number_is_lexicographic(self, store):
        for n, jersey in enumerate(['2', '10', '3'], start=1):
            store.add(Entry(control_number=n, first_name=f'P{jersey}', jersey_number=jersey))

        lines = _read_lines(store.roster_by_number())

        assert lines[0] == ROSTER_HEADER
        assert [line.split(',')[3] for line in lines[1:]] == ['10', '2', '3']

    def test_roster_by_grade_is_lexicographic(self, store):
        for n, grade in enumerate(['9', '12', 'Coach', '10'], start=1):
            store.add(Entry(control_number=n, grade=grade))

        path = store.roster_by_grade()

        assert path.name == 'roster_by_grade.csv'
        grades = [line.split(',')[4] for line in _read_lines(path)[1:]]
        assert grades == ['10', '12', '9', 'Coach']

    def test_roster_does_not_reorder_store(self, store):
        for jersey in ['5', '1']:
            store.add(Entry(jersey_number=jersey))
        store.roster_by_number()
        assert [e.jersey_number for e in store.entries] == ['5', '1']

    def test_roster_files_are_distinct(self, store):
        store.add(Entry())
        assert store.roster_by_number() != store.roster_by_grade()

    def test_export_failure_returns_none(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('x', encoding='utf-8')
        store = SessionStore(tmp_path / 'session.json', export_dir=blocker / 'exports')
        store.add(Entry())

        assert store.export_csv() is None
        assert store.last_export.ok is False
        assert store.roster_by_number() is None

    def test_commas_are_quoted(self, store):
        store.add(Entry(control_number=1, school='Logan, UT', notes='said "hi"'))
        lines = _read_lines(store.export_csv())
        assert len(lines) == 2
        assert '"Logan, UT"' in lines[1]
        assert lines[1].endswith('"said ""hi"""')

    def test_print_roster_pdf(self, store):
        store.add(Entry(control_number=1, first_name='Ann', jersey_number='7'))
        path = store.print_roster('number')
        assert path.name == 'roster_by_number.pdf'
        assert path.exists()

    def test_print_roster_rejects_unknown_order(self, store):
        with pytest.raises(ValueError):
            store.print_roster('height')


class TestImport:
    def test_import_rows_numbers_sequentially(self, store):
        store.add(Entry(control_number=10))
        added = store.import_rows([
            {'first_name': 'Ann', 'jersey_number': '4'},
            {'first_name': 'Ben', 'grade': '11'},
        ])
        assert [e.control_number for e in added] == [11, 12]
        assert added[1].grade == '11'
        assert store.next_control_number == 13
