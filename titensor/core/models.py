"""Data models for the team registration session."""

from dataclasses import dataclass, field, replace
from uuid import uuid4


# Option sets offered by the capture form. Stored values are plain strings
# and are not checked against these lists after capture.
GRADES = ['9', '10', '11', '12', 'Coach']
SCHOOLS = ['Ridgeline', 'Preston', 'Green Canyon', 'Skyview', 'Logan', 'N/A']
SPORTS = ['Football', 'Tennis', 'Soccer', 'Volleyball', 'Cross Country', 'Golf', 'Cheer']
TEAMS = ['Varsity', 'JV', 'Freshman', 'N/A']
PAYMENT_TYPES = ['Cash', 'Card', 'Check', 'Did not pay']

PACKAGE_FIELDS = [
    'eight_by_ten', 'team_photo', 'silver_package', 'digital_copy',
    'banner', 'flex', 'frame',
]


def _new_id() -> str:
    return uuid4().hex


@dataclass
class Entry:
    """One registration: athlete, parent, package selections and payment."""
    control_number: int = 0
    first_name: str = ''
    last_name: str = ''
    jersey_number: str = ''
    grade: str = '9'
    school: str = 'Ridgeline'
    sport: str = 'Football'
    team: str = 'Varsity'
    parent_first_name: str = ''
    parent_last_name: str = ''
    parent_phone: str = ''
    parent_email: str = ''
    eight_by_ten: str = '0'       # package counters are kept as strings
    team_photo: str = '0'
    silver_package: str = '0'
    digital_copy: str = '0'
    banner: str = '0'
    flex: str = '0'
    frame: str = '0'
    payment_type: str = 'Did not pay'
    payment_amount: str = '0'
    notes: str = ''
    qr_image: bytes | None = field(default=None, compare=False, repr=False)
    id: str = field(default_factory=_new_id)

    def copy(self, **changes) -> 'Entry':
        """Return an edited copy that keeps this entry's id."""
        changes.pop('id', None)
        return replace(self, **changes)


# (CSV header, Entry attribute) in export column order.
CSV_COLUMNS = [
    ('Control #', 'control_number'),
    ('First Name', 'first_name'),
    ('Last Name', 'last_name'),
    ('Jersey #', 'jersey_number'),
    ('Grade', 'grade'),
    ('School', 'school'),
    ('Sport', 'sport'),
    ('Team', 'team'),
    ('Parent First', 'parent_first_name'),
    ('Parent Last', 'parent_last_name'),
    ('Parent Phone', 'parent_phone'),
    ('Parent Email', 'parent_email'),
    ('8x10', 'eight_by_ten'),
    ('Team Photo', 'team_photo'),
    ('Silver', 'silver_package'),
    ('Digital', 'digital_copy'),
    ('Banner', 'banner'),
    ('Flex', 'flex'),
    ('Frame', 'frame'),
    ('Payment Type', 'payment_type'),
    ('Payment Amount', 'payment_amount'),
    ('Notes', 'notes'),
]

ROSTER_COLUMNS = CSV_COLUMNS[:8]

# Every persisted attribute except the image blob.
TEXT_FIELDS = [attr for _, attr in CSV_COLUMNS if attr != 'control_number']
