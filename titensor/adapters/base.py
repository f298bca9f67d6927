"""Abstract base adapter for reading team lists from uploaded files."""

from abc import ABC, abstractmethod


class BaseAdapter(ABC):
    @abstractmethod
    def parse(self, data_path: str) -> list[dict]:
        """Parse a team list and return a list of row dicts.

        Keys are Entry attribute names, e.g.:
            first_name, last_name, jersey_number, grade,
            school, sport, team

        Only keys present in the source are included, so missing
        columns fall back to the Entry defaults.
        """
        pass
