"""Configuration for the registration session manager."""

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_DATA_DIR = Path.home() / '.titensor'


@dataclass(frozen=True)
class SessionConfig:
    """Where the session document and exports live.

    Attributes:
        data_dir: Directory holding the session document.
        session_file: File name of the session document inside data_dir.
        export_dir: Directory for CSV and PDF exports.
        log_level: Logging level name for the titensor logger.
    """
    data_dir: Path
    session_file: str = 'session.json'
    export_dir: Path | None = None
    log_level: str = 'INFO'

    @property
    def session_path(self) -> Path:
        return self.data_dir / self.session_file

    @property
    def exports_path(self) -> Path:
        return self.export_dir if self.export_dir else self.data_dir / 'exports'


def load_config(data_dir: str | None = None) -> SessionConfig:
    """Load configuration from TITENSOR_* environment variables.

    Args:
        data_dir: Optional override for the data directory (e.g. from the
            command line). Takes precedence over TITENSOR_DATA_DIR.
    """
    root = Path(data_dir or os.environ.get('TITENSOR_DATA_DIR') or DEFAULT_DATA_DIR)
    root = root.expanduser()
    root.mkdir(parents=True, exist_ok=True)

    export_env = os.environ.get('TITENSOR_EXPORT_DIR')
    export_dir = Path(export_env).expanduser() if export_env else None

    return SessionConfig(
        data_dir=root,
        session_file=os.environ.get('TITENSOR_SESSION_FILE', 'session.json'),
        export_dir=export_dir,
        log_level=os.environ.get('TITENSOR_LOG_LEVEL', 'INFO'),
    )
