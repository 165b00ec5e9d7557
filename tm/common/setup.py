import os
import sys
from pathlib import Path
from dataclasses import dataclass

# Lil helper function to create missing directories if missing, and optionally error out when a path
# doesn't exist.
def ensure_directory(path: Path,must_exist=False):
    if must_exist:
        if not path.exists():
            raise FileNotFoundError(f"Required directory is missing: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Expected a directory, got a file: {path}")
    else:
        path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the folder all user-specific Time Master data lives under. An explicit TIMEMASTER_HOME always wins, then
# APPDATA on Windows, then the XDG data home everywhere else.
def _resolve_data_root() -> Path:
    override = os.getenv("TIMEMASTER_HOME")
    if override:
        return Path(override)
    appdata = os.getenv("APPDATA")
    if sys.platform.startswith("win") and appdata:
        return Path(appdata) / "TimeMaster"
    xdg = os.getenv("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "TimeMaster"
    return Path.home() / ".local" / "share" / "TimeMaster"

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    root: Path
    data: Path

    logs: Path
    current: Path

    @staticmethod
    def build():
        # Folder for the source tree itself, no user-specific files
        root = Path(__file__).resolve().parents[2]

        # Folder for all user-specific and session related stuff
        data = ensure_directory(_resolve_data_root())

        # Folders within the data folder
        logs = ensure_directory(data / "logs")
        current = ensure_directory(data / "current")

        return ProjectPaths(
            root = root,
            data = data,
            logs = logs,
            current = current,
        )
PATHS = ProjectPaths.build()
