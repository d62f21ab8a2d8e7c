"""
YAML-backed semester store.

Semesters live in a directory with an ``index.yaml`` listing them:

    semesters:
      - name: Fall 2024
        file: fall-2024.yaml
        current: true

Each listed file holds one semester snapshot (see ``snapshot.parse_snapshot``).
"""
import logging
import os
from typing import Any

import yaml

from .errors import ConfigurationError, UnknownSemesterError
from .snapshot import SemesterSnapshot, parse_snapshot

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.yaml"

# Path segment that addresses the semester marked current
CURRENT_SEMESTER = "current"


class SemesterStore:
    """Loads semester snapshots from a directory of YAML files."""

    def __init__(self, directory: str):
        self.directory = directory

    @property
    def index_file(self) -> str:
        return os.path.join(self.directory, INDEX_FILENAME)

    def load_index(self) -> dict[str, Any]:
        """Load and check the shape of the semester index file."""
        if not os.path.exists(self.index_file):
            raise ConfigurationError(f"Semester index file not found: {self.index_file}")

        with open(self.index_file, "r", encoding="utf-8") as f:
            try:
                index_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.index_file}: {e}") from e

        if not isinstance(index_data, dict) or "semesters" not in index_data:
            raise ConfigurationError("Invalid index.yaml structure: missing 'semesters' key")

        return index_data

    def entries(self) -> list[dict[str, Any]]:
        return list(self.load_index().get("semesters") or [])

    def validate(self) -> list[str]:
        """
        Check that the index is consistent with the files on disk.

        Returns:
            List of problems found, empty if the index is valid
        """
        try:
            entries = self.entries()
        except ConfigurationError as e:
            return [str(e)]

        problems = []
        names = [entry.get("name") for entry in entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            problems.append(f"Duplicate semester names in index: {duplicates}")

        current = [entry.get("name") for entry in entries if entry.get("current")]
        if len(current) > 1:
            problems.append(f"More than one current semester: {current}")

        if CURRENT_SEMESTER in names:
            problems.append(f"'{CURRENT_SEMESTER}' is reserved and cannot be used as a semester name")

        for entry in entries:
            if "name" not in entry or "file" not in entry:
                problems.append(f"Index entry missing 'name' or 'file': {entry}")
                continue
            file_path = os.path.join(self.directory, entry["file"])
            if not os.path.isfile(file_path):
                problems.append(f"Semester file not found: {entry['file']}")

        indexed_files = {entry.get("file") for entry in entries}
        orphaned = sorted(
            f for f in os.listdir(self.directory)
            if f.endswith(".yaml") and f != INDEX_FILENAME and f not in indexed_files
        ) if os.path.isdir(self.directory) else []
        if orphaned:
            logger.warning(f"Semester files not in index (will be ignored): {orphaned}")

        return problems

    def current_semester_name(self) -> str:
        for entry in self.entries():
            if entry.get("current"):
                return entry["name"]
        raise UnknownSemesterError("No current semester set")

    def get_snapshot(self, name: str | None = None) -> SemesterSnapshot:
        """
        Load the named semester, or the current one when name is None.

        Raises:
            ConfigurationError: Unknown semester, no current semester,
                                or a malformed semester file
        """
        if name is None:
            name = self.current_semester_name()

        entry = next((e for e in self.entries() if e.get("name") == name), None)
        if entry is None:
            raise UnknownSemesterError(f"No semester named {name}")

        file_path = os.path.join(self.directory, entry["file"])
        if not os.path.exists(file_path):
            raise ConfigurationError(f"Semester file not found: {entry['file']}")

        logger.debug(f"Loading semester '{name}' from {file_path}")
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {entry['file']}: {e}") from e

        snapshot = parse_snapshot(data, current=bool(entry.get("current", False)))
        if snapshot.semester.name != name:
            logger.warning(
                f"Semester file {entry['file']} names '{snapshot.semester.name}', index says '{name}'"
            )
        return snapshot
