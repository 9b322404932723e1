"""YAML-backed storage for persisted user state."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

IGNORED_ITEMS = "ignored-items"
EXCLUDED_LABELS = "excluded-labels"
READ_STATUSES = "read-statuses"


class StateStore:
    """Store named collections as individual YAML files.

    Failures never propagate: unreadable collections load as empty and
    failed writes are logged, so callers fall back to "never read" and
    "not ignored".
    """

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def load_set(self, name: str) -> set[str]:
        """Load a collection of strings."""
        data = self._load(name)
        if data is None:
            return set()
        if not isinstance(data, list):
            logger.warning("Collection %s is not a list, ignoring stored value", name)
            return set()
        return {str(value) for value in data}

    def save_set(self, name: str, values: Iterable[str]) -> None:
        """Persist a collection of strings in sorted order."""
        self._save(name, sorted(values))

    def load_mapping(self, name: str) -> dict[str, dict[str, Any]]:
        """Load a mapping of string keys to records."""
        data = self._load(name)
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning("Collection %s is not a mapping, ignoring stored value", name)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, dict)}

    def save_mapping(self, name: str, mapping: dict[str, dict[str, Any]]) -> None:
        """Persist a mapping of string keys to records."""
        self._save(name, dict(mapping))

    def _get_path(self, name: str) -> Path:
        return self.state_dir / f"{name}.yaml"

    def _load(self, name: str) -> Any:
        path = self._get_path(name)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def _save(self, name: str, data: Any) -> None:
        path = self._get_path(name)
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.state_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    yaml.safe_dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=True)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not write %s: %s", path, e)
