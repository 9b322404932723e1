"""User-maintained ignore list and label exclusions."""

from typing import Iterator

from pr_monitor.core.storage import EXCLUDED_LABELS, IGNORED_ITEMS, StateStore


class _PersistedSet:
    """Set of strings written through to a named collection on every change."""

    collection = ""

    def __init__(self, store: StateStore) -> None:
        self.store = store
        self._values = store.load_set(self.collection)

    def reload(self) -> None:
        """Re-read the collection so changes made by other processes show up."""
        self._values = self.store.load_set(self.collection)

    def add(self, value: str) -> None:
        self.reload()
        if value in self._values:
            return
        self._values = self._values | {value}
        self._save()

    def remove(self, value: str) -> None:
        self.reload()
        if value not in self._values:
            return
        self._values = self._values - {value}
        self._save()

    def clear(self) -> None:
        self._values = set()
        self._save()

    def items(self) -> list[str]:
        """Return stored values in sorted order."""
        return sorted(self._values)

    def as_set(self) -> frozenset[str]:
        return frozenset(self._values)

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._values)

    def _save(self) -> None:
        self.store.save_set(self.collection, self._values)


class IgnoreList(_PersistedSet):
    """Ignored pull requests by ``owner:repo:number`` key."""

    collection = IGNORED_ITEMS

    def is_ignored(self, key: str) -> bool:
        return key in self._values


class ExcludedLabels(_PersistedSet):
    """Label names that hide a pull request entirely."""

    collection = EXCLUDED_LABELS

    def is_excluded(self, label: str) -> bool:
        return label in self._values

    def toggle(self, label: str) -> bool:
        """Flip exclusion of a label. Returns True when it is now excluded."""
        self.reload()
        if label in self._values:
            self.remove(label)
            return False
        self.add(label)
        return True
