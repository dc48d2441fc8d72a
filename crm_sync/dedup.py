"""Per-ingestion set of normalized emails used for duplicate suppression."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Record


def normalize(email: str) -> str:
    """Comparison key for an email: trimmed and lowercased."""
    return email.strip().lower()


class DedupSnapshot:
    """Normalized emails known to be in the store.

    Built from one read of the store and then kept current by :meth:`add`
    after each successful append, since the store is not re-read mid-batch.
    Owned by a single ingestion call.
    """

    def __init__(self, emails: Iterable[str] = ()) -> None:
        self._emails: set[str] = {normalize(e) for e in emails}

    @classmethod
    def build(cls, records: Iterable[Record]) -> DedupSnapshot:
        return cls(record.email for record in records)

    def contains(self, candidate: str) -> bool:
        return normalize(candidate) in self._emails

    def add(self, candidate: str) -> None:
        self._emails.add(normalize(candidate))

    def __contains__(self, candidate: object) -> bool:
        return isinstance(candidate, str) and self.contains(candidate)

    def __len__(self) -> int:
        return len(self._emails)
