"""
Queue sequence: the yearly counter behind human-facing queue numbers.

    >>> QueueSequence(year=2025, n=41).advance(2025)
    QueueSequence(year=2025, n=42)
    >>> QueueSequence(year=2025, n=41).advance(2026)
    QueueSequence(year=2026, n=1)
    >>> format_queue_number(7)
    'Q-007'
"""

from dataclasses import dataclass
from typing import Any, Optional

from .. import config


@dataclass(frozen=True)
class QueueSequence:
    year: int
    n: int = 0

    def advance(self, year: int) -> "QueueSequence":
        """Next counter value; a different calendar year starts over at 1."""
        if year != self.year:
            return QueueSequence(year=year, n=1)
        return QueueSequence(year=self.year, n=self.n + 1)

    def to_doc(self) -> dict:
        return {"year": self.year, "n": self.n}

    @classmethod
    def from_doc(cls, doc: Any) -> Optional["QueueSequence"]:
        """Read a stored counter; anything unreadable yields None."""
        if not isinstance(doc, dict):
            return None
        year = doc.get("year", doc.get("y"))
        n = doc.get("n")
        if not isinstance(year, int) or not isinstance(n, int) or n < 0:
            return None
        return cls(year=year, n=n)


def format_queue_number(n: int, prefix: Optional[str] = None) -> str:
    """Prefix plus the counter zero-padded to three digits."""
    if prefix is None:
        prefix = config.QUEUE_PREFIX
    return f"{prefix}{n:03d}"
