"""Untyped intermediate record produced by file parsers.

Parsers never build ``Game`` objects directly. They produce candidate
records whose shape is not trusted until ``GameValidator`` has checked and
converted them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CandidateRecord:
    """A loosely-typed record keyed by wire field names.

    Attributes:
        data: Raw field values as parsed (strings, numbers, lists, ...).
        source: Format the record was parsed from.
        position: 1-based position in the source file.
    """

    data: dict[str, Any] = field(default_factory=dict)
    source: str = "json"
    position: int = 0

    @classmethod
    def from_raw(cls, raw: Any, source: str, position: int) -> "CandidateRecord":
        """Wrap a parsed value. Non-mapping values yield an empty record."""
        data = dict(raw) if isinstance(raw, dict) else {}
        return cls(data=data, source=source, position=position)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    @property
    def title_hint(self) -> str:
        """Best-effort title for error messages."""
        title = self.data.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        return "Unknown title"
