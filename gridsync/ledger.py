"""Pending-save ledger: in-flight cell saves keyed by primary key and column."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional


def ledger_key(primary_key_value: Any, column_name: str) -> str:
    return f"{primary_key_value}:{column_name}"


@dataclass
class PendingSave:
    """
    One optimistic cell save awaiting the server.

    ``row_index`` and ``col_index`` are where the cell was when the save was
    sent; they are hints only, since the page may have changed since.
    ``seq`` numbers saves in the order they were sent and is echoed back in
    the result, so a result can be matched to the exact request.
    """

    row_index: int
    col_index: int
    column_name: str
    old_value: Any
    new_value: Any
    primary_key_value: Any
    seq: int = 0

    @property
    def key(self) -> str:
        return ledger_key(self.primary_key_value, self.column_name)


class PendingSaveLedger:
    """At most one entry per key; a newer save for the same cell replaces the older."""

    def __init__(self):
        self._entries: Dict[str, PendingSave] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[PendingSave]:
        return iter(list(self._entries.values()))

    def record(self, entry: PendingSave) -> Optional[PendingSave]:
        """Store ``entry`` and return the entry it superseded, if any."""
        previous = self._entries.get(entry.key)
        self._entries[entry.key] = entry
        return previous

    def get(self, primary_key_value: Any, column_name: str) -> Optional[PendingSave]:
        return self._entries.get(ledger_key(primary_key_value, column_name))

    def pop(self, primary_key_value: Any, column_name: str) -> Optional[PendingSave]:
        return self._entries.pop(ledger_key(primary_key_value, column_name), None)

    def for_row(self, primary_key_value: Any) -> Dict[str, PendingSave]:
        """Pending entries of one row, by column name."""
        # Keys compare by text, so 7 and "7" are the same row
        return {
            entry.column_name: entry
            for entry in self._entries.values()
            if str(entry.primary_key_value) == str(primary_key_value)
        }

    def clear(self) -> None:
        self._entries.clear()
