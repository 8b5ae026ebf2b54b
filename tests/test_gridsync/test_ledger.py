"""Tests for the pending-save ledger and sort state."""

from gridsync.ledger import PendingSave, PendingSaveLedger, ledger_key
from gridsync.state import SortState


def _save(pk, column="Name", new_value="x", row=0):
    return PendingSave(
        row_index=row,
        col_index=1,
        column_name=column,
        old_value="old",
        new_value=new_value,
        primary_key_value=pk,
    )


class TestPendingSaveLedger:
    """Test ledger bookkeeping."""

    def test_key_format(self):
        assert ledger_key(7, "Name") == "7:Name"
        assert _save(7).key == "7:Name"

    def test_one_entry_per_cell(self):
        ledger = PendingSaveLedger()
        first = _save(7, new_value="a")
        second = _save(7, new_value="b")

        assert ledger.record(first) is None
        assert ledger.record(second) is first
        assert len(ledger) == 1
        assert ledger.get(7, "Name") is second

    def test_distinct_cells(self):
        ledger = PendingSaveLedger()
        ledger.record(_save(7, "Name"))
        ledger.record(_save(7, "Age"))
        ledger.record(_save(8, "Name"))

        assert len(ledger) == 3
        assert set(ledger.for_row(7)) == {"Name", "Age"}

    def test_for_row_matches_by_text(self):
        ledger = PendingSaveLedger()
        ledger.record(_save(7))

        assert set(ledger.for_row("7")) == {"Name"}
        assert ledger.get("7", "Name") is not None

    def test_pop(self):
        ledger = PendingSaveLedger()
        entry = _save(7)
        ledger.record(entry)

        assert ledger.pop(7, "Name") is entry
        assert ledger.pop(7, "Name") is None
        assert "7:Name" not in ledger

    def test_iter_and_clear(self):
        ledger = PendingSaveLedger()
        ledger.record(_save(1))
        ledger.record(_save(2))

        assert [entry.primary_key_value for entry in ledger] == [1, 2]

        ledger.clear()
        assert len(ledger) == 0


class TestSortState:
    """Test the sort cycle."""

    def test_cycle(self):
        sort = SortState()

        sort.toggle("Name")
        assert (sort.column, sort.direction) == ("Name", "asc")
        sort.toggle("Name")
        assert (sort.column, sort.direction) == ("Name", "desc")
        sort.toggle("Name")
        assert (sort.column, sort.direction) == (None, None)

    def test_new_column_starts_ascending(self):
        sort = SortState(column="Name", direction="desc")

        sort.toggle("Age")

        assert (sort.column, sort.direction) == ("Age", "asc")
