"""Plain state records held by the edit engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CellPosition:
    row: int
    col: int


class CellStatus(str, Enum):
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


@dataclass
class CellFlag:
    """Visual state of one cell; ``hint`` explains an error."""

    status: CellStatus
    hint: Optional[str] = None


@dataclass
class EditSession:
    """The cell currently open for text editing."""

    position: CellPosition
    original_value: Any
    text: str


@dataclass
class Notification:
    """A dismissible message for the user."""

    id: int
    message: str
    code: Optional[str] = None
    context: Optional[str] = None


@dataclass
class SortState:
    """
    Sort column and direction.

    Selecting the sorted column again cycles asc -> desc -> unsorted; selecting
    another column starts over at asc.
    """

    column: Optional[str] = None
    direction: Optional[str] = None

    def toggle(self, column: str) -> None:
        if column != self.column or self.direction is None:
            self.column, self.direction = column, "asc"
        elif self.direction == "asc":
            self.direction = "desc"
        else:
            self.column, self.direction = None, None


@dataclass
class StagedRow:
    """A row created locally and not yet inserted."""

    row_id: int
    values: Dict[str, Any] = field(default_factory=dict)
    saving: bool = False
    error: Optional[str] = None
