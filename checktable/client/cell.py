# checktable/client/cell.py
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

DATE_FORMAT = "%d.%m.%y"


def format_today(today: Optional[date] = None) -> str:
    """Check date as DD.MM.YY"""
    return (today or date.today()).strftime(DATE_FORMAT)


class CellState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


class CellBusy(Exception):
    """A toggle was attempted while the previous one is still in flight"""


@dataclass
class CheckboxCell:
    """
    View state of one checkbox cell and its optimistic update cycle.

    A toggle goes ``IDLE -> PENDING -> RECONCILED | ROLLED_BACK -> IDLE``.
    ``begin`` applies the optimistic change and locks the input, ``reconcile``
    or ``roll_back`` settles it, ``finish`` unlocks it again.
    """
    column_type = "checkbox"

    row_id: str
    column_key: str
    value: str = ""
    checked: bool = False
    disabled: bool = False
    aria_label: str = ""
    state: CellState = CellState.IDLE
    outcome: Optional[CellState] = None

    _previous_value: str = field(default="", init=False, repr=False)
    _previous_checked: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_value(cls, row_id: str, column_key: str, value, aria_label: str = "") -> "CheckboxCell":
        text = value or ""
        return cls(row_id=row_id, column_key=column_key, value=text,
                   checked=bool(text), aria_label=aria_label)

    @property
    def pending(self) -> bool:
        return self.state is CellState.PENDING

    def begin(self, checked: bool, today: Optional[date] = None) -> str:
        """Apply the optimistic change and return the value to send"""
        if self.pending:
            raise CellBusy(f"{self.row_id}/{self.column_key} is being saved")

        self._previous_value = self.value
        self._previous_checked = bool(self._previous_value)

        desired = format_today(today) if checked else ""
        self.checked = checked
        self.value = desired
        self.disabled = True
        self.state = CellState.PENDING
        return desired

    def reconcile(self, server_value: Optional[str] = None) -> None:
        """The server stored the change; its value wins"""
        if server_value is not None:
            self.value = server_value
            self.checked = bool(server_value)
        self.state = CellState.RECONCILED

    def roll_back(self) -> None:
        """Restore what was shown before the toggle"""
        self.value = self._previous_value
        self.checked = self._previous_checked
        self.state = CellState.ROLLED_BACK

    def finish(self) -> None:
        self.outcome = self.state if self.state is not CellState.PENDING else None
        self.disabled = False
        self.state = CellState.IDLE
