# checktable/client/__init__.py
from checktable.client.api import ClientError, TableApiClient
from checktable.client.cell import CellBusy, CellState, CheckboxCell, format_today
from checktable.client.view import TableView

__all__ = [
    "CellBusy",
    "CellState",
    "CheckboxCell",
    "ClientError",
    "TableApiClient",
    "TableView",
    "format_today",
]
