# checktable/client/view.py
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Union

from checktable.client.api import ClientError, TableApiClient
from checktable.client.cell import CheckboxCell
from checktable.client.templates import templates
from checktable.models.table import ColumnType, NAME_COLUMN_KEY

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "—"
SAVED_MESSAGE = "Changes saved"
REFRESHED_MESSAGE = "Data refreshed"


@dataclass
class Status:
    message: str = ""
    kind: Optional[str] = None  # "success", "error" or None


@dataclass
class TextCell:
    column_key: str
    column_type: str
    text: str
    is_empty: bool = False


@dataclass
class RenderedRow:
    row_id: str
    cells: List[Union[TextCell, CheckboxCell]] = field(default_factory=list)


def render_text_cell(column: Dict[str, Any], value: Any) -> TextCell:
    """Blank for the name column, a placeholder for other empty text cells"""
    key = column["key"]
    if key == NAME_COLUMN_KEY:
        return TextCell(key, column["type"], value or "")
    if value:
        return TextCell(key, column["type"], str(value))
    return TextCell(key, column["type"], EMPTY_PLACEHOLDER, is_empty=True)


class TableView:
    """
    Client-side model of the table page.

    Holds the session copy of the table, the rendered cells and the status
    line. The copy is only ever updated from server responses.
    """

    def __init__(self, api: TableApiClient, today: Callable[[], date] = date.today):
        self.api = api
        self.today = today
        self.table: Optional[Dict[str, Any]] = None
        self.headers: List[str] = []
        self.rows: List[RenderedRow] = []
        self.status = Status()
        self.loading = False
        self.refresh_disabled = False

    def set_status(self, message: str = "", kind: Optional[str] = None) -> None:
        self.status = Status(message, kind)

    async def load_and_render(self, announce_success: bool = False) -> None:
        """Fetch the table and replace the rendered view"""
        self.loading = True
        self.refresh_disabled = True
        try:
            table = await self.api.get_table()
            self.table = table
            self.render_table(table)
            self.set_status(REFRESHED_MESSAGE if announce_success else "")
        except ClientError as e:
            logger.warning(f"Loading table failed: {e.message}")
            self.set_status(e.message, "error")
        finally:
            self.loading = False
            self.refresh_disabled = False

    def render_table(self, table: Dict[str, Any]) -> None:
        columns = table.get("columns", [])
        self.headers = [column["label"] for column in columns]
        self.rows = []

        for row in table.get("rows", []):
            rendered = RenderedRow(row_id=row["id"])
            for column in columns:
                key = column["key"]
                value = row.get(key)
                if column["type"] == ColumnType.TEXT.value:
                    rendered.cells.append(render_text_cell(column, value))
                elif column["type"] == ColumnType.CHECKBOX.value:
                    rendered.cells.append(CheckboxCell.from_value(
                        row["id"], key, value,
                        aria_label=f"{row.get(NAME_COLUMN_KEY, '')}: {column['label']}"
                    ))
                else:
                    text = "" if value is None else str(value)
                    rendered.cells.append(TextCell(key, column["type"], text))
            self.rows.append(rendered)

    def find_cell(self, row_id: str, column_key: str) -> Optional[CheckboxCell]:
        for row in self.rows:
            if row.row_id != row_id:
                continue
            for cell in row.cells:
                if isinstance(cell, CheckboxCell) and cell.column_key == column_key:
                    return cell
        return None

    async def toggle(self, row_id: str, column_key: str, checked: bool) -> CheckboxCell:
        """Toggle a rendered checkbox cell by row id and column key"""
        cell = self.find_cell(row_id, column_key)
        if cell is None:
            raise KeyError(f"No checkbox cell {row_id}/{column_key}")
        await self.on_checkbox_toggle(cell, checked)
        return cell

    async def on_checkbox_toggle(self, cell: CheckboxCell, checked: bool) -> None:
        """
        Optimistically apply a checkbox change, then settle it with the server.

        The cell shows today's date (or nothing) and is disabled while the
        request runs. On success the server's value is merged into the session
        copy; on failure the cell goes back to what it showed before. The cell
        is enabled again either way.
        """
        desired = cell.begin(checked, self.today())
        try:
            payload = await self.api.update_cell(cell.row_id, cell.column_key, desired)
        except ClientError as e:
            cell.roll_back()
            self.set_status(e.message, "error")
        else:
            server_value = self._merge_row(cell, payload.get("row"))
            cell.reconcile(server_value)
            self.set_status(SAVED_MESSAGE, "success")
        finally:
            cell.finish()

    def _merge_row(self, cell: CheckboxCell, server_row: Optional[Dict[str, Any]]) -> Optional[str]:
        """Copy the persisted value into the session table and return it"""
        if not isinstance(server_row, dict):
            return None
        value = server_row.get(cell.column_key, "")
        if self.table:
            for row in self.table.get("rows", []):
                if row.get("id") == cell.row_id:
                    row[cell.column_key] = value
                    break
        return value

    def to_html(self) -> str:
        """Markup of the status line and the table"""
        return templates.get_template("table.html").render(
            headers=self.headers,
            rows=self.rows,
            status=self.status,
        )

    def to_text(self) -> str:
        """Plain text rendering for terminals"""
        lines = [self.headers]
        for row in self.rows:
            line = []
            for cell in row.cells:
                if isinstance(cell, CheckboxCell):
                    line.append(f"[{'x' if cell.checked else ' '}] {cell.value}".rstrip())
                else:
                    line.append(cell.text)
            lines.append(line)

        widths = [max(len(str(line[i])) for line in lines if i < len(line)) for i in range(len(self.headers))]
        rendered = [
            "  ".join(str(value).ljust(widths[i]) for i, value in enumerate(line)).rstrip()
            for line in lines
        ]
        if self.status.message:
            rendered.append("")
            rendered.append(self.status.message)
        return "\n".join(rendered)
