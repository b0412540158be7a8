# checktable/services/edit_service.py
import logging
from typing import Any, Dict

from checktable.core.errors import InvalidOperation, NotFound
from checktable.services.table_store import TableStore

# Set up logging
logger = logging.getLogger(__name__)


def get_table(store: TableStore) -> Dict[str, Any]:
    """Return the current table, read fresh from storage"""
    return store.read().to_document()


def update_cell(store: TableStore, row_id: str, column_key: str, value: str) -> Dict[str, Any]:
    """
    Set one checkbox cell and persist the whole table.

    Only checkbox columns can be changed here; text cells are read-only through
    the API. The value is stored as given, date formatting is left to the client.
    Returns the updated row.
    """
    with store.transaction() as table:
        column = table.find_column(column_key)
        if column is None:
            logger.warning(f"Update rejected: unknown column {column_key!r}")
            raise NotFound("Column not found")

        if not column.is_checkbox:
            logger.warning(f"Update rejected: column {column_key!r} has type {column.type!r}")
            raise InvalidOperation("Column cannot be updated through this method")

        row = table.find_row(row_id)
        if row is None:
            logger.warning(f"Update rejected: unknown row {row_id!r}")
            raise NotFound("Row not found")

        old_value = row.get(column_key, "")
        row[column_key] = value

    log_data_change(row_id, column_key, old_value, value)
    return dict(row)


def log_data_change(row_id: str, column_key: str, old_value: Any, new_value: Any) -> None:
    """Record a persisted cell change"""
    logger.info(f"UPDATE | {row_id} | {column_key} | {old_value!r} -> {new_value!r}")
