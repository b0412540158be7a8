# checktable/services/table_store.py
import logging
import os
import stat
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

import orjson
from pydantic import ValidationError

from checktable.core.errors import StorageError
from checktable.models.table import Table

# Set up logging
logger = logging.getLogger(__name__)

# One lock per document file, shared by every store pointing at it
_document_locks: Dict[Path, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _registry_lock:
        lock = _document_locks.get(path)
        if lock is None:
            lock = _document_locks[path] = threading.Lock()
        return lock


class TableStore:
    """
    Whole-document storage for the table.

    Every read goes to disk; nothing is cached between calls. Writes replace
    the file in one rename so readers never see a partial document.

    Writers inside one process are serialized through ``transaction``. Separate
    processes sharing the file are not coordinated and the last writer wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path).resolve()
        self._lock = _lock_for(self.path)

    def read(self) -> Table:
        """Load and type check the document"""
        try:
            content = self.path.read_bytes()
        except FileNotFoundError:
            logger.error(f"Table data file not found: {self.path}")
            raise StorageError("Table data file not found")
        except OSError as e:
            logger.error(f"Error reading table data file {self.path}: {str(e)}")
            raise StorageError("Table data file could not be read")

        try:
            return Table.model_validate(orjson.loads(content))
        except orjson.JSONDecodeError as e:
            logger.error(f"Table data file {self.path} is not valid JSON: {str(e)}")
            raise StorageError("Table data file is corrupt")
        except ValidationError as e:
            logger.error(f"Table data file {self.path} has an unexpected shape: {str(e)}")
            raise StorageError("Table data file is corrupt")

    def write(self, table: Table) -> None:
        """Rewrite the whole document, pretty-printed"""
        payload = orjson.dumps(
            table.to_document(),
            option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE
        )

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600; keep the document's own permissions
            if self.path.exists():
                os.chmod(tmp_name, stat.S_IMODE(self.path.stat().st_mode))
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Error writing table data file {self.path}: {str(e)}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError("Table data file could not be written")

    @contextmanager
    def transaction(self) -> Iterator[Table]:
        """
        Read-modify-write under the document lock.

        The table is written back only when the block finishes without raising,
        so a failed check leaves the file untouched.
        """
        with self._lock:
            table = self.read()
            yield table
            self.write(table)

    def initialize(self) -> bool:
        """Create an empty document if none exists. Returns True when created."""
        with self._lock:
            if self.path.exists():
                return False
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.write(Table(columns=[], rows=[]))
            logger.info(f"Created empty table document at {self.path}")
            return True
