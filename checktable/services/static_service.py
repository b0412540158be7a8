# checktable/services/static_service.py
import logging
import mimetypes
from pathlib import Path
from typing import Tuple

from checktable.core.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"
DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".ico": "image/x-icon",
}


def media_type_for(path: Path) -> str:
    """Content type derived from the file extension"""
    ext = path.suffix.lower()
    if ext in MIME_TYPES:
        return MIME_TYPES[ext]
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_MIME_TYPE


def resolve_asset(root: Path, request_path: str) -> Tuple[Path, str]:
    """
    Map a request path onto a file below ``root``.

    Raises Forbidden when the path points outside the root and NotFound when
    there is no such file. Directories resolve to their index document.
    """
    root = Path(root).resolve()
    relative = request_path.lstrip("/") or INDEX_DOCUMENT

    try:
        candidate = (root / relative).resolve()
    except (OSError, ValueError) as e:
        logger.debug(f"Unresolvable asset path {request_path!r}: {str(e)}")
        raise NotFound()

    if candidate != root and root not in candidate.parents:
        logger.warning(f"Blocked asset request outside public root: {request_path!r}")
        raise Forbidden()

    if candidate.is_dir():
        candidate = candidate / INDEX_DOCUMENT

    if not candidate.is_file():
        raise NotFound()

    return candidate, media_type_for(candidate)
