# checktable/api/endpoints/table.py
import logging

import orjson
from fastapi import APIRouter, Depends, Response, status
from starlette.concurrency import run_in_threadpool

from checktable.api.dependencies import get_request_body, get_table_store
from checktable.core.errors import MalformedRequest
from checktable.services.edit_service import get_table, update_cell
from checktable.services.table_store import TableStore

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["table"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, PATCH, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def parse_cell_value(body: bytes) -> str:
    """
    Extract ``value`` from an update request body.

    An empty body or a missing key means an empty value.
    """
    if not body:
        return ""

    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError:
        raise MalformedRequest("Invalid JSON in request")

    if not isinstance(payload, dict):
        raise MalformedRequest("Request body must be a JSON object")

    value = payload.get("value", "")
    if not isinstance(value, str):
        raise MalformedRequest("Field 'value' must be a string")
    return value


@router.get("/data")
async def get_table_data(store: TableStore = Depends(get_table_store)):
    """Return the full table"""
    return await run_in_threadpool(get_table, store)


@router.patch("/rows/{row_id}/columns/{column_key}")
async def update_cell_endpoint(
        row_id: str,
        column_key: str,
        body: bytes = Depends(get_request_body),
        store: TableStore = Depends(get_table_store)
):
    """Set the value of a single checkbox cell"""
    value = parse_cell_value(body)
    row = await run_in_threadpool(update_cell, store, row_id, column_key, value)
    return {"success": True, "row": row}


@router.options("/{api_path:path}", include_in_schema=False)
async def api_preflight(api_path: str):
    """Answer CORS preflight requests for every API route"""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)
