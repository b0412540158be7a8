# checktable/api/dependencies.py
from fastapi import Depends, Request

from checktable.core.config import Settings, get_settings
from checktable.core.errors import MalformedRequest, PayloadTooLarge
from checktable.services.table_store import TableStore


def get_table_store(settings: Settings = Depends(get_settings)) -> TableStore:
    """Store for the configured table document"""
    return TableStore(settings.data_file)


async def get_request_body(
        request: Request,
        settings: Settings = Depends(get_settings)
) -> bytes:
    """Read the raw request body, refusing oversized payloads"""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            if int(declared) > settings.MAX_BODY_BYTES:
                raise PayloadTooLarge()
        except ValueError:
            raise MalformedRequest("Invalid Content-Length header")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > settings.MAX_BODY_BYTES:
            raise PayloadTooLarge()
    return bytes(body)
