# checktable/api/endpoints/assets.py
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from checktable.core.config import Settings, get_settings
from checktable.services.static_service import resolve_asset

router = APIRouter(tags=["assets"])

# Any request no API route claims is an asset lookup, whatever its method
ASSET_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/{asset_path:path}", methods=ASSET_METHODS, include_in_schema=False)
async def serve_asset(asset_path: str, settings: Settings = Depends(get_settings)):
    """Serve a file from the public directory; ``/`` is the index document"""
    path, media_type = resolve_asset(settings.public_dir, asset_path)
    return FileResponse(path, media_type=media_type)
