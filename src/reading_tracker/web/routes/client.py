"""Static client page."""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter(tags=["client"])


@router.get("/", include_in_schema=False)
async def index() -> FileResponse:
    """Serve the browser client."""
    return FileResponse(STATIC_DIR / "index.html")
