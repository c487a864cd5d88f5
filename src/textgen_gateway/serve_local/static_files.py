"""Static file serving for the local dev server."""
from __future__ import annotations
from pathlib import Path

from fastapi.responses import FileResponse, PlainTextResponse, Response

MIME = {
    ".css": "text/css; charset=utf-8",
    ".html": "text/html; charset=utf-8",
    ".ico": "image/x-icon",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".js": "text/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".txt": "text/plain; charset=utf-8",
    ".webp": "image/webp",
}


def resolve_safe_path(root: Path, url_path: str) -> Path | None:
    """
    Resolve an already percent-decoded URL path to a file path under root.

    Returns None when the result would escape root or touches a hidden
    segment such as ``.env``.
    """
    clean = url_path.split("?", 1)[0]
    relative = "index.html" if clean == "/" else clean.lstrip("/")
    if any(part.startswith(".") for part in Path(relative).parts):
        return None
    base = root.resolve()
    candidate = (base / relative).resolve()
    if not candidate.is_relative_to(base):
        return None
    return candidate


def serve_static(root: Path, url_path: str) -> Response:
    path = resolve_safe_path(root, url_path)
    if path is None or not path.is_file():
        return PlainTextResponse("Not Found", status_code=404)
    content_type = MIME.get(path.suffix.lower(), "application/octet-stream")
    return FileResponse(path, media_type=content_type)
