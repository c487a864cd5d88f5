"""Local dev server: FastAPI app hosting the gateway handlers and static files.

Routes:
- POST /api/<provider>  { "prompt": "...", "systemInstruction": "...", "isJson": false }
- anything else         static file under the configured root
"""
from __future__ import annotations
import argparse
import json
import logging
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from textgen_gateway.common.config import GatewaySettings
from textgen_gateway.common.logging_setup import setup_logging
from textgen_gateway.common.transport import InboundRequest, ResponseAlreadySent
from textgen_gateway.gateway.handler import INVALID_JSON, GatewayHandler, build_handlers
from textgen_gateway.serve_local.static_files import serve_static

LOGGER = logging.getLogger("textgen_gateway.serve_local")

API_PREFIX = "/api/"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class FastAPIResponseSink:
    """Collects status and headers, then turns the payload into a JSONResponse."""

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.response: JSONResponse | None = None

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def status(self, code: int) -> "FastAPIResponseSink":
        self.status_code = code
        return self

    def json(self, payload: dict[str, Any]) -> None:
        if self.response is not None:
            raise ResponseAlreadySent("response already sent")
        self.response = JSONResponse(payload, status_code=self.status_code, headers=self.headers)


async def run_api_handler(handler: GatewayHandler, request: Request) -> Response:
    raw_body = (await request.body()).decode("utf-8", errors="replace")
    parsed_body: Any = {}
    # Non-POST requests go straight to the handler, which answers 405.
    if request.method.upper() == "POST" and raw_body.strip():
        try:
            parsed_body = json.loads(raw_body)
        except ValueError:
            return JSONResponse({"error": INVALID_JSON}, status_code=400)

    shim_request = InboundRequest(
        method=request.method,
        body=parsed_body,
        headers=dict(request.headers),
    )
    sink = FastAPIResponseSink()
    try:
        await run_in_threadpool(handler.handle, shim_request, sink)
    except Exception:
        if sink.response is None:
            raise
        LOGGER.exception("Handler failed after responding on %s", request.url.path)
    if sink.response is None:
        raise RuntimeError(f"handler for {request.url.path} finished without responding")
    return sink.response


def create_app(settings: GatewaySettings, handlers: dict[str, GatewayHandler] | None = None) -> FastAPI:
    """
    Build the app for one settings value.

    Args:
        settings: Process-wide settings, built once at startup.
        handlers: Provider name -> handler; defaults to every known provider.
    """
    routes = {
        f"{API_PREFIX}{name}": handler
        for name, handler in (handlers if handlers is not None else build_handlers(settings)).items()
    }
    static_root = Path(settings.static_root)

    app = FastAPI(title="Text Generation Gateway", version="0.1.0")
    app.state.settings = settings

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def dispatch(request: Request) -> Response:
        try:
            handler = routes.get(request.url.path)
            if handler is not None:
                return await run_api_handler(handler, request)
            return serve_static(static_root, request.url.path)
        except Exception as e:
            LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                {"error": "Local dev server error.", "details": str(e)},
                status_code=500,
            )

    return app


def main() -> None:
    ap = argparse.ArgumentParser(description="Run the text generation gateway locally")
    ap.add_argument("--host", default=None, help="Bind address (default: HOST or 127.0.0.1)")
    ap.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3000)")
    ap.add_argument("--static-root", default=None, help="Directory served for non-API paths")
    args = ap.parse_args()

    overrides: dict[str, Any] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.static_root is not None:
        overrides["static_root"] = args.static_root
    settings = GatewaySettings(**overrides)

    setup_logging(settings.log_level)
    app = create_app(settings)
    LOGGER.info("Local dev server running at http://localhost:%s", settings.port)
    LOGGER.info("Serving static files from %s", Path(settings.static_root).resolve())
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    main()
