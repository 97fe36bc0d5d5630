"""Helpers for running the Mealsync ASGI application under uvicorn."""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import uvicorn

from mealsync.config import get_settings

APP_PATH = "mealsync.server.app:app"


async def _serve_with_duration(server: uvicorn.Server, duration: float) -> None:
    """Run the server and shut it down after the specified duration."""

    async def _shutdown() -> None:
        await asyncio.sleep(duration)
        server.should_exit = True

    asyncio.create_task(_shutdown())
    await server.serve()


def _parse_duration(value: str | None) -> Optional[float]:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid MEALSYNC_SERVER_DURATION '{value}': {exc}") from exc
    if parsed <= 0:
        raise SystemExit("MEALSYNC_SERVER_DURATION must be greater than 0 when provided.")
    return parsed


def serve(
    host: Optional[str] = None,
    port: Optional[int] = None,
    *,
    reload: bool = False,
    duration: Optional[float] = None,
) -> None:
    """Run the API server, optionally stopping after ``duration`` seconds."""

    settings = get_settings()
    host = host or settings.server_host
    port = port or settings.server_port

    if reload and duration is not None:
        raise SystemExit("Reload cannot be combined with a server duration.")

    if reload:
        uvicorn.run(APP_PATH, host=host, port=port, reload=True)
        return

    server = uvicorn.Server(uvicorn.Config(APP_PATH, host=host, port=port, reload=False))
    if duration is not None:
        asyncio.run(_serve_with_duration(server, duration))
        return
    server.run()


def main() -> None:
    serve(
        reload=os.environ.get("RELOAD") == "1",
        duration=_parse_duration(os.environ.get("MEALSYNC_SERVER_DURATION")),
    )


if __name__ == "__main__":
    main()
