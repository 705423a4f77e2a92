# -*- coding: utf-8 -*-
"""Console entry point: configure logging and serve the API with uvicorn."""

from __future__ import annotations

import logging
import os

from .config import settings


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = os.environ.get("HEALTHTRACK_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("HEALTHTRACK_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("healthtrack.api:app", host=host, port=port, reload=False, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
