"""API server entrypoint.

Run with `python -m src.api.main`, or point an ASGI server at `src.api.main:app`.
"""

from __future__ import annotations

import uvicorn

from src.api.api_config import get_api_config
from src.api.app import app

__all__ = ["app", "run"]


def run() -> None:
    config = get_api_config()
    uvicorn.run("src.api.main:app", host=config.host, port=config.port)


if __name__ == "__main__":
    run()
